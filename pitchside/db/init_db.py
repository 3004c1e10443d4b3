"""
Database initialization script.

Creates the `predictions` table, its check constraints and indexes (including
the partial unique index on in-flight jobs) in the Postgres database behind
Supabase. Run this once when setting up a new environment:

    $ python -m pitchside.db.init_db
"""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from pitchside.core.config import settings
from pitchside.core.exceptions import ConfigurationError
from pitchside.core.logger import setup_logger
from pitchside.db.base import Base
from pitchside.db import models  # noqa: F401  registers the predictions table

logger = setup_logger("pitchside.db.init_db")


def get_engine(database_url: Optional[str] = None) -> Engine:
    """Create an engine for the schema bootstrap."""
    database_url = database_url or settings.DATABASE_URL
    if not database_url:
        raise ConfigurationError("DATABASE_URL is not configured.")
    return create_engine(database_url)


def init_db(engine: Optional[Engine] = None) -> None:
    """Initialize the database by creating all tables."""
    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info("Database initialized successfully!")


if __name__ == "__main__":
    init_db()
