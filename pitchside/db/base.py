"""
SQLAlchemy Base Definition Module.

This module defines the SQLAlchemy declarative base that the `predictions`
model inherits from. Its metadata is what init_db.py creates in Postgres.
"""

from sqlalchemy.orm import registry

# Create a new SQLAlchemy mapper registry
mapper_registry = registry()

# Create the base class for declarative class definitions
Base = mapper_registry.generate_base()
