"""
@file: models.py
@description:
This file defines the SQLAlchemy ORM model for the `predictions` table, which
stores AI-generated football match predictions and their lifecycle state.

@notes:
- The table is created from this model by init_db.py; runtime reads and
  writes go through the Supabase client.
- `fixture_key` + `reuse_bucket` back a partial unique index that allows only
  one in-flight (`processing`) job per fixture and UTC day.

@dependencies:
- SQLAlchemy: for defining ORM models.
- pitchside.db.base: provides the Base class (declarative_base).
"""

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, String, func, text
from sqlalchemy.dialects.postgresql import JSONB, UUID

from pitchside.db.base import Base

JOB_STATUSES = ("processing", "pending", "won", "lost", "failed")
MATCH_CATEGORIES = ("men", "women")


class PredictionJob(Base):
    """
    @class PredictionJob
    @description
    SQLAlchemy model representing one prediction job for a fixture.

    @attributes:
        id (UUID): Primary key (uuid4).
        team_a (String): Canonical name of the first team.
        team_b (String): Canonical name of the second team.
        match_category (String): 'men' or 'women'.
        status (String): processing, pending, won, lost or failed.
        prediction_data (JSONB): Prediction payload, or {"error": ...} when failed.
        tally (Integer): Number of requests served by this job.
        fixture_key (String): Order-independent "category|team|team" key.
        reuse_bucket (Integer): Reuse-window slot number of creation (UTC day by default).
        created_at (DateTime): Timestamp of creation, defaults to current time.
        updated_at (DateTime): Timestamp of last update.
    """
    __tablename__ = "predictions"
    __table_args__ = (
        CheckConstraint(f"status IN {JOB_STATUSES!r}", name="ck_predictions_status"),
        CheckConstraint(f"match_category IN {MATCH_CATEGORIES!r}", name="ck_predictions_match_category"),
        CheckConstraint("tally >= 1", name="ck_predictions_tally_positive"),
        Index(
            "ix_predictions_pair_recent",
            "team_a", "team_b", "match_category", "created_at",
        ),
        Index("ix_predictions_status_created", "status", "created_at"),
        Index(
            "uq_predictions_in_flight",
            "fixture_key", "reuse_bucket",
            unique=True,
            postgresql_where=text("status = 'processing'"),
        ),
    )

    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
        doc="Primary key using UUID4."
    )
    team_a = Column(String, nullable=False, doc="Canonical name of the first team.")
    team_b = Column(String, nullable=False, doc="Canonical name of the second team.")
    match_category = Column(String, nullable=False, default="men", doc="'men' or 'women'.")
    status = Column(
        String,
        nullable=False,
        default="processing",
        doc="Lifecycle state of the job."
    )
    prediction_data = Column(
        JSONB,
        nullable=False,
        default=dict,
        server_default=text("'{}'::jsonb"),
        doc="Prediction payload, or an error descriptor for failed jobs."
    )
    tally = Column(Integer, nullable=False, default=1, server_default=text("1"))
    fixture_key = Column(String, nullable=True)
    reuse_bucket = Column(Integer, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Timestamp of when the record was created."
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        doc="Timestamp of the last update to this record."
    )
