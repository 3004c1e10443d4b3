"""
@file: prediction_store.py
@description:
This module provides the persistence layer for prediction jobs. It wraps the
Supabase 'predictions' table and exposes the operations the dispatcher, the
generation worker, the status sync worker and the API need.

Key features:
- Reuse lookup: most recent job for an ordered team pair inside a time window
- Job creation with in-flight duplicate detection
- Conditional status transitions (only from the expected current status)
- Pending and resolved job listings for sync and team stats

@dependencies:
- supabase / postgrest: For database interactions.
- pytz: For UTC timestamps.
- pitchside.core.logger: For logging.

@notes:
- Rows are returned as plain dicts with the table's snake_case columns.
- Every failure is re-raised as DatabaseError, except JobNotFoundError and
  DuplicateJobError which callers handle explicitly.
- Tally increments are read-modify-write; concurrent attaches may undercount.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

import pytz
from postgrest.exceptions import APIError

from pitchside.core.exceptions import (
    DatabaseError,
    DuplicateJobError,
    JobNotFoundError,
)
from pitchside.core.logger import setup_logger
from pitchside.schemas.predictions import RESOLVED_STATUSES
from pitchside.services.team_names import fixture_key

logger = setup_logger("pitchside.services.prediction_store")

TABLE_NAME = "predictions"
DEFAULT_REUSE_WINDOW = timedelta(hours=24)
UNIQUE_VIOLATION = "23505"
INVALID_TEXT_REPRESENTATION = "22P02"


def utc_now() -> datetime:
    return datetime.now(pytz.UTC)


def reuse_bucket(moment: datetime, window: timedelta = DEFAULT_REUSE_WINDOW) -> int:
    """
    Index of the window-sized UTC slot holding a timestamp, part of the
    in-flight job unique key.

    Slots are no longer than the reuse window, so an in-flight job that
    blocks an insert is always young enough for the reuse lookup to find.
    """
    return int(moment.astimezone(pytz.UTC).timestamp() // window.total_seconds())


class PredictionStore:
    """
    Supabase-backed store for prediction jobs.
    """

    def __init__(self, client: Any, reuse_window: timedelta = DEFAULT_REUSE_WINDOW):
        self.client = client
        self.reuse_window = reuse_window

    def _table(self):
        return self.client.table(TABLE_NAME)

    def find_recent(self, team_a: str, team_b: str, category: str, since: datetime) -> Optional[Dict[str, Any]]:
        """
        Return the most recent job for (team_a, team_b, category) created at or after `since`.

        The pair is matched in the given order only; callers try both orders.
        """
        try:
            response = (
                self._table()
                .select("*")
                .eq("team_a", team_a)
                .eq("team_b", team_b)
                .eq("match_category", category)
                .gte("created_at", since.isoformat())
                .order("created_at", desc=True)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to look up recent prediction for {team_a} vs {team_b}: {str(e)}")
            raise DatabaseError(f"Failed to look up recent prediction: {str(e)}") from e

        rows = response.data or []
        return rows[0] if rows else None

    def insert_job(self, team_a: str, team_b: str, category: str) -> Dict[str, Any]:
        """
        Create a new job in the `processing` state with an empty payload and tally 1.

        Raises:
            DuplicateJobError: If an in-flight job for the same fixture already exists.
            DatabaseError: If the insert fails for any other reason.
        """
        now = utc_now()
        record_data = {
            "team_a": team_a,
            "team_b": team_b,
            "match_category": category,
            "status": "processing",
            "prediction_data": {},
            "tally": 1,
            "fixture_key": fixture_key(team_a, team_b, category),
            "reuse_bucket": reuse_bucket(now, self.reuse_window),
        }

        try:
            logger.info(f"Creating prediction job for {team_a} vs {team_b} ({category})")
            response = self._table().insert(record_data).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.warning(f"In-flight job already exists for {team_a} vs {team_b} ({category})")
                raise DuplicateJobError(str(e.message)) from e
            logger.error(f"Supabase insertion error: {e.message}")
            raise DatabaseError(f"Failed to create prediction job: {e.message}") from e
        except Exception as e:
            logger.error(f"Failed to create prediction job: {str(e)}")
            raise DatabaseError(f"Failed to create prediction job: {str(e)}") from e

        if not response.data:
            logger.error("Supabase insertion returned no rows")
            raise DatabaseError("Failed to create prediction job: no row returned")

        inserted_row = response.data[0]
        logger.debug(f"Inserted prediction job with ID: {inserted_row['id']}")
        return inserted_row

    def increment_tally(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """
        Count one more request against an existing job.

        Only the tally column is written, so a payload settled in the meantime
        is left as it is.

        Args:
            row: The job row as returned by find_recent.

        Returns:
            Dict[str, Any]: The current row with the new tally applied.
        """
        updates: Dict[str, Any] = {"tally": (row.get("tally") or 0) + 1}

        try:
            response = self._table().update(updates).eq("id", row["id"]).execute()
        except Exception as e:
            logger.error(f"Failed to update tally for job {row['id']}: {str(e)}")
            raise DatabaseError(f"Failed to update prediction tally: {str(e)}") from e

        if response.data:
            return response.data[0]
        return {**row, **updates}

    def get_job(self, job_id: str) -> Dict[str, Any]:
        """
        Fetch a single job by id.

        Raises:
            JobNotFoundError: If no row has this id.
            DatabaseError: If the read fails.
        """
        try:
            response = self._table().select("*").eq("id", job_id).limit(1).execute()
        except APIError as e:
            # Malformed UUIDs are rejected by Postgres before the lookup
            if e.code == INVALID_TEXT_REPRESENTATION:
                raise JobNotFoundError(job_id) from e
            logger.error(f"Failed to fetch job {job_id}: {e.message}")
            raise DatabaseError(f"Failed to fetch prediction: {e.message}") from e
        except Exception as e:
            logger.error(f"Failed to fetch job {job_id}: {str(e)}")
            raise DatabaseError(f"Failed to fetch prediction: {str(e)}") from e

        if not response.data:
            raise JobNotFoundError(job_id)
        return response.data[0]

    def update_status(
        self,
        job_id: str,
        expected_status: str,
        new_status: str,
        prediction_data: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Move a job from `expected_status` to `new_status`.

        The update only applies while the row is still in `expected_status`.

        Returns:
            bool: True if a row was updated.
        """
        updates: Dict[str, Any] = {"status": new_status, "updated_at": utc_now().isoformat()}
        if prediction_data is not None:
            updates["prediction_data"] = prediction_data

        try:
            response = (
                self._table()
                .update(updates)
                .eq("id", job_id)
                .eq("status", expected_status)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to move job {job_id} from {expected_status} to {new_status}: {str(e)}")
            raise DatabaseError(f"Failed to update prediction status: {str(e)}") from e

        updated = bool(response.data)
        if not updated:
            logger.warning(f"Job {job_id} was not in status '{expected_status}'; update to '{new_status}' skipped")
        return updated

    def list_pending(self, since: datetime) -> List[Dict[str, Any]]:
        """Return `pending` jobs created at or after `since`."""
        try:
            response = (
                self._table()
                .select("*")
                .eq("status", "pending")
                .gte("created_at", since.isoformat())
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to list pending predictions: {str(e)}")
            raise DatabaseError(f"Failed to list pending predictions: {str(e)}") from e
        return response.data or []

    def list_resolved_for_team(self, team_name: str) -> List[Dict[str, Any]]:
        """
        Return `won`/`lost` jobs involving the team on either side, newest first.
        """
        rows: Dict[str, Dict[str, Any]] = {}
        try:
            for column in ("team_a", "team_b"):
                response = (
                    self._table()
                    .select("*")
                    .eq(column, team_name)
                    .in_("status", [s.value for s in RESOLVED_STATUSES])
                    .order("created_at", desc=True)
                    .execute()
                )
                for row in response.data or []:
                    rows[str(row["id"])] = row
        except Exception as e:
            logger.error(f"Failed to list resolved predictions for {team_name}: {str(e)}")
            raise DatabaseError(f"Failed to list team predictions: {str(e)}") from e

        return sort_newest_first(rows.values())


def sort_newest_first(rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(rows, key=lambda row: str(row.get("created_at") or ""), reverse=True)
