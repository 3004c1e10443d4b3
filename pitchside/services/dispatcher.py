"""
@file: dispatcher.py
@description:
Entry point for prediction requests. Decides whether a request can be served
from an existing job or needs a new generation job.

Workflow:
1. Normalize both team names.
2. Look up the newest job for the pair, in either order, inside the reuse window.
3. In-flight job: count the request and hand back the job id to poll.
4. Finished job (pending/won/lost): count the request and return it as cached.
5. Otherwise: create a `processing` job and enqueue generation without waiting.

@dependencies:
- pitchside.services.prediction_store: For job persistence
- pitchside.services.team_names: For canonical team names
- pitchside.core.logger: For logging

@notes:
- A failed job is never reused; a new request starts a fresh job.
- force_refresh skips finished jobs but still attaches to an in-flight one.
"""

from typing import Any, Callable, Dict, Optional

from pitchside.core.config import Settings, settings as default_settings
from pitchside.core.exceptions import DatabaseError, DuplicateJobError
from pitchside.core.logger import setup_logger
from pitchside.schemas.predictions import (
    CACHEABLE_STATUSES,
    DispatchResponse,
    JobStatus,
    MatchCategory,
    PredictionJob,
)
from pitchside.services.prediction_store import PredictionStore, sort_newest_first, utc_now
from pitchside.services.team_names import normalize_team_name

logger = setup_logger("pitchside.services.dispatcher")

EnqueueFn = Callable[[str, str, str, str], Any]

ENQUEUE_FAILED_MESSAGE = "The prediction could not be queued for generation. Please try again."


class PredictionDispatcher:
    """
    Maps prediction requests onto new or existing jobs.

    Args:
        store: The prediction store
        enqueue: Callable that schedules generation for (job_id, team_a, team_b, category)
            and returns without waiting for it
        settings: Application settings (reuse window)
    """

    def __init__(self, store: PredictionStore, enqueue: EnqueueFn, settings: Optional[Settings] = None):
        self.store = store
        self.enqueue = enqueue
        self.settings = settings or default_settings

    def request_job(
        self,
        team_a: str,
        team_b: str,
        category: str = MatchCategory.MEN.value,
        force_refresh: bool = False,
    ) -> DispatchResponse:
        """
        Serve a prediction request from an existing job or start a new one.

        Returns:
            DispatchResponse: `isCached` true with the full job, or false with `{jobId}`.

        Raises:
            DatabaseError: If the lookup or the insert fails.
        """
        team_a = normalize_team_name(team_a)
        team_b = normalize_team_name(team_b)
        category = MatchCategory(category).value

        existing = self._find_existing(team_a, team_b, category)
        if existing is not None:
            status = existing["status"]
            if status == JobStatus.PROCESSING.value:
                logger.info(f"Attaching request to in-flight job {existing['id']}")
                self.store.increment_tally(existing)
                return queued(existing["id"])
            if status in (s.value for s in CACHEABLE_STATUSES) and not force_refresh:
                logger.info(f"Serving cached prediction {existing['id']} ({status})")
                row = self.store.increment_tally(existing)
                data = job_to_dict(row)
                # fromCache describes this response only and is never stored
                data["resultPayload"] = {**(data.get("resultPayload") or {}), "fromCache": True}
                return DispatchResponse(is_cached=True, data=data)

        return self._create_job(team_a, team_b, category)

    def _find_existing(self, team_a: str, team_b: str, category: str) -> Optional[Dict[str, Any]]:
        since = utc_now() - self.settings.REUSE_WINDOW
        candidates = [self.store.find_recent(team_a, team_b, category, since)]
        if team_a != team_b:
            candidates.append(self.store.find_recent(team_b, team_a, category, since))
        rows = sort_newest_first(row for row in candidates if row)
        return rows[0] if rows else None

    def _create_job(self, team_a: str, team_b: str, category: str) -> DispatchResponse:
        try:
            row = self.store.insert_job(team_a, team_b, category)
        except DuplicateJobError:
            existing = self._find_existing(team_a, team_b, category)
            if existing is None or existing["status"] != JobStatus.PROCESSING.value:
                raise DatabaseError("Failed to create prediction job: conflicting job not found")
            logger.info(f"Lost the insert race; attaching to job {existing['id']}")
            self.store.increment_tally(existing)
            return queued(existing["id"])

        job_id = str(row["id"])
        try:
            self.enqueue(job_id, team_a, team_b, category)
            logger.info(f"Enqueued generation for job {job_id}: {team_a} vs {team_b}")
        except Exception as e:
            logger.error(f"Failed to enqueue generation for job {job_id}: {str(e)}")
            self._fail_unqueued(job_id)

        return queued(job_id)

    def _fail_unqueued(self, job_id: str) -> None:
        try:
            self.store.update_status(
                job_id,
                JobStatus.PROCESSING.value,
                JobStatus.FAILED.value,
                {"error": ENQUEUE_FAILED_MESSAGE},
            )
        except DatabaseError as e:
            logger.critical(f"Could not mark unqueued job {job_id} as failed: {str(e)}")


def queued(job_id: Any) -> DispatchResponse:
    return DispatchResponse(is_cached=False, data={"jobId": str(job_id)})


def job_to_dict(row: Dict[str, Any]) -> Dict[str, Any]:
    """Serialize a table row into the camelCase job JSON."""
    return PredictionJob.from_row(row).model_dump(by_alias=True, mode="json")
