"""
@file: predictions.py
@description:
Provides API endpoints to request, poll and settle football match predictions.

Routes:
- POST /api/v1/predictions : request a prediction (cached result or new job id)
- GET /api/v1/predictions/{job_id} : fetch a prediction job for polling
- POST /api/v1/predictions/sync : settle pending predictions against finished matches
- GET /api/v1/teams/{team_name}/stats : resolved prediction record for a team

@dependencies:
- FastAPI APIRouter for route definitions.
- pitchside.core.context for the configured services.
- Pydantic schemas for validation and serialization.

@notes:
- Team names are validated by the request schema; bad input gets a 422.
- Request and lookup handlers are synchronous so FastAPI runs them in its
  threadpool while the Supabase client blocks.
"""

from fastapi import APIRouter, Depends, HTTPException

from pitchside.api.errors import to_http_exception
from pitchside.core.context import ServiceContext, get_context
from pitchside.core.exceptions import PitchsideError
from pitchside.core.logger import setup_logger
from pitchside.schemas.predictions import (
    DispatchResponse,
    PredictionJob,
    PredictionRequest,
    SyncResponse,
    TeamPerformanceStats,
)
from pitchside.services.team_stats import get_team_stats

# Create a component-specific logger
logger = setup_logger("pitchside.api.predictions")

router = APIRouter()


@router.post("/predictions", response_model=DispatchResponse, tags=["Predictions"])
def request_prediction(
    request_in: PredictionRequest,
    context: ServiceContext = Depends(get_context),
) -> DispatchResponse:
    """
    POST /api/v1/predictions

    Returns the cached prediction when a finished one exists for the fixture
    within the reuse window, otherwise the id of the job to poll.

    Example Request Body:
    {
      "teamA": "Man Utd",
      "teamB": "Liverpool",
      "category": "men"
    }

    Example Response (new or in-flight job):
    {
      "isCached": false,
      "data": {"jobId": "0b6c1c9e-..."}
    }

    Raises:
        HTTPException(422): If the team names are invalid.
        HTTPException(500): If the database or the task queue is unavailable.
    """
    logger.info(f"Prediction requested: {request_in.team_a} vs {request_in.team_b} ({request_in.category.value})")
    try:
        return context.dispatcher.request_job(
            request_in.team_a,
            request_in.team_b,
            request_in.category.value,
            force_refresh=request_in.force_refresh,
        )
    except PitchsideError as e:
        raise to_http_exception(e)


@router.post("/predictions/sync", response_model=SyncResponse, tags=["Predictions"])
async def sync_predictions(context: ServiceContext = Depends(get_context)) -> SyncResponse:
    """
    POST /api/v1/predictions/sync

    Settles pending predictions whose matches have finished.

    Example Response:
    {
      "message": "Sync complete. Checked 4 predictions and updated 1."
    }
    """
    try:
        summary = await context.status_sync.sync_pending_predictions()
    except PitchsideError as e:
        raise to_http_exception(e)
    return SyncResponse(message=summary.message)


@router.get("/predictions/{job_id}", response_model=PredictionJob, tags=["Predictions"])
def get_prediction(job_id: str, context: ServiceContext = Depends(get_context)) -> PredictionJob:
    """
    GET /api/v1/predictions/{job_id}

    Returns the job in its current state; clients poll this until the status
    leaves `processing`.

    Raises:
        HTTPException(404): If no job has this id.
    """
    try:
        row = context.store.get_job(job_id)
    except PitchsideError as e:
        raise to_http_exception(e)
    return PredictionJob.from_row(row)


@router.get("/teams/{team_name}/stats", response_model=TeamPerformanceStats, tags=["Teams"])
def team_stats(team_name: str, context: ServiceContext = Depends(get_context)) -> TeamPerformanceStats:
    """
    GET /api/v1/teams/{team_name}/stats

    Example Response:
    {
      "total": 6,
      "wins": 4,
      "recentOutcomes": ["won", "lost", "won", "won", "won"]
    }
    """
    if not team_name.strip():
        raise HTTPException(status_code=422, detail="Missing required team name.")
    try:
        return get_team_stats(context.store, team_name)
    except PitchsideError as e:
        raise to_http_exception(e)
