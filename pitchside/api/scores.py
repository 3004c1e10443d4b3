"""
@file: scores.py
@description:
Live scores feed for today's soccer matches in the tracked leagues.

Routes:
- GET /api/v1/live-scores : live, half-time and recently finished matches

@dependencies:
- FastAPI APIRouter for route definitions.
- pitchside.services.live_scores through the service context.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from pitchside.api.errors import to_http_exception
from pitchside.core.context import ServiceContext, get_context
from pitchside.core.exceptions import PitchsideError
from pitchside.core.logger import setup_logger
from pitchside.schemas.predictions import LiveScoresResponse

logger = setup_logger("pitchside.api.scores")

router = APIRouter()


@router.get("/live-scores", response_model=LiveScoresResponse, tags=["Live Scores"])
async def live_scores(
    league: Optional[str] = Query(None, description="Case-insensitive league or event name filter"),
    context: ServiceContext = Depends(get_context),
) -> LiveScoresResponse:
    """
    GET /api/v1/live-scores

    Example Response:
    {
      "matches": [
        {"id": "1001", "league": "English Premier League", "teamA": "Arsenal",
         "teamB": "Chelsea", "scoreA": 1, "scoreB": 0, "time": "67'", "status": "LIVE"}
      ]
    }

    Raises:
        HTTPException(500): If TheSportsDB is not configured.
        HTTPException(502): If TheSportsDB cannot be reached.
    """
    try:
        matches = await context.live_scores.fetch_live_scores(league=league)
    except PitchsideError as e:
        raise to_http_exception(e)
    return LiveScoresResponse(matches=matches)
