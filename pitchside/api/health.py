"""
@file: health.py
@description:
Provides a simple health check endpoint to verify that the server
is running and responding.

@dependencies:
- FastAPI APIRouter for route definitions.
- pitchside.core.logger: For component-specific logging

@notes:
- This endpoint does not touch Supabase, OpenAI or TheSportsDB, so it stays
  green while an upstream service is down.
"""

from fastapi import APIRouter, Depends

from pitchside.core.config import Settings, get_settings
from pitchside.core.logger import setup_logger

# Create a component-specific logger
logger = setup_logger("pitchside.api.health")

# Create a new router instance for health checks
router = APIRouter()


@router.get("/health", tags=["Health"])
async def health_check(settings: Settings = Depends(get_settings)):
    """
    Health Check Endpoint

    Returns a JSON object indicating that the service is online, and which
    external services have credentials configured.

    Returns:
        dict: A dictionary containing status, message and configuration flags.
    """
    logger.debug("Health check requested")
    return {
        "status": "OK",
        "message": "Health check successful",
        "configured": {
            "database": bool(settings.SUPABASE_URL and settings.SUPABASE_SERVICE_ROLE_KEY),
            "ai": bool(settings.OPENAI_API_KEY),
            "sports_data": bool(settings.THESPORTSDB_API_KEY),
        },
    }
