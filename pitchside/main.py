"""
Main application entry point for the Pitchside API.

This module initializes the FastAPI application with all necessary configurations,
middleware, and routers. It serves as the central point for running the API service.

The service context (prediction store, dispatcher, sync and live scores services)
is built once at startup and stored on `app.state`.
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from pitchside.api import health, predictions, scores
from pitchside.core.config import settings
from pitchside.core.context import build_context
from pitchside.core.logger import setup_logger
from pitchside.core.middleware import setup_all_middleware
from pitchside.workers.tasks import enqueue_generation

logger = setup_logger("pitchside.main")

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.context = build_context(settings, enqueue=enqueue_generation)
    logger.info(f"Pitchside API started ({settings.APP_ENV})")
    yield
    logger.info("Pitchside API shutting down")


# Initialize FastAPI app with metadata
app = FastAPI(
    title="Pitchside API",
    description="Backend API for AI-generated football match predictions and live scores",
    version=API_VERSION,
    lifespan=lifespan,
)

setup_all_middleware(app)

app.include_router(health.router, prefix="/api/v1")
app.include_router(predictions.router, prefix="/api/v1")
app.include_router(scores.router, prefix="/api/v1")


# Root endpoint for basic health check
@app.get("/")
async def root():
    """
    Root endpoint providing a simple health check and API information.

    Returns:
        dict: Basic API information including status and version.
    """
    return {
        "status": "online",
        "api": "Pitchside API",
        "version": API_VERSION
    }


# Add favicon endpoint to silence 404s
@app.get('/favicon.ico')
async def favicon():
    """
    Empty favicon endpoint to silence 404 errors.
    """
    return {}


if __name__ == "__main__":
    # Run the API with uvicorn when script is executed directly
    uvicorn.run("pitchside.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
