"""
@file: context.py
@description:
Per-process wiring of the prediction services.

A ServiceContext is built once per process (the FastAPI app at startup, each
Celery worker process at init) and hands out the store, dispatcher, generator,
status sync and live scores services. Components are created on first use so
a process only needs the credentials of the services it actually calls.

@dependencies:
- fastapi: For the request-scoped dependency
- pitchside.services: The services being wired

@notes:
- Tests replace the context through FastAPI dependency overrides.
"""

from functools import cached_property
from typing import Any, Callable, Optional

from fastapi import Request

from pitchside.core.config import Settings, settings as default_settings
from pitchside.core.exceptions import ConfigurationError
from pitchside.db.supabase_client import get_supabase_client
from pitchside.llm.base_model import BasePredictionModel
from pitchside.llm.prediction_model import create_prediction_model
from pitchside.services.dispatcher import EnqueueFn, PredictionDispatcher
from pitchside.services.generation import PredictionGenerator
from pitchside.services.live_scores import LiveScoresService
from pitchside.services.prediction_store import PredictionStore
from pitchside.services.sports_db import SportsDBClient
from pitchside.services.status_sync import StatusSyncService


class ServiceContext:
    """
    Holds the configured services for one process.

    Args:
        settings: Application settings
        enqueue: Callable that schedules generation; required for dispatching
        supabase_client: Pre-built Supabase client (built from settings if omitted)
        sports_client: Pre-built TheSportsDB client (built from settings if omitted)
        model_factory: Callable returning the prediction model
    """

    def __init__(
        self,
        settings: Settings,
        enqueue: Optional[EnqueueFn] = None,
        supabase_client: Optional[Any] = None,
        sports_client: Optional[SportsDBClient] = None,
        model_factory: Optional[Callable[[], BasePredictionModel]] = None,
    ):
        self.settings = settings
        self.enqueue = enqueue
        self._supabase_client = supabase_client
        self._sports_client = sports_client
        self.model_factory = model_factory or (lambda: create_prediction_model(settings))

    @cached_property
    def store(self) -> PredictionStore:
        client = self._supabase_client or get_supabase_client(self.settings)
        return PredictionStore(client, reuse_window=self.settings.REUSE_WINDOW)

    @cached_property
    def sports_client(self) -> SportsDBClient:
        return self._sports_client or SportsDBClient.from_settings(self.settings)

    @cached_property
    def dispatcher(self) -> PredictionDispatcher:
        if self.enqueue is None:
            raise ConfigurationError("No task queue is configured for prediction generation.")
        return PredictionDispatcher(self.store, self.enqueue, self.settings)

    @cached_property
    def generator(self) -> PredictionGenerator:
        return PredictionGenerator(self.store, self.model_factory)

    @cached_property
    def status_sync(self) -> StatusSyncService:
        return StatusSyncService(self.store, self.sports_client, self.settings)

    @cached_property
    def live_scores(self) -> LiveScoresService:
        return LiveScoresService(self.sports_client, limit=self.settings.LIVE_SCORES_LIMIT)


def build_context(settings: Optional[Settings] = None, enqueue: Optional[EnqueueFn] = None) -> ServiceContext:
    """
    Create the service context for this process.
    """
    return ServiceContext(settings or default_settings, enqueue=enqueue)


def get_context(request: Request) -> ServiceContext:
    """
    FastAPI dependency returning the application's service context.
    """
    return request.app.state.context
