"""
@file: celery_app.py
@description:
This module initializes and configures the Celery application for background task processing
and scheduled job execution. It sets up the Celery instance with the appropriate broker,
backend, and task configuration.

@dependencies:
- celery: For asynchronous task processing
- pitchside.core.config: For application configuration settings

@notes:
- Prediction generation runs on the `predictions` queue, status sync on `results`
- Beat runs the status sync every 3 hours
- Redis is used as both the broker and result backend
- Tasks are not retried automatically; failures are recorded on the job
"""

import os

from celery import Celery
from celery.schedules import crontab

from pitchside.core.config import settings

# Initialize Celery app
celery_app = Celery(
    "pitchside",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["pitchside.workers.tasks"]
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_track_started=True,
)

# Define task routes for better organization
celery_app.conf.task_routes = {
    "pitchside.workers.tasks.generate_prediction": {"queue": "predictions"},
    "pitchside.workers.tasks.sync_prediction_statuses": {"queue": "results"},
}

# Configure Celery Beat scheduler for periodic tasks
celery_app.conf.beat_schedule = {
    # Settle pending predictions against finished matches - every 3 hours
    "sync-prediction-statuses": {
        "task": "pitchside.workers.tasks.sync_prediction_statuses",
        "schedule": crontab(hour="*/3", minute="15"),
        "args": (),
    },
}

# This allows the Celery app to work with Pytest
# Ref: https://docs.celeryproject.org/en/stable/userguide/testing.html
if os.environ.get("TESTING"):
    celery_app.conf.update(task_always_eager=True)
