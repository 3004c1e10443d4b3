"""
Workers Package for the Pitchside backend.

This package handles background and scheduled tasks using Celery, including:
- AI prediction generation for new jobs
- Scheduled settlement of pending predictions

Key components:
- celery_app: Initializes and configures the Celery application
- tasks: Defines the Celery tasks and the generation hand-off
- worker: Entry point for starting Celery workers
"""

from pitchside.workers.celery_app import celery_app
from pitchside.workers.tasks import (
    generate_prediction,
    sync_prediction_statuses,
    enqueue_generation
)

__all__ = [
    'celery_app',
    'generate_prediction',
    'sync_prediction_statuses',
    'enqueue_generation'
]
