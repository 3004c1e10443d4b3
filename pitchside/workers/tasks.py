"""
@file: tasks.py
@description:
Celery tasks for the prediction lifecycle.

- generate_prediction: runs the AI generation for one job (queue `predictions`)
- sync_prediction_statuses: settles pending predictions (queue `results`, beat every 3h)
- enqueue_generation: fire-and-forget hand-off used by the dispatcher

@dependencies:
- celery: For task registration and worker signals
- asyncio: To drive the async services from synchronous task bodies
- pitchside.core.context: For the per-process service context

@notes:
- Each worker process builds its own ServiceContext on start; eager runs
  (tests, TESTING=1) build it on first use.
- Tasks are not retried; generation failures are stored on the job.
"""

import asyncio
from datetime import datetime
from typing import Any, Dict, Optional

import pytz
from celery.signals import worker_process_init

from pitchside.core.context import ServiceContext, build_context
from pitchside.core.exceptions import PitchsideError
from pitchside.core.logger import get_task_logger
from pitchside.workers.celery_app import celery_app

logger = get_task_logger("pitchside.workers.tasks")

_context: Optional[ServiceContext] = None


@worker_process_init.connect
def init_worker_context(**kwargs: Any) -> None:
    """Build the service context when a worker process starts."""
    global _context
    _context = build_context()
    logger.info("Worker service context initialized")


def get_worker_context() -> ServiceContext:
    global _context
    if _context is None:
        _context = build_context()
    return _context


def run_async(coro: Any) -> Any:
    """Run a coroutine to completion on a fresh event loop."""
    loop = asyncio.new_event_loop()
    try:
        asyncio.set_event_loop(loop)
        return loop.run_until_complete(coro)
    finally:
        loop.run_until_complete(loop.shutdown_default_executor())
        loop.close()
        asyncio.set_event_loop(None)


@celery_app.task(name="pitchside.workers.tasks.generate_prediction", ignore_result=True)
def generate_prediction(job_id: str, team_a: str, team_b: str, category: str) -> None:
    """
    Generate and store the prediction for a job.

    Args:
        job_id: Prediction job id (status `processing`)
        team_a: Canonical first team
        team_b: Canonical second team
        category: 'men' or 'women'
    """
    logger.info(f"Generating prediction for job {job_id}")
    run_async(get_worker_context().generator.generate(job_id, team_a, team_b, category))


@celery_app.task(name="pitchside.workers.tasks.sync_prediction_statuses")
def sync_prediction_statuses() -> Dict[str, Any]:
    """
    Settle pending predictions whose matches have finished.

    Returns:
        Dict[str, Any]: Summary with status, counts and message.
    """
    logger.info("Starting prediction status sync")
    try:
        summary = run_async(get_worker_context().status_sync.sync_pending_predictions())
    except PitchsideError as e:
        logger.error(f"Prediction status sync failed: {str(e)}")
        return {
            "status": "error",
            "message": str(e),
            "timestamp": datetime.now(pytz.UTC).isoformat(),
        }

    return {
        "status": "success",
        "checked": summary.checked,
        "updated": summary.updated,
        "message": summary.message,
        "timestamp": datetime.now(pytz.UTC).isoformat(),
    }


def enqueue_generation(job_id: str, team_a: str, team_b: str, category: str) -> None:
    """
    Hand a new job to the generation queue without waiting for it.
    """
    generate_prediction.delay(job_id, team_a, team_b, category)
