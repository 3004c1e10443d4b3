"""
@file: worker.py
@description:
Entry point for starting Celery workers from inside the package.

@usage:
To start a generation worker:
    $ celery -A pitchside.workers.worker worker -Q predictions --loglevel=info

To start a sync worker with the beat scheduler:
    $ celery -A pitchside.workers.worker worker -Q results --beat --loglevel=info

@dependencies:
- pitchside.workers.celery_app: For Celery application instance

@notes:
- Configuration is handled in the celery_app module
"""

from pitchside.workers.celery_app import celery_app
import pitchside.workers.tasks  # noqa: F401  registers tasks and worker signals

__all__ = ["celery_app"]
