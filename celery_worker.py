"""
@file: celery_worker.py
@description:
Root-level entry point for Celery workers, so the CLI can be pointed at a
plain module name from the project root.

@usage:
To start a worker for both queues:
    $ celery -A celery_worker worker -Q predictions,results --loglevel=info

To start the beat scheduler:
    $ celery -A celery_worker beat --loglevel=info

@dependencies:
- pitchside.workers.worker: For the configured Celery app

@notes:
- This file is meant to be run from the project root directory
- The actual Celery configuration is in pitchside.workers.celery_app
"""

from pitchside.workers.worker import celery_app

# This makes the Celery app importable by the Celery command-line interface
app = celery_app

if __name__ == '__main__':
    print("ERROR: This file should not be executed directly.")
    print("Please use the celery command instead:")
    print("  $ celery -A celery_worker worker -Q predictions,results --loglevel=info")
    print("  $ celery -A celery_worker beat --loglevel=info")
