"""
@file: generation.py
@description:
Runs one AI generation for a prediction job and records the outcome on the job.

Workflow:
1. Build the prediction model (fails the job if it is not configured).
2. Ask the model for a structured prediction of the fixture.
3. Move the job processing -> pending with the payload, or processing -> failed
   with an `{error}` payload on any failure.

@dependencies:
- pitchside.llm: For the prediction model
- pitchside.services.prediction_store: For job updates
- pitchside.core.logger: For logging

@notes:
- generate() never raises; every failure ends up on the job row.
- If recording the failure itself fails, the job stays `processing` and the
  error is logged at CRITICAL level.
"""

from typing import Callable

from pitchside.core.exceptions import PitchsideError, ServiceError
from pitchside.core.logger import setup_logger
from pitchside.llm.base_model import BasePredictionModel, MatchInput
from pitchside.schemas.predictions import JobStatus
from pitchside.services.prediction_store import PredictionStore

logger = setup_logger("pitchside.services.generation")

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred while generating the prediction."


class PredictionGenerator:
    """
    Generates the prediction for a job and stores the result.

    Args:
        store: The prediction store
        model_factory: Zero-argument callable returning a prediction model
    """

    def __init__(self, store: PredictionStore, model_factory: Callable[[], BasePredictionModel]):
        self.store = store
        self.model_factory = model_factory

    async def generate(self, job_id: str, team_a: str, team_b: str, category: str) -> None:
        """
        Produce and store the prediction for `job_id`.
        """
        logger.info(f"Starting generation for job {job_id}: {team_a} vs {team_b} ({category})")
        try:
            model = self.model_factory()
            try:
                result = await model.predict(MatchInput(team_a=team_a, team_b=team_b, category=category))
            finally:
                await model.aclose()
            updated = self.store.update_status(
                job_id,
                JobStatus.PROCESSING.value,
                JobStatus.PENDING.value,
                result.to_payload(),
            )
            if updated:
                logger.info(f"Job {job_id} completed with prediction: {result.prediction}")
            else:
                logger.warning(f"Job {job_id} left 'processing' before generation finished; result discarded")
        except ServiceError as e:
            logger.error(f"Generation service error for job {job_id}: {str(e)}")
            self.fail_job(job_id, e.user_message)
        except PitchsideError as e:
            logger.error(f"Generation failed for job {job_id}: {str(e)}")
            self.fail_job(job_id, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error generating job {job_id}: {str(e)}")
            self.fail_job(job_id, UNEXPECTED_ERROR_MESSAGE)

    def fail_job(self, job_id: str, message: str) -> None:
        """
        Mark a job as failed with an error message.

        Failures here are logged and not retried.
        """
        try:
            self.store.update_status(
                job_id,
                JobStatus.PROCESSING.value,
                JobStatus.FAILED.value,
                {"error": message},
            )
            logger.info(f"Job {job_id} marked as failed: {message}")
        except Exception as e:
            logger.critical(f"CRITICAL: could not mark job {job_id} as failed: {str(e)}")
