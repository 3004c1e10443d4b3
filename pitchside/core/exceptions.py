"""
@file: exceptions.py
@description:
Error taxonomy shared by the API, the Celery workers and the polling client.

- ConfigurationError: missing credentials or keys; surfaced verbatim.
- TeamValidationError: bad team-name input, rejected before dispatch.
- ServiceError: a network or backend call failed; callers see a generic message.
- GenerationError: the model returned empty, blocked or malformed output.
- DatabaseError: a prediction store read or write failed.
- DuplicateJobError: another request created the in-flight job first.
- JobNotFoundError: no prediction job matches the requested id.
- PollTimeoutError: polling reached its attempt ceiling.
"""


class PitchsideError(Exception):
    """Base class for all application errors."""


class ConfigurationError(PitchsideError):
    """Raised when a required credential or setting is missing."""


class TeamValidationError(PitchsideError, ValueError):
    """Raised when team-name input fails validation."""


class ServiceError(PitchsideError):
    """Raised when an external service call fails."""

    user_message = "The service is currently unavailable. Please try again in a moment."


class GenerationError(PitchsideError):
    """Raised when the LLM output cannot be turned into a prediction."""


class DatabaseError(PitchsideError):
    """Raised when the prediction store cannot be read or written."""


class DuplicateJobError(DatabaseError):
    """Raised when an insert collides with an in-flight job for the same fixture."""


class JobNotFoundError(PitchsideError):
    """Raised when a prediction job id has no matching row."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Prediction with ID {job_id} not found.")


class PollTimeoutError(PitchsideError):
    """Raised when a poll session gives up before the job finishes."""

    def __init__(self, message: str = (
        "The prediction is taking longer than expected. The service might be busy. "
        "Please try again in a moment."
    )):
        super().__init__(message)
