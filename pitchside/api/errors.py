"""
Translation of application errors into HTTP responses.
"""

from fastapi import HTTPException, status

from pitchside.core.exceptions import (
    ConfigurationError,
    DatabaseError,
    JobNotFoundError,
    PitchsideError,
    ServiceError,
    TeamValidationError,
)
from pitchside.core.logger import setup_logger

logger = setup_logger("pitchside.api.errors")

DATABASE_ERROR_DETAIL = "A database error occurred. Please try again later."


def to_http_exception(error: PitchsideError) -> HTTPException:
    """
    Map an application error onto the HTTPException returned to the caller.

    Configuration and validation messages are returned as-is; service and
    database failures get a generic message and the detail is only logged.
    """
    if isinstance(error, JobNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, TeamValidationError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(error))
    if isinstance(error, ConfigurationError):
        logger.error(f"Configuration error: {str(error)}")
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
    if isinstance(error, ServiceError):
        logger.error(f"Upstream service error: {str(error)}")
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=error.user_message)
    if isinstance(error, DatabaseError):
        logger.error(f"Database error: {str(error)}")
        return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=DATABASE_ERROR_DETAIL)
    logger.error(f"Unhandled application error: {str(error)}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
