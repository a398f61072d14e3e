"""
Assessment Engine Custom Exceptions

This module provides the exception hierarchy raised by the assessment services.
Every exception carries an HTTP status code and a stable error code, so the
REST layer can translate it without the views catching anything themselves.

Author: DSP Development Team
Version: 1.0.0
"""

import logging
from typing import Optional, Dict, Any

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class AssessmentError(Exception):
    """
    Base exception class for all assessment engine errors.

    Attributes:
        message (str): Human-readable error message
        status_code (int): HTTP status code used by the REST layer
        error_code (str): Stable machine-readable identifier
        details (Dict[str, Any]): Additional error context

    Example:
        >>> try:
        ...     service.start_attempt(content_id, user_id)
        ... except AssessmentError as e:
        ...     logger.warning(f"Start rejected: {e.error_code}")
    """

    default_status_code = status.HTTP_400_BAD_REQUEST
    default_error_code = "AssessmentError"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code or self.default_status_code
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for serialization.

        Returns:
            Dictionary representation of the exception
        """
        return {
            "message": self.message,
            "status_code": self.status_code,
            "error_code": self.error_code,
            "details": self.details,
            "exception_type": self.__class__.__name__,
        }


class ResponseValidationError(AssessmentError):
    """
    Raised when a submitted response does not match the shape its item expects.

    The submission is rejected as a whole; the attempt stays IN_PROGRESS and
    nothing is scored.

    Attributes:
        item_id (str): Key of the offending item (or payload field)
        reason (str): What was wrong with the value
    """

    default_error_code = "ValidationError"

    def __init__(self, item_id: str, reason: str) -> None:
        self.item_id = item_id
        self.reason = reason
        super().__init__(
            message=f"Invalid response for '{item_id}': {reason}",
            details={"item_id": item_id, "reason": reason},
        )


class AttemptsExhausted(AssessmentError):
    """Raised when a learner has used every attempt the content allows."""

    default_status_code = status.HTTP_409_CONFLICT
    default_error_code = "AttemptsExhausted"

    def __init__(self, content_id: int, max_attempts: int) -> None:
        super().__init__(
            message=f"All {max_attempts} attempt(s) for content {content_id} have been used",
            details={"content_id": content_id, "max_attempts": max_attempts},
        )


class RetryNotAllowed(AssessmentError):
    """Raised when content forbids replay and the learner already passed."""

    default_status_code = status.HTTP_409_CONFLICT
    default_error_code = "RetryNotAllowed"

    def __init__(self, content_id: int) -> None:
        super().__init__(
            message=f"Content {content_id} was already passed and does not allow replay",
            details={"content_id": content_id},
        )


class TimeLimitExceeded(AssessmentError):
    """
    Signals that an attempt ran past its time limit.

    This is the forced-submission path: the attempt is closed with the
    responses on record and its time capped at the limit. ``attempt_id``
    lets callers fetch the stored result afterwards.
    """

    default_status_code = status.HTTP_409_CONFLICT
    default_error_code = "TimeLimitExceeded"

    def __init__(self, attempt_id: int, time_limit_seconds: int) -> None:
        self.attempt_id = attempt_id
        self.time_limit_seconds = time_limit_seconds
        super().__init__(
            message=f"Attempt {attempt_id} exceeded its time limit of {time_limit_seconds}s",
            details={"attempt_id": attempt_id, "time_limit_seconds": time_limit_seconds},
        )


class InvalidAttemptState(AssessmentError):
    """Raised when an operation is not allowed from the attempt's current status."""

    default_status_code = status.HTTP_409_CONFLICT
    default_error_code = "InvalidAttemptState"

    def __init__(self, attempt_id: int, current_status: str, operation: str) -> None:
        super().__init__(
            message=f"Cannot {operation} attempt {attempt_id} in status {current_status}",
            details={
                "attempt_id": attempt_id,
                "status": current_status,
                "operation": operation,
            },
        )


class PersistenceError(AssessmentError):
    """Raised when the storage layer fails; the surrounding transaction is rolled back."""

    default_status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_error_code = "PersistenceError"


def assessment_exception_handler(exc, context):
    """
    DRF exception handler that renders AssessmentError subclasses and model
    validation errors as JSON. Everything else goes to DRF's default handler.
    """
    if isinstance(exc, AssessmentError):
        if exc.status_code >= 500:
            logger.error(f"{exc.error_code}: {exc.message}")
        return Response(exc.to_dict(), status=exc.status_code)

    if isinstance(exc, DjangoValidationError):
        detail = exc.message_dict if hasattr(exc, "error_dict") else {"non_field_errors": exc.messages}
        return Response(
            {
                "message": "Validation failed",
                "status_code": status.HTTP_400_BAD_REQUEST,
                "error_code": "ValidationError",
                "details": detail,
                "exception_type": exc.__class__.__name__,
            },
            status=status.HTTP_400_BAD_REQUEST,
        )

    return exception_handler(exc, context)
