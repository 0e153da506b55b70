"""
Custom exception classes and error handling.

This module provides custom exceptions and utilities for consistent
error handling across the application. Errors fall into four groups:
permission, validation, session state and external service failures.
"""
import logging
import uuid
from typing import Any, Dict, Optional
from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ShauryaException(Exception):
    """Base exception for all interview-backend errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(ShauryaException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, resource_id: str, details: Optional[Dict[str, Any]] = None):
        message = f"{resource} not found: {resource_id}"
        super().__init__(message, status.HTTP_404_NOT_FOUND, details)
        self.resource = resource
        self.resource_id = resource_id


class ValidationError(ShauryaException):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_400_BAD_REQUEST, details)
        self.field = field


class InvalidUUIDError(ValidationError):
    """Raised when a UUID format is invalid."""

    def __init__(self, uuid_str: str, field: str = "id"):
        message = f"Invalid UUID format: {uuid_str}"
        super().__init__(message, field=field)
        self.uuid_str = uuid_str


class PermissionDeniedError(ShauryaException):
    """Raised when the user refused a capability the action needs."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_403_FORBIDDEN, details)


class MicrophonePermissionError(PermissionDeniedError):
    """Raised when recording is requested without microphone access."""

    def __init__(self):
        super().__init__(
            "Microphone access was denied. Allow microphone access or answer with text or code.",
        )


# =============================================================================
# Session State Errors
# =============================================================================

class SessionNotFoundError(NotFoundError):
    """Raised when a session id is unknown or already closed."""

    def __init__(self, session_id: str):
        super().__init__("Session", session_id)


class InvalidTransitionError(ShauryaException):
    """Raised when an action is not allowed in the session's current phase."""

    def __init__(self, action: str, phase: str, reason: Optional[str] = None):
        message = f"Cannot {action} while session is {phase}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, status.HTTP_409_CONFLICT, {"action": action, "phase": phase})
        self.action = action
        self.phase = phase


class SessionFinishedError(InvalidTransitionError):
    """Raised for any action on a finished session."""

    def __init__(self, action: str):
        super().__init__(action, "finished", "the interview is over")


class SessionBusyError(ShauryaException):
    """Raised when another action on the same session is still running."""

    def __init__(self, session_id: str):
        super().__init__(
            f"Session {session_id} is busy with another action",
            status.HTTP_409_CONFLICT,
            {"session_id": session_id},
        )


class SessionClosedError(ShauryaException):
    """Raised when a session was closed while an action was still running."""

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} was closed", status.HTTP_410_GONE, {"session_id": session_id})


class SubmissionRejectedError(ShauryaException):
    """Raised when a response cannot be submitted yet."""

    def __init__(self, reason: str):
        super().__init__(f"Response cannot be submitted: {reason}", status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.reason = reason


class EmptyResponseError(SubmissionRejectedError):
    """Raised when every response channel turned out empty after transcription."""

    def __init__(self):
        super().__init__("no speech, text or code content to evaluate")


# =============================================================================
# External Service Errors
# =============================================================================

class ExternalServiceError(ShauryaException):
    """Raised when a vendor call (LLM, speech, storage) fails."""

    service = "external"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_502_BAD_GATEWAY, {"service": self.service, **(details or {})})


class TranscriptionError(ExternalServiceError):
    service = "transcription"


class NarrationError(ExternalServiceError):
    service = "narration"


class EvaluationError(ExternalServiceError):
    service = "evaluation"


class StorageError(ExternalServiceError):
    service = "storage"


class QuestionGenerationError(ExternalServiceError):
    service = "question_generation"


class ResumeSummaryError(ExternalServiceError):
    service = "resume_summary"


# =============================================================================
# Exception Handlers
# =============================================================================

async def shaurya_exception_handler(request: Request, exc: ShauryaException) -> JSONResponse:
    """Handle ShauryaException instances."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "details": exc.details
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "details": {"message": str(exc)}
        }
    )


# =============================================================================
# Helper Functions
# =============================================================================

def parse_uuid(uuid_str: str, field: str = "id") -> uuid.UUID:
    """
    Parse a UUID string and raise InvalidUUIDError if invalid.

    Args:
        uuid_str: The UUID string to parse
        field: The field name for error messages (default: "id")

    Returns:
        A validated UUID object

    Raises:
        InvalidUUIDError: If the UUID format is invalid

    Example:
        >>> interview_uuid = parse_uuid(interview_id, field="interview_id")
    """
    try:
        return uuid.UUID(uuid_str)
    except (ValueError, AttributeError, TypeError):
        raise InvalidUUIDError(uuid_str, field=field)


def register_exception_handlers(app):
    """
    Register all custom exception handlers with the FastAPI app.

    Call this during app initialization:
        from src.exceptions import register_exception_handlers
        register_exception_handlers(app)
    """
    app.add_exception_handler(ShauryaException, shaurya_exception_handler)
    if app.debug:
        app.add_exception_handler(Exception, generic_exception_handler)
