"""Domain errors raised by the enrollment services.

Every error carries the HTTP status it maps to and a user-facing message;
``registrar.main`` registers a single handler that renders them. Errors are
raised inside a ``transaction()`` block, so the unit of work is rolled back
before the caller ever sees them.
"""
from fastapi import status


class RegistrarError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(RegistrarError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ForbiddenError(RegistrarError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to access this resource"


class UnauthorizedError(RegistrarError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class ConflictError(RegistrarError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Student already has a live enrollment"


class InvalidTransitionError(RegistrarError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Invalid enrollment status transition"

    def __init__(self, current=None, target=None, message: str | None = None):
        self.current = current
        self.target = target
        if message is None and current is not None and target is not None:
            message = f"Cannot change enrollment status from '{_value(current)}' to '{_value(target)}'"
        super().__init__(message)


class PreconditionFailedError(RegistrarError):
    status_code = 422
    default_message = "The resource is not in a state that allows this operation"


class TransactionAbortedError(RegistrarError):
    """Storage-level conflict or timeout; the whole operation may be retried."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "The operation was aborted by the database; no changes were made, please retry"


def _value(s) -> str:
    return getattr(s, "value", s)
