"""
Domain error taxonomy.

Services raise these instead of HTTPException so the same code can run from
request handlers and arq jobs. The API layer maps each class to a status code
(see domain_error_handler in unitreviews.main).
"""

from fastapi import status


class DomainError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DomainError):
    """Malformed or out-of-range input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthorizationError(DomainError):
    """Actor lacks permission for the target mutation."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not permitted"


class NotFoundError(DomainError):
    """Referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(DomainError):
    """Current state does not allow the requested change."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class TransactionAbortError(DomainError):
    """A multi-row commit failed and was rolled back."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Transaction aborted"


class ExternalServiceError(DomainError):
    """Asset store or summarizer failure on a critical path."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "External service unavailable"
