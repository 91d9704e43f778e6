"""
Domain errors raised by the service layer.

Each error is an HTTPException so endpoints and the error handling decorator
pass it through untouched. The detail carries a machine-readable code and a
message the front end can show in a toast.
"""
from typing import Optional
from fastapi import HTTPException, status


class DomainError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code or self.default_code
        self.message = message
        super().__init__(
            status_code=self.status_code,
            detail={"error": self.code, "message": message},
        )


class ValidationError(DomainError):
    """Bad user input or an operation not allowed in the drawer's current state."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"


class ConflictError(DomainError):
    """Invariant violation detected by the database, e.g. two opens racing."""
    status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"
