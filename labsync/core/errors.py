from typing import Any, Dict, Optional

from fastapi import status


class AppError(Exception):
    """Base class for errors the timetable services report to their callers.

    Services raise these with structured ``details``; the HTTP layer turns them
    into ``{"error": message, ...details}`` with ``status_code``.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message, "code": self.error_code}
        body.update(self.details)
        return body


class ValidationError(AppError):
    """Malformed or out-of-range input (end before start, bad durations...)."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            f"{resource} not found",
            details={"resource": resource, "id": resource_id},
        )


class ConflictError(AppError):
    """Overlapping effective dates, or clashing sessions under hard rejection."""

    status_code = status.HTTP_409_CONFLICT
    error_code = "CONFLICT"
