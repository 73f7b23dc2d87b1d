"""
Application error taxonomy.

Services raise these errors to describe why an operation failed; the
HTTP layer maps each of them to a status code and an error envelope
(see ``api.responses``).  Repositories never raise them for missing
rows; absence is returned as ``None`` and interpreted by the services.
"""

from typing import Any, Dict, List, Optional


class AppError(Exception):
    """Base class for errors that carry an HTTP status and error code."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    """Malformed or missing input.  ``details`` lists every invalid field."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, details: List[Dict[str, Any]], message: str = "Validation failed") -> None:
        super().__init__(message, details)


class BadRequestError(AppError):
    status_code = 400
    code = "BAD_REQUEST"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"


class InternalError(AppError):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
