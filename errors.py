"""Error taxonomy for the API.

Handlers and helpers raise these instead of building responses themselves;
``main`` registers one exception handler per family that turns them into a
status code and a JSON body.
"""
from __future__ import annotations

from typing import Any, Dict


class ApiError(Exception):
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_body(self) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationError(ApiError):
    """Malformed or missing client input."""

    status_code = 400


class AuthError(ApiError):
    """Missing, invalid or expired bearer token."""

    status_code = 401


class ConfigError(ApiError):
    """Deployment fault such as an unset signing secret."""

    status_code = 500

    def __init__(self, message: str = "Internal server error.") -> None:
        super().__init__(message)


class StoreError(ApiError):
    """Failure reported by the persistence layer.

    The body carries the underlying error as-is, with no attempt to tell
    "not found" apart from other failures.
    """

    status_code = 500

    def to_body(self) -> Dict[str, Any]:
        return serialize_store_error(self)


class RecordNotFound(StoreError):
    def __init__(self, model: str, record_id: int) -> None:
        super().__init__(f"No {model} found with id {record_id}.")
        self.model = model
        self.record_id = record_id


def serialize_store_error(exc: Exception) -> Dict[str, Any]:
    # SQLAlchemy DBAPI errors keep the driver exception on ``orig``
    orig = getattr(exc, "orig", None)
    return {
        "name": type(exc).__name__,
        "message": str(orig) if orig is not None else str(exc),
    }
