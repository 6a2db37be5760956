"""
backend/ninja_missions/errors.py

Typed exceptions for the mission service.

Every error a request can end in is a MissionError subclass carrying its
HTTP status and a stable machine-readable code, so routers never build
HTTPException by hand and the store/engine stay free of HTTP concerns.
"""
import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class MissionError(Exception):
    """Base exception for the mission service"""
    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(MissionError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class Conflict(MissionError):
    """Raised when a state precondition no longer holds (mission taken, already completed...)."""
    status_code = 409
    code = "CONFLICT"
    default_message = "Conflict"


class Forbidden(MissionError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Forbidden"


class Unauthenticated(MissionError):
    status_code = 401
    code = "AUTH_REQUIRED"
    default_message = "No token provided"


class InvalidToken(MissionError):
    status_code = 403
    code = "AUTH_INVALID"
    default_message = "Invalid or expired token"


class ValidationFailed(MissionError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid input"


class StorageUnavailable(MissionError):
    """
    The persistence adapter could not complete (or cleanly roll back) a unit.

    Fatal for the request; never retried internally.
    """
    status_code = 500
    code = "STORAGE_UNAVAILABLE"
    default_message = "Storage unavailable"


class DataCorruption(MissionError):
    """A stored rank/status value is outside the known enumeration."""
    status_code = 500
    code = "DATA_CORRUPTION"
    default_message = "Stored data is corrupt"


class IsolationUnavailable(RuntimeError):
    """Raised at startup when a store cannot serialize concurrent accepts."""


async def mission_error_handler(request: Request, exc: MissionError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"[errors] {request.method} {request.url.path} -> {exc.code}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "code": exc.code},
    )
