"""
MyBlog API Error Utilities
Error taxonomy, raisers and the global exception handler
"""
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from typing import Any, Dict
from datetime import datetime, timezone

from .datastore.errors import NO_ROWS, Result, StoreError
from .logging_config import api_logger


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================
# ERROR RESPONSES
# ============================================================

class ApiException(HTTPException):
    """Custom API exception with error codes"""

    def __init__(
        self,
        status_code: int,
        message: str,
        error_code: str = None,
        details: Dict = None,
    ):
        self.error_code = error_code or f"ERR_{status_code}"
        self.details = details
        super().__init__(status_code=status_code, detail=message)


def not_found(resource: str = "Resource", id: Any = None):
    message = f"{resource} not found" if id is None else f"{resource} '{id}' not found"
    raise ApiException(404, message, "NOT_FOUND")

def conflict(message: str = "Resource conflict", details: Dict = None):
    raise ApiException(409, message, "CONFLICT", details)

def validation_error(message: str, details: Dict = None):
    raise ApiException(422, message, "VALIDATION_ERROR", details)

def store_failure(message: str = "The data service is unavailable", details: Dict = None):
    raise ApiException(502, message, "STORE_ERROR", details)


def store_error(error: StoreError, action: str, resource: str = "Resource"):
    """Raise the API error matching a data store failure."""
    if error.code == NO_ROWS:
        not_found(resource)
    if error.is_conflict:
        conflict(f"Could not {action}: {resource.lower()} already exists", {"code": error.code})
    api_logger.warning(f"store error while trying to {action}", code=error.code, error_message=error.message)
    store_failure(f"Failed to {action}", {"code": error.code})


def raise_for_store_error(result: Result, action: str, resource: str = "Resource") -> Any:
    """Return the result data, or raise the API error matching the store failure."""
    if result.error is not None:
        store_error(result.error, action, resource)
    return result.data


# ============================================================
# EXCEPTION HANDLER
# ============================================================

async def api_exception_handler(request: Request, exc: ApiException) -> JSONResponse:
    """Render ApiException as the standard error envelope"""
    log = api_logger.error if exc.status_code >= 500 else api_logger.warning
    log(
        f"API Error: {exc.detail}",
        status_code=exc.status_code,
        error_code=exc.error_code,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "ok": False,
            "error": exc.detail,
            "detail": exc.detail,
            "error_code": exc.error_code,
            "details": exc.details,
            "timestamp": _timestamp(),
        },
        headers=getattr(exc, "headers", None),
    )

