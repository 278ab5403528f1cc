"""
MyBlog Logging Configuration
Structured logs tagged with the id of the request that produced them
"""
import inspect
import json
import logging
import sys
import time
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from functools import wraps
from typing import Optional

# Set per request by the logging middleware, read by every log record
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

REQUEST_ID_HEADER = "X-Request-ID"

# ============================================================
# STRUCTURED LOGGING
# ============================================================

class StructuredLogger:
    """Logger that attaches keyword context to every record"""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(name)

    def _log(self, level: int, message: str, **context):
        request_id = request_id_var.get()
        if request_id and "request_id" not in context:
            context["request_id"] = request_id
        self.logger.log(level, message, extra={"context": context, "logger_name": self.name})

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, **context)

    def info(self, message: str, **context):
        self._log(logging.INFO, message, **context)

    def warning(self, message: str, **context):
        self._log(logging.WARNING, message, **context)

    def error(self, message: str, error: Optional[Exception] = None, **context):
        if error:
            context["error_type"] = type(error).__name__
            context["error_message"] = str(error)
            context["traceback"] = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        self._log(logging.ERROR, message, **context)


class StructuredFormatter(logging.Formatter):
    """One JSON object per line"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": getattr(record, "logger_name", record.name),
            "message": record.getMessage(),
        }
        log_data.update(getattr(record, "context", None) or {})
        return json.dumps(log_data, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Colored single-line output for local development"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"
    DIM = "\033[90m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{color}[{timestamp}] [{record.levelname}]{self.RESET} {record.getMessage()}"

        context = {k: v for k, v in (getattr(record, "context", None) or {}).items() if k != "traceback"}
        if context:
            pairs = " ".join(f"{k}={v}" for k, v in context.items())
            line += f" {self.DIM}({pairs}){self.RESET}"
        return line


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Attach one stdout handler to the ``myblog`` logger tree."""
    root = logging.getLogger("myblog")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(TextFormatter() if fmt == "text" else StructuredFormatter())
    root.addHandler(handler)
    root.propagate = False


# ============================================================
# REQUEST LOGGING MIDDLEWARE
# ============================================================

def log_request(logger: StructuredLogger):
    """Build middleware that logs each request and tags its logs with a request id"""
    from fastapi import Request
    from starlette.middleware.base import BaseHTTPMiddleware

    class RequestLoggingMiddleware(BaseHTTPMiddleware):
        async def dispatch(self, request: Request, call_next):
            request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
            token = request_id_var.set(request_id)
            start_time = time.perf_counter()
            try:
                logger.info(
                    f"{request.method} {request.url.path}",
                    method=request.method,
                    path=request.url.path,
                    query=str(request.query_params),
                )
                try:
                    response = await call_next(request)
                except Exception as e:
                    logger.error(
                        f"{request.method} {request.url.path} -> ERROR",
                        error=e,
                        duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                    )
                    raise

                duration_ms = (time.perf_counter() - start_time) * 1000
                level = "info" if response.status_code < 400 else "warning" if response.status_code < 500 else "error"
                getattr(logger, level)(
                    f"{request.method} {request.url.path} -> {response.status_code}",
                    status_code=response.status_code,
                    duration_ms=round(duration_ms, 2),
                )
                response.headers[REQUEST_ID_HEADER] = request_id
                response.headers["X-Process-Time"] = str(round(duration_ms / 1000, 4))
                return response
            finally:
                request_id_var.reset(token)

    return RequestLoggingMiddleware


# ============================================================
# FUNCTION TIMING DECORATOR
# ============================================================

def timed(logger: StructuredLogger):
    """Log how long a store or service call took; failures are logged and re-raised"""
    def decorator(func):
        def finished(start: float, error: Optional[Exception] = None) -> None:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            if error is None:
                logger.debug(f"{func.__name__} completed", function=func.__name__, duration_ms=duration_ms)
            else:
                logger.error(f"{func.__name__} failed", error=error, function=func.__name__, duration_ms=duration_ms)

        if inspect.iscoroutinefunction(func):
            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                start = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    finished(start, e)
                    raise
                finished(start)
                return result
            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                finished(start, e)
                raise
            finished(start)
            return result
        return sync_wrapper

    return decorator


# ============================================================
# LOGGER INSTANCES
# ============================================================

api_logger = StructuredLogger("myblog.api")
store_logger = StructuredLogger("myblog.store")
client_logger = StructuredLogger("myblog.client")
