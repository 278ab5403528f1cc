"""
Result and error types returned by every data store call.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

# Error codes follow the Postgres SQLSTATE values clients already know how to branch on.
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"
INTEGRITY_ERROR = "23000"
NO_ROWS = "PGRST116"
MULTIPLE_ROWS = "PGRST117"
UNDEFINED_TABLE = "42P01"
UNDEFINED_COLUMN = "42703"
INVALID_PARAMETER = "22023"
CONNECTION_FAILURE = "08006"
INTERNAL_ERROR = "XX000"

# Auth and storage error codes
INVALID_CREDENTIALS = "invalid_credentials"
USER_ALREADY_EXISTS = "user_already_exists"
SESSION_EXPIRED = "session_expired"
NOT_AUTHENTICATED = "not_authenticated"
BUCKET_NOT_FOUND = "bucket_not_found"
OBJECT_NOT_FOUND = "object_not_found"
DUPLICATE_OBJECT = "duplicate_object"
INVALID_PATH = "invalid_path"


class StoreError(Exception):
    """Error reported by the data store, auth or blob storage."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code}] {message}")

    @property
    def is_conflict(self) -> bool:
        return self.code in (UNIQUE_VIOLATION, USER_ALREADY_EXISTS, DUPLICATE_OBJECT)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


@dataclass
class Result:
    """Outcome of a store call: either data (and optionally a count) or an error."""
    data: Any = None
    error: Optional[StoreError] = None
    count: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the data or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.data

    @classmethod
    def failure(cls, code: str, message: str, **details) -> "Result":
        return cls(error=StoreError(code, message, details or None))
