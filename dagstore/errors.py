"""
DAG Store Error Handling

All error codes and exception classes raised by this package. Backing engine
failures (sqlite3.Error, OSError) are not wrapped and reach the caller as-is.
"""

from enum import IntEnum
from typing import Optional, Any


class ErrorCode(IntEnum):
    """Storage error codes."""

    # 1xxx - General errors
    UNKNOWN_ERROR = 1000
    INVALID_PARAMETER = 1001

    # 2xxx - Hash list codec errors
    HASH_TOO_LONG = 2001
    TRUNCATED_HASH_LIST = 2002

    # 3xxx - Query errors
    UNSUPPORTED_QUERY = 3001
    INVALID_CURSOR = 3002

    # 4xxx - Lifecycle errors
    STORE_NOT_OPEN = 4001
    STORE_ALREADY_OPEN = 4002


class DagStoreError(Exception):
    """Base exception for all storage errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Any] = None
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        result = {
            "code": self.code.value,
            "name": self.code.name,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result


# ==============================================================================
# General Errors (1xxx)
# ==============================================================================

class InvalidParameterError(DagStoreError):
    def __init__(self, param: str, message: str = ""):
        msg = f"Invalid parameter: {param}"
        if message:
            msg += f" - {message}"
        super().__init__(ErrorCode.INVALID_PARAMETER, msg, {"parameter": param})


# ==============================================================================
# Codec Errors (2xxx)
# ==============================================================================

class HashEncodingError(DagStoreError):
    def __init__(self, length: int, max_length: int):
        super().__init__(
            ErrorCode.HASH_TOO_LONG,
            f"Invalid hash: {length} bytes > {max_length}",
            {"length": length, "max_length": max_length}
        )


class HashDecodingError(DagStoreError):
    def __init__(self, offset: int, length: int, available: int):
        super().__init__(
            ErrorCode.TRUNCATED_HASH_LIST,
            f"Truncated hash list: {length} bytes at offset {offset}, {available} available",
            {"offset": offset, "length": length, "available": available}
        )


# ==============================================================================
# Query Errors (3xxx)
# ==============================================================================

class UnsupportedQueryError(DagStoreError):
    def __init__(self, message: str):
        super().__init__(ErrorCode.UNSUPPORTED_QUERY, message)


class InvalidCursorError(DagStoreError):
    def __init__(self, message: str):
        super().__init__(ErrorCode.INVALID_CURSOR, f"Invalid cursor: {message}")


# ==============================================================================
# Lifecycle Errors (4xxx)
# ==============================================================================

class StoreNotOpenError(DagStoreError):
    def __init__(self):
        super().__init__(ErrorCode.STORE_NOT_OPEN, "Store is not open. Call open() first.")


class StoreAlreadyOpenError(DagStoreError):
    def __init__(self, path: str):
        super().__init__(
            ErrorCode.STORE_ALREADY_OPEN,
            f"Store is already open: {path}",
            {"path": path}
        )
