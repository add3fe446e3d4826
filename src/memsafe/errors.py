"""Structured error codes and exceptions for memsafe.

Pure functions raise standard Python exceptions (FileNotFoundError, ValueError,
OSError) or the memsafe-specific ones below. The FastMCP registration wrappers
in server.py catch these and return structured error strings.

Error string format: "ERROR [{CODE}]: {message}"
"""
from enum import Enum


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    NO_MATCH = "NO_MATCH"
    LOCK_TIMEOUT = "LOCK_TIMEOUT"
    OUTSIDE_ROOT = "OUTSIDE_ROOT"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    IO_ERROR = "IO_ERROR"


NOT_FOUND = ErrorCode.NOT_FOUND
NO_MATCH = ErrorCode.NO_MATCH
LOCK_TIMEOUT = ErrorCode.LOCK_TIMEOUT
OUTSIDE_ROOT = ErrorCode.OUTSIDE_ROOT
INVALID_ARGUMENT = ErrorCode.INVALID_ARGUMENT
IO_ERROR = ErrorCode.IO_ERROR


class MemsafeError(Exception):
    pass


class OutsideRoot(MemsafeError, ValueError):
    """Raised when a tool path resolves outside the configured root."""


class LockTimeout(MemsafeError):
    """Raised when a lock could not be acquired within the retry budget."""

    def __init__(self, path, attempts: int) -> None:
        self.path = path
        self.attempts = attempts
        super().__init__(f"Could not acquire lock for {path} after {attempts} attempts")


class NoMatch(MemsafeError):
    """Raised when replace text is found neither verbatim nor after normalization."""

    def __init__(self, path, search: str) -> None:
        self.path = path
        self.search = search
        super().__init__(f"Text not found in {path}: {search[:80]!r}")


def error(code: ErrorCode, message: str) -> str:
    """Format a structured error string for tool return values."""
    return f"ERROR [{code.value}]: {message}"
