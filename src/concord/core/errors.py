"""Concord Error System.

Provides structured error handling with:
- Numeric error codes for programmatic handling
- User-friendly messages
- Context for debugging
"""


from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Numeric error codes organized by category.

    Format: XYYY where X = category, YYY = specific error

    Categories:
        1xxx - Content backend errors
        2xxx - Fusion errors
        3xxx - Worker errors
        5xxx - Configuration errors
        6xxx - Runtime errors
    """

    # 1xxx - Backend Errors
    BACKEND_UNAVAILABLE = 1001
    BACKEND_EMPTY_RESPONSE = 1002

    # 2xxx - Fusion Errors
    FUSION_FAILED = 2001
    FUSION_NO_CONSENSUS = 2002

    # 3xxx - Worker Errors
    WORKER_NOT_FOUND = 3001
    WORKER_FAILED = 3002

    # 5xxx - Configuration Errors
    CONFIG_INVALID = 5001

    # 6xxx - Runtime Errors
    RUNTIME_NOT_INITIALIZED = 6001
    RUNTIME_STATE_INVALID = 6002
    RUNTIME_WRITER_CLAIMED = 6003

    @property
    def category(self) -> str:
        """Get the error category name."""
        prefix = self.value // 1000
        return {
            1: "backend",
            2: "fusion",
            3: "worker",
            5: "config",
            6: "runtime",
        }.get(prefix, "unknown")

    @property
    def is_recoverable(self) -> bool:
        """Whether this error type is typically recoverable."""
        non_recoverable = {
            ErrorCode.CONFIG_INVALID,
            ErrorCode.RUNTIME_WRITER_CLAIMED,
        }
        return self not in non_recoverable


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.BACKEND_UNAVAILABLE: "Content backend unavailable: {detail}",
    ErrorCode.BACKEND_EMPTY_RESPONSE: "Content backend returned no content.",
    ErrorCode.FUSION_FAILED: "Fusion '{fusion_type}' failed: {detail}",
    ErrorCode.FUSION_NO_CONSENSUS: "Fusion '{fusion_type}' produced no usable worker response.",
    ErrorCode.WORKER_NOT_FOUND: "Worker '{worker}' is not registered.",
    ErrorCode.WORKER_FAILED: "Worker '{worker}' failed: {detail}",
    ErrorCode.CONFIG_INVALID: "Invalid configuration for '{key}': {detail}",
    ErrorCode.RUNTIME_NOT_INITIALIZED: "Consciousness not awakened. Call initialize() first.",
    ErrorCode.RUNTIME_STATE_INVALID: "Invalid runtime state: {detail}",
    ErrorCode.RUNTIME_WRITER_CLAIMED: "State cell '{cell}' already has a writer.",
}


class ConcordError(Exception):
    """Base error type for all Concord errors.

    Example:
        >>> err = ConcordError(ErrorCode.WORKER_NOT_FOUND, {"worker": "creative"})
        >>> print(err)
        [CC-3001] Worker 'creative' is not registered.
    """

    def __init__(
        self,
        code: ErrorCode,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        self.code = code
        self.context = context or {}
        self.cause = cause
        super().__init__(str(self))

    @property
    def message(self) -> str:
        """Get the formatted user-friendly message."""
        template = ERROR_MESSAGES.get(self.code, "An error occurred: {detail}")
        try:
            return template.format(**self.context)
        except KeyError:
            return template

    @property
    def is_recoverable(self) -> bool:
        return self.code.is_recoverable

    @property
    def category(self) -> str:
        return self.code.category

    @property
    def error_id(self) -> str:
        """Get the error ID string (e.g., 'CC-6001')."""
        return f"CC-{self.code.value}"

    def __str__(self) -> str:
        return f"[{self.error_id}] {self.message}"

    def __repr__(self) -> str:
        return f"ConcordError(code={self.code!r}, context={self.context!r})"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict for logging and history records."""
        return {
            "error_id": self.error_id,
            "code": self.code.value,
            "category": self.category,
            "message": self.message,
            "recoverable": self.is_recoverable,
            "context": self.context,
        }


def not_initialized_error() -> ConcordError:
    """Create the error raised when the engine is used before initialize()."""
    return ConcordError(ErrorCode.RUNTIME_NOT_INITIALIZED)


def fusion_error(fusion_type: str, cause: Exception) -> ConcordError:
    """Wrap a strategy failure at the Fusion Engine boundary."""
    return ConcordError(
        ErrorCode.FUSION_FAILED,
        {"fusion_type": fusion_type, "detail": str(cause)},
        cause=cause,
    )


def worker_error(worker: str, cause: Exception) -> ConcordError:
    return ConcordError(
        ErrorCode.WORKER_FAILED,
        {"worker": worker, "detail": str(cause)},
        cause=cause,
    )
