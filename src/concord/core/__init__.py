"""Core building blocks shared by every Concord component."""

from concord.core.errors import (
    ERROR_MESSAGES,
    ConcordError,
    ErrorCode,
    fusion_error,
    not_initialized_error,
    worker_error,
)

__all__ = [
    "ERROR_MESSAGES",
    "ConcordError",
    "ErrorCode",
    "fusion_error",
    "not_initialized_error",
    "worker_error",
]
