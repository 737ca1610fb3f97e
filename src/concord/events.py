"""Event emission for dream mode.

Dream mode reports what it does (sessions starting and ending, dreams
recorded, insights applied, errors) through a DreamEventEmitter. Without a
callback every emit is a no-op.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class DreamEventType(Enum):
    DREAM_START = "dream_start"
    DREAM = "dream"
    LUCID_DREAM = "lucid_dream"
    INSIGHT_APPLIED = "insight_applied"
    WAKE = "wake"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class DreamEvent:
    type: DreamEventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
        }


class DreamEventEmitter:
    """Event emitter for dream mode."""

    def __init__(self, callback: Callable[[DreamEvent], None] | None = None) -> None:
        """Initialize emitter with optional callback.

        Args:
            callback: Event callback function. If None, events are no-ops.
        """
        self._callback = callback

    def emit(self, event_type: str, **data: Any) -> None:
        """Emit a DreamEvent to the configured callback.

        Unknown event types are skipped. Callback errors are logged and
        never reach the dream loop.
        """
        if self._callback is None:
            return

        try:
            event = DreamEvent(DreamEventType(event_type), data)
        except ValueError:
            logger.debug("Skipping unknown dream event type %r", event_type)
            return

        try:
            self._callback(event)
        except Exception as e:
            logger.warning("Dream event callback error: %s", e)

    def emit_error(
        self,
        message: str,
        phase: str | None = None,
        error_type: str | None = None,
        **context: Any,
    ) -> None:
        """Emit error event with context."""
        error_data: dict[str, Any] = {"message": message}
        if phase:
            error_data["phase"] = phase
        if error_type:
            error_data["error_type"] = error_type
        if context:
            error_data["context"] = context
        self.emit("error", **error_data)

    def emit_dream(self, dream: Any, lucid: bool = False) -> None:
        """Emit a recorded dream."""
        self.emit("lucid_dream" if lucid else "dream", **dream.to_dict())

    def emit_wake(self, insights_applied: int, dreams: int) -> None:
        self.emit("wake", insights_applied=insights_applied, dreams=dreams)
