"""Protocol definitions for the engine's external collaborators.

These protocols define the narrow interfaces the engine consumes, allowing
concrete workers, backends and persistence to be swapped for testing or
alternative implementations.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol, runtime_checkable

from concord.types.core import HistoryEntry, Request, Response


@runtime_checkable
class WorkerProtocol(Protocol):
    """Contract every sub-agent must satisfy."""

    @property
    def name(self) -> str:
        """Unique worker name (used as the registry and response-map key)."""
        ...

    async def process_request(self, request: Request, context: str) -> Response:
        """Answer a request given the accumulated textual context.

        Args:
            request: The request being answered
            context: Textual context (grows between workers in TURN_ORDER)

        Returns:
            A scored Response
        """
        ...


@runtime_checkable
class ContextAwareWorker(WorkerProtocol, Protocol):
    """Worker that also accepts shared-context updates."""

    def set_context(self, context: Mapping[str, Any]) -> None:
        """Receive a shared-context update."""
        ...


@runtime_checkable
class ContentBackend(Protocol):
    """External content-generation backend.

    Treated as unreliable: ``None`` or an exception degrades output but
    never crashes the caller.
    """

    async def generate_content(self, prompt: str) -> str | None:
        ...


@runtime_checkable
class InsightSink(Protocol):
    """Context collaborator that persists insight correlation records."""

    def record_insight(self, request: str, response: str, complexity: str, **extra: Any) -> None:
        """Persist one correlation record.

        ``extra`` carries ``kind`` ("request" or "dream") and ``insight``.
        """
        ...


# Persistence hooks supplied by the caller
PersistAction = Callable[[list[HistoryEntry]], None]
LoadAction = Callable[[], list[HistoryEntry]]

# Idleness probe: polled, not pushed. May be sync or async.
IdleProbe = Callable[[], bool | Awaitable[bool]]
