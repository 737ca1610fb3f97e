"""Deterministic sub-agents used by the CLI demo and tests."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from concord.registry import AgentRegistry
from concord.types.core import Request, Response


@dataclass(slots=True)
class EchoWorker:
    """Answers every request with its own name and the request type.

    Records each (request, context) pair it receives.
    """

    worker_name: str
    confidence: float = 0.8
    calls: list[tuple[Request, str]] = field(default_factory=list, init=False)

    @property
    def name(self) -> str:
        return self.worker_name

    async def process_request(self, request: Request, context: str) -> Response:
        self.calls.append((request, context))
        return Response(
            content=f"{self.worker_name} handled {request.type}",
            confidence=self.confidence,
            metadata={"context_lines": len(context.splitlines())},
        )


@dataclass(slots=True)
class ContextAwareEchoWorker(EchoWorker):
    """EchoWorker that also keeps the last shared-context update."""

    shared: dict[str, Any] = field(default_factory=dict, init=False)

    def set_context(self, context: Mapping[str, Any]) -> None:
        self.shared = dict(context)


def demo_registry() -> AgentRegistry:
    """Registry with one echo worker per master agent."""
    registry = AgentRegistry()
    registry.register("analytics", EchoWorker("analytics", confidence=0.85))
    registry.register("creative", ContextAwareEchoWorker("creative", confidence=0.9))
    registry.register("security", ContextAwareEchoWorker("security", confidence=0.95))
    return registry
