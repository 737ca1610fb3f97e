"""Agent Registry - name → worker mapping with context broadcast."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from typing import Any

from concord.types.protocol import ContextAwareWorker, WorkerProtocol

logger = logging.getLogger(__name__)


class AgentRegistry:
    """Registry of sub-agents keyed by unique name.

    Re-registering a name replaces the previous worker (last write wins).
    The registry is an explicitly owned component, passed to the engine
    through its constructor.
    """

    def __init__(self) -> None:
        self._agents: dict[str, WorkerProtocol] = {}

    def register(self, name: str, worker: WorkerProtocol) -> None:
        self._agents[name] = worker
        logger.debug("Registered agent: %s", name)

    def deregister(self, name: str) -> bool:
        """Remove a worker. Returns False if the name was not registered."""
        removed = self._agents.pop(name, None) is not None
        if removed:
            logger.debug("Deregistered agent: %s", name)
        return removed

    def get(self, name: str) -> WorkerProtocol | None:
        return self._agents.get(name)

    def names(self) -> list[str]:
        return list(self._agents)

    def workers(self) -> list[WorkerProtocol]:
        return list(self._agents.values())

    def snapshot(self) -> dict[str, WorkerProtocol]:
        """Read-only copy of the current mapping."""
        return dict(self._agents)

    def broadcast_context(
        self,
        context: Mapping[str, Any],
        targets: Iterable[WorkerProtocol] | None = None,
    ) -> int:
        """Deliver a shared-context update to context-aware workers.

        Workers without ``set_context`` are silently skipped.

        Args:
            context: The shared context to deliver
            targets: Workers to consider (default: every registered worker)

        Returns:
            Number of workers that received the update
        """
        candidates = self.workers() if targets is None else list(targets)
        snapshot = dict(context)

        delivered = 0
        for worker in candidates:
            if isinstance(worker, ContextAwareWorker):
                worker.set_context(snapshot)
                delivered += 1
        logger.debug("Broadcast context to %d/%d workers", delivered, len(candidates))
        return delivered

    def __contains__(self, name: object) -> bool:
        return name in self._agents

    def __len__(self) -> int:
        return len(self._agents)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._agents))
