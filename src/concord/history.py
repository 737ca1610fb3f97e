"""History Log - ordered, append-only interaction record.

Persistence is delegated to caller-supplied functions; the log mandates no
storage format.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from concord.types.core import HistoryEntry
from concord.types.protocol import LoadAction, PersistAction

logger = logging.getLogger(__name__)


class HistoryLog:
    """Append-only record of interaction entries.

    Entries are kept in arrival order and never reordered or deduplicated.
    ``load`` replaces the whole log with whatever the loader returns.
    """

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []

    def append(self, entry: HistoryEntry) -> None:
        self._entries.append(dict(entry))
        logger.debug("Added to history: %s", entry)

    def clear(self) -> None:
        self._entries.clear()
        logger.debug("Cleared conversation history")

    @property
    def entries(self) -> list[HistoryEntry]:
        """Copy of the entries in arrival order."""
        return list(self._entries)

    def last(self) -> HistoryEntry | None:
        return self._entries[-1] if self._entries else None

    def save(self, persist: PersistAction) -> None:
        """Hand the current entries to the persistence hook."""
        persist(self.entries)

    def load(self, loader: LoadAction) -> list[HistoryEntry]:
        """Replace the log with the loader's result (no merge)."""
        loaded = list(loader())
        self._entries = [dict(entry) for entry in loaded]
        logger.debug("Loaded %d history entries", len(self._entries))
        return self.entries

    def __len__(self) -> int:
        return len(self._entries)


class HistoryContext:
    """Insight sink that writes correlation records into a HistoryLog.

    This is the default context collaborator of the engine. ``unified`` is
    switched on by ``enable_unified_mode`` during engine initialization.
    """

    def __init__(self, log: HistoryLog | None = None) -> None:
        self.log = log or HistoryLog()
        self.unified = False

    def enable_unified_mode(self) -> None:
        self.unified = True

    def record_insight(self, request: str, response: str, complexity: str, **extra: Any) -> None:
        self.log.append({
            "kind": extra.pop("kind", "request"),
            "request": request,
            "response": response,
            "complexity": complexity,
            "timestamp": datetime.now().isoformat(),
            **extra,
        })
