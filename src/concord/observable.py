"""StateCell - read-many/write-one observable values.

Every externally visible piece of engine state (consciousness state, fusion
state, learning mode, active workers, insight count, evolution level, dream
state) lives in a StateCell. The owning component claims the single writer
handle at construction time; everyone else only reads or subscribes.

Values are swapped as whole objects, so a reader never sees a partially
updated value. Store immutable values (enums, numbers, frozensets, tuples).

Usage:
    cell: StateCell[int] = StateCell("insight_count", 0)
    writer = cell.claim_writer()

    cell.subscribe(lambda value: print("now", value))
    writer.set(1)

    # In tests
    await cell.wait_for(lambda v: v >= 1, timeout=1.0)
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from typing import Generic, TypeVar

from concord.core.errors import ConcordError, ErrorCode

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Type alias for subscriber callbacks
CellCallback = Callable[[T], None]


class StateCell(Generic[T]):
    """Observable value with exactly one writer and any number of readers."""

    def __init__(self, name: str, initial: T) -> None:
        self.name = name
        self._value = initial
        self._subscribers: list[Callable[[T], None]] = []
        self._lock = threading.Lock()
        self._writer: CellWriter[T] | None = None
        self._error_count = 0

    @property
    def value(self) -> T:
        """Current value (always a fully-formed object)."""
        return self._value

    def claim_writer(self) -> CellWriter[T]:
        """Claim the single writer handle for this cell.

        Raises:
            ConcordError: If a writer has already been claimed.
        """
        with self._lock:
            if self._writer is not None:
                raise ConcordError(ErrorCode.RUNTIME_WRITER_CLAIMED, {"cell": self.name})
            self._writer = CellWriter(self)
            return self._writer

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Subscribe to value changes.

        Returns:
            A function that removes the subscription when called.
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                try:
                    self._subscribers.remove(callback)
                except ValueError:
                    pass

        return unsubscribe

    async def wait_for(
        self,
        predicate: Callable[[T], bool],
        timeout: float | None = None,
    ) -> T:
        """Wait until the value satisfies ``predicate`` and return it."""
        if predicate(self._value):
            return self._value

        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()

        def check(value: T) -> None:
            if not future.done() and predicate(value):
                future.set_result(value)

        unsubscribe = self.subscribe(check)
        try:
            return await asyncio.wait_for(future, timeout)
        finally:
            unsubscribe()

    @property
    def stats(self) -> dict[str, int]:
        with self._lock:
            return {"subscribers": len(self._subscribers), "errors": self._error_count}

    def _publish(self, value: T) -> None:
        with self._lock:
            self._value = value
            subscribers = list(self._subscribers)

        for callback in subscribers:
            try:
                callback(value)
            except Exception as e:
                self._error_count += 1
                logger.warning(
                    "StateCell %s subscriber error: %s (callback: %s)",
                    self.name,
                    e,
                    getattr(callback, "__name__", str(callback)),
                )

    def __repr__(self) -> str:
        return f"StateCell({self.name!r}, {self._value!r})"


class CellWriter(Generic[T]):
    """The single write handle of a StateCell."""

    __slots__ = ("_cell",)

    def __init__(self, cell: StateCell[T]) -> None:
        self._cell = cell

    @property
    def cell(self) -> StateCell[T]:
        return self._cell

    @property
    def value(self) -> T:
        return self._cell.value

    def set(self, value: T) -> None:
        """Replace the value and notify subscribers."""
        self._cell._publish(value)

    def update(self, fn: Callable[[T], T]) -> T:
        """Derive the next value from the current one and publish it."""
        value = fn(self._cell.value)
        self._cell._publish(value)
        return value


def owned_cell(name: str, initial: T) -> tuple[StateCell[T], CellWriter[T]]:
    """Create a cell and claim its writer in one step."""
    cell = StateCell(name, initial)
    return cell, cell.claim_writer()
