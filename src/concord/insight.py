"""Insight & Evolution Tracker.

Every completed request (and every significant dream insight) becomes one
InsightRecord on a queue. A single worker task drains the queue in order:

    record() ──▶ queue ──▶ worker: count += 1
                                   persist correlation record
                                   count % threshold == 0 → evolve()

Because the worker is the only writer of the counter, the
increment-then-maybe-evolve step can never interleave with itself, and
every positive multiple of the threshold triggers exactly one evolution.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from concord.observable import StateCell, owned_cell
from concord.types.config import EngineConfig
from concord.types.core import LearningMode, Request, RequestComplexity, Response
from concord.types.protocol import InsightSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class InsightRecord:
    """One unit of insight work."""

    kind: str
    request: str
    response: str
    complexity: str
    insight: str


@dataclass(frozen=True, slots=True)
class EvolutionEvent:
    """Emitted each time the insight count crosses a threshold multiple."""

    insight_count: int
    evolution_level: float
    learning_mode: LearningMode
    timestamp: datetime


EvolutionListener = Callable[[EvolutionEvent], None]


class InsightTracker:
    """Counts insights and runs evolution events.

    Owns the ``insight_count``, ``evolution_level`` and ``learning_mode``
    cells.
    """

    def __init__(
        self,
        sink: InsightSink | None = None,
        config: EngineConfig | None = None,
        on_evolution: EvolutionListener | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.sink = sink
        self.on_evolution = on_evolution

        self.insight_count: StateCell[int]
        self.evolution_level: StateCell[float]
        self.learning_mode: StateCell[LearningMode]
        self.insight_count, self._count = owned_cell("insight_count", 0)
        self.evolution_level, self._level = owned_cell(
            "evolution_level", self.config.initial_evolution_level
        )
        self.learning_mode, self._mode = owned_cell("learning_mode", LearningMode.PASSIVE)

        self._queue: asyncio.Queue[InsightRecord] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None

        self.evolution_events: list[EvolutionEvent] = []
        self.failures: list[Exception] = []

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        """Launch the insight worker task (idempotent)."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="concord-insight-worker")
        logger.debug("Insight worker started")

    async def stop(self) -> None:
        """Cancel the insight worker. Queued records stay queued."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.debug("Insight worker stopped (%d records pending)", self._queue.qsize())

    def raise_learning_floor(self, floor: LearningMode) -> LearningMode:
        """Lift the learning mode to at least ``floor``. Never lowers it."""
        return self._mode.update(lambda mode: mode.at_least(floor))

    def record(self, request: Request, response: Response, complexity: RequestComplexity) -> None:
        """Queue one request insight. Never blocks."""
        self._queue.put_nowait(InsightRecord(
            kind="request",
            request=str(request.to_dict()),
            response=str(response.to_dict()),
            complexity=complexity.name,
            insight=(
                f"{complexity.value} request '{request.type}' "
                f"answered at confidence {response.confidence:.2f}"
            ),
        ))

    def record_dream(self, insight: str) -> None:
        """Queue one significant dream insight. Never blocks."""
        self._queue.put_nowait(InsightRecord(
            kind="dream",
            request="dream",
            response=insight,
            complexity=RequestComplexity.TRANSCENDENT.name,
            insight=insight,
        ))

    async def drain(self) -> None:
        """Wait until every queued record has been processed.

        Without a running worker the queue is processed inline.
        """
        if self.is_running:
            await self._queue.join()
            return
        while not self._queue.empty():
            record = self._queue.get_nowait()
            try:
                self._apply(record)
            finally:
                self._queue.task_done()

    async def _run(self) -> None:
        while True:
            record = await self._queue.get()
            try:
                self._apply(record)
            finally:
                self._queue.task_done()

    def _apply(self, record: InsightRecord) -> None:
        count = self._count.update(lambda n: n + 1)

        if self.sink is not None:
            try:
                self.sink.record_insight(
                    record.request,
                    record.response,
                    record.complexity,
                    kind=record.kind,
                    insight=record.insight,
                )
            except Exception as e:
                logger.warning("Failed to persist %s insight #%d: %s", record.kind, count, e)
                self.failures.append(e)

        if count % self.config.evolution_threshold == 0:
            self._evolve(count)

    def _evolve(self, count: int) -> None:
        level = self._level.update(lambda v: round(v + self.config.evolution_step, 6))
        mode = self._mode.update(lambda m: m.advance())
        event = EvolutionEvent(
            insight_count=count,
            evolution_level=level,
            learning_mode=mode,
            timestamp=datetime.now(),
        )
        self.evolution_events.append(event)
        logger.info(
            "Evolution threshold reached at %d insights: level %.1f, learning mode %s",
            count,
            level,
            mode.value,
        )

        if self.on_evolution is not None:
            try:
                self.on_evolution(event)
            except Exception as e:
                logger.warning("Evolution listener error: %s", e)
