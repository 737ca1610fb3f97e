"""Dream Mode - unsupervised self-improvement cycles while the host is idle.

Two tasks, both owned by DreamMode:

    monitor (outer)   every poll_interval: probe idleness
                        idle and awake      → enter()
                        busy and dreaming   → exit()
    dream loop (inner) while dreaming: cycle → Dream → log → next state → sleep

State flow:

    AWAKE ─enter─▶ DROWSY ─settle─▶ REM ⇄ DEEP_DREAM ⇄ LUCID
      ▲                                      │
      └──── wake delay ◀── AWAKENING ◀─exit──┘

On exit, insights from the most recent dreams are scored and the important
ones are handed to the learning-integration callback (normally
``ConsciousnessEngine.integrate_dream_insight``).
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import random
from collections import deque
from collections.abc import Callable

from concord.dream.idle import check_idle
from concord.dream.processor import DreamProcessor
from concord.dream.types import Dream, DreamCycle, DreamInsight, DreamState
from concord.events import DreamEventEmitter
from concord.observable import StateCell, owned_cell
from concord.types.config import DreamConfig
from concord.types.protocol import IdleProbe

logger = logging.getLogger(__name__)

InsightIntegrator = Callable[[str], None]
ImportanceScorer = Callable[[str], float]


def select_next_state(draw: float) -> DreamState:
    """Map a uniform draw in [0, 1) to the next dream state.

    REM takes [0, 0.3) and [0.8, 1), DEEP_DREAM [0.3, 0.6), LUCID [0.6, 0.8).
    """
    if draw < 0.3:
        return DreamState.REM
    if draw < 0.6:
        return DreamState.DEEP_DREAM
    if draw < 0.8:
        return DreamState.LUCID
    return DreamState.REM


class DreamMode:
    """Idle-cycle processor.

    Example:
        >>> dreams = DreamMode(CpuIdleProbe(), integrate=engine.integrate_dream_insight)
        >>> dreams.start()
        >>> ...
        >>> await dreams.stop()
    """

    def __init__(
        self,
        probe: IdleProbe,
        config: DreamConfig | None = None,
        integrate: InsightIntegrator | None = None,
        processor: DreamProcessor | None = None,
        emitter: DreamEventEmitter | None = None,
        importance: ImportanceScorer | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.probe = probe
        self.config = config or DreamConfig()
        self.integrate = integrate
        self.rng = rng or random.Random()
        self.processor = processor or DreamProcessor(self.config, self.rng)
        self.emitter = emitter or DreamEventEmitter()
        self.importance = importance or (lambda _content: self.rng.random())

        self.state: StateCell[DreamState]
        self.state, self._state = owned_cell("dream_state", DreamState.AWAKE)

        self._dreaming = False
        self._log: deque[Dream] = deque(maxlen=self.config.max_dreams)
        self._monitor_task: asyncio.Task[None] | None = None
        self._dream_task: asyncio.Task[None] | None = None
        self.applied_insights: list[DreamInsight] = []

    @property
    def is_dreaming(self) -> bool:
        return self._dreaming

    @property
    def is_running(self) -> bool:
        return self._monitor_task is not None and not self._monitor_task.done()

    @property
    def dreams(self) -> list[Dream]:
        """Full dream log, oldest first."""
        return list(self._log)

    def recent_dreams(self, count: int = 5) -> list[Dream]:
        """Most recent dreams, newest first."""
        if count <= 0:
            return []
        return list(reversed(self._log))[:count]

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> None:
        """Start the monitor task (idempotent)."""
        if self.is_running:
            return
        self._monitor_task = asyncio.create_task(self._monitor(), name="concord-dream-monitor")
        logger.info("Dream monitoring started (poll every %.1fs)", self.config.poll_interval)

    async def stop(self) -> None:
        """Cancel the dream loop, then the monitor, and wake up."""
        self._dreaming = False
        await self._cancel_dream_loop()
        task, self._monitor_task = self._monitor_task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        if self.state.value is not DreamState.AWAKE:
            self._state.set(DreamState.AWAKE)
        logger.info("Dream monitoring stopped")

    async def _monitor(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.config.poll_interval)

    async def poll_once(self) -> bool:
        """Probe idleness once and enter or leave dreaming accordingly.

        Returns:
            The probe's verdict
        """
        idle = await check_idle(self.probe)
        if idle and not self._dreaming:
            await self.enter()
        elif not idle and self._dreaming:
            await self.exit()
        return idle

    # =========================================================================
    # Entering and leaving
    # =========================================================================

    async def enter(self) -> None:
        """Fall asleep and start the dream loop."""
        if self._dreaming:
            return
        self._dreaming = True
        logger.info("Entering dream mode")
        self.emitter.emit("dream_start")

        self._state.set(DreamState.DROWSY)
        await asyncio.sleep(self.config.settle_delay)
        if not self._dreaming:
            return
        self._state.set(DreamState.REM)
        self._dream_task = asyncio.create_task(self._dream_loop(), name="concord-dream-loop")

    async def exit(self) -> int:
        """Wake up and apply what was learned.

        Returns:
            Number of insights handed to the integration callback
        """
        if not self._dreaming:
            return 0
        self._dreaming = False
        await self._cancel_dream_loop()

        self._state.set(DreamState.AWAKENING)
        applied = self.apply_dream_learning(self.extract_insights())
        self.emitter.emit_wake(insights_applied=applied, dreams=len(self._log))
        logger.info("Leaving dream mode (%d insights applied)", applied)

        await asyncio.sleep(self.config.wake_delay)
        self._state.set(DreamState.AWAKE)
        return applied

    async def _cancel_dream_loop(self) -> None:
        task, self._dream_task = self._dream_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    # =========================================================================
    # Dreaming
    # =========================================================================

    async def _dream_loop(self) -> None:
        while self._dreaming:
            cycle = DreamCycle.generate(self.rng)
            try:
                dream = await self.processor.process(cycle)
            except Exception as e:
                logger.warning("Dream %d failed: %s", cycle.id, e)
                self.emitter.emit_error(str(e), phase="dream", error_type=type(e).__name__)
            else:
                self._record(dream)
                self._state.set(select_next_state(self.rng.random()))
            await asyncio.sleep(
                self.rng.uniform(self.config.cycle_delay_min, self.config.cycle_delay_max)
            )

    def _record(self, dream: Dream, lucid: bool = False) -> None:
        self._log.append(dream)
        self.emitter.emit_dream(dream, lucid=lucid)

    async def force_lucid_dream(self) -> Dream | None:
        """Synthesise one lucid dream right now.

        Returns:
            The dream, or None (and nothing changes) when not dreaming
        """
        if not self._dreaming:
            return None
        self._state.set(DreamState.LUCID)
        dream = await self.processor.process(DreamCycle.lucid())
        self._record(dream, lucid=True)
        return dream

    # =========================================================================
    # Learning
    # =========================================================================

    def extract_insights(self) -> list[DreamInsight]:
        """Score every insight of the most recent dreams."""
        window = list(self._log)[-self.config.insight_window:] if self.config.insight_window > 0 else []
        return [
            DreamInsight(
                content=content,
                importance=self.importance(content),
                timestamp=dream.cycle.timestamp,
            )
            for dream in window
            for content in dream.insights
        ]

    def apply_dream_learning(self, insights: list[DreamInsight]) -> int:
        """Hand every insight above the importance threshold to ``integrate``."""
        applied = 0
        for insight in insights:
            if insight.importance <= self.config.importance_threshold:
                continue
            if self.integrate is not None:
                try:
                    self.integrate(insight.content)
                except Exception as e:
                    logger.warning("Failed to integrate dream insight: %s", e)
                    self.emitter.emit_error(str(e), phase="integrate", error_type=type(e).__name__)
                    continue
            self.applied_insights.append(insight)
            self.emitter.emit("insight_applied", content=insight.content, importance=insight.importance)
            applied += 1
        return applied
