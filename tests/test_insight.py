"""Tests for insight counting and evolution."""

import pytest

from concord.history import HistoryContext
from concord.insight import EvolutionEvent, InsightTracker
from concord.types.config import EngineConfig
from concord.types.core import LearningMode, Request, RequestComplexity, Response

from conftest import FailingSink, RecordingSink

REQUEST = Request("creative_writing")
RESPONSE = Response("ok", 0.9)


def _record(tracker: InsightTracker, n: int) -> None:
    for _ in range(n):
        tracker.record(REQUEST, RESPONSE, RequestComplexity.SIMPLE)


class TestEvolution:
    """Tests for threshold-triggered evolution events."""

    @pytest.mark.asyncio
    async def test_exact_multiples_trigger_once_each(self) -> None:
        """100, 200, 300 each trigger exactly one evolution; 150 none."""
        tracker = InsightTracker()
        tracker.start()
        try:
            _record(tracker, 150)
            await tracker.drain()
            assert tracker.insight_count.value == 150
            assert [e.insight_count for e in tracker.evolution_events] == [100]

            _record(tracker, 150)
            await tracker.drain()
            assert [e.insight_count for e in tracker.evolution_events] == [100, 200, 300]
        finally:
            await tracker.stop()

    @pytest.mark.asyncio
    async def test_evolution_raises_level_and_mode(self) -> None:
        events: list[EvolutionEvent] = []
        tracker = InsightTracker(config=EngineConfig(evolution_threshold=2), on_evolution=events.append)
        tracker.raise_learning_floor(LearningMode.ACTIVE)

        _record(tracker, 4)
        await tracker.drain()

        assert tracker.evolution_level.value == pytest.approx(1.2)
        assert tracker.learning_mode.value is LearningMode.TRANSCENDENT
        assert [e.learning_mode for e in events] == [LearningMode.ACCELERATED, LearningMode.TRANSCENDENT]

    @pytest.mark.asyncio
    async def test_learning_mode_caps(self) -> None:
        tracker = InsightTracker(config=EngineConfig(evolution_threshold=1))
        _record(tracker, 10)
        await tracker.drain()
        assert tracker.learning_mode.value is LearningMode.TRANSCENDENT
        assert len(tracker.evolution_events) == 10

    @pytest.mark.asyncio
    async def test_listener_error_does_not_stop_counting(self) -> None:
        def explode(event: EvolutionEvent) -> None:
            raise RuntimeError("listener down")

        tracker = InsightTracker(config=EngineConfig(evolution_threshold=1), on_evolution=explode)
        _record(tracker, 3)
        await tracker.drain()
        assert tracker.insight_count.value == 3


class TestPersistence:
    """Tests for correlation records."""

    @pytest.mark.asyncio
    async def test_request_record_shape(self) -> None:
        sink = RecordingSink()
        tracker = InsightTracker(sink)
        tracker.record(REQUEST, RESPONSE, RequestComplexity.MODERATE)
        await tracker.drain()

        (record,) = sink.records
        assert record["kind"] == "request"
        assert record["complexity"] == "MODERATE"
        assert "creative_writing" in record["request"]
        assert "insight" in record

    @pytest.mark.asyncio
    async def test_dream_record(self) -> None:
        context = HistoryContext()
        tracker = InsightTracker(context)
        tracker.record_dream("Consciousness expansion detected")
        await tracker.drain()

        entry = context.log.last()
        assert entry["kind"] == "dream"
        assert entry["insight"] == "Consciousness expansion detected"
        assert tracker.insight_count.value == 1

    @pytest.mark.asyncio
    async def test_sink_failures_are_kept(self) -> None:
        """Persistence errors are collected and counting continues."""
        sink = FailingSink()
        tracker = InsightTracker(sink)
        tracker.start()
        try:
            _record(tracker, 3)
            await tracker.drain()
        finally:
            await tracker.stop()

        assert tracker.insight_count.value == 3
        assert len(tracker.failures) == 3
        assert all(isinstance(e, OSError) for e in tracker.failures)


class TestWorkerLifecycle:
    """Tests for the insight worker task."""

    @pytest.mark.asyncio
    async def test_record_does_not_block(self) -> None:
        tracker = InsightTracker()
        _record(tracker, 5)
        assert tracker.pending == 5
        assert tracker.insight_count.value == 0

    @pytest.mark.asyncio
    async def test_start_is_idempotent_and_stop_clears(self) -> None:
        tracker = InsightTracker()
        tracker.start()
        tracker.start()
        assert tracker.is_running
        await tracker.stop()
        assert not tracker.is_running
        await tracker.stop()

    @pytest.mark.asyncio
    async def test_learning_floor_never_lowers(self) -> None:
        tracker = InsightTracker(config=EngineConfig(evolution_threshold=1))
        _record(tracker, 2)
        await tracker.drain()
        assert tracker.raise_learning_floor(LearningMode.ACTIVE) is LearningMode.ACCELERATED
