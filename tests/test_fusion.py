"""Tests for the Fusion Engine."""

import pytest

from concord.collaboration import CollaborationCoordinator
from concord.core.errors import ConcordError, ErrorCode
from concord.fusion import (
    SOLO_CONFIDENCE,
    FusionContext,
    FusionEngine,
    FusionResult,
    FusionType,
    select_fusion_type,
)
from concord.models import EchoWorker
from concord.types.core import FusionState, Request

from conftest import FailingWorker, context_of


@pytest.fixture
def fusion() -> FusionEngine:
    return FusionEngine(CollaborationCoordinator())


class TestSelectFusionType:
    """Tests for fusion strategy selection."""

    def test_default_is_hyper_creation(self) -> None:
        assert select_fusion_type(Request("report", {"fusion_required": True})) is FusionType.HYPER_CREATION

    def test_explicit_context_wins(self) -> None:
        request = Request("schedule", {"fusion_type": "interface_forge"})
        assert select_fusion_type(request) is FusionType.INTERFACE_FORGE

    def test_invalid_explicit_falls_back_to_keywords(self) -> None:
        request = Request("schedule_tasks", {"fusion_type": "warp_drive"})
        assert select_fusion_type(request) is FusionType.CHRONO_SCULPTOR

    @pytest.mark.parametrize(
        ("request_type", "expected"),
        [
            ("optimize_timeline", FusionType.CHRONO_SCULPTOR),
            ("adaptive_layout", FusionType.ADAPTIVE_GENESIS),
            ("learn_user_habits", FusionType.ADAPTIVE_GENESIS),
            ("ui_redesign", FusionType.INTERFACE_FORGE),
            ("build_guide", FusionType.HYPER_CREATION),
        ],
    )
    def test_keywords(self, request_type: str, expected: FusionType) -> None:
        assert select_fusion_type(Request(request_type)) is expected


class TestFuse:
    """Tests for FusionEngine.fuse."""

    @pytest.mark.asyncio
    async def test_success_ends_transcendent(self, fusion: FusionEngine) -> None:
        """Successful fusion returns a tagged result and FusionState TRANSCENDENT."""
        seen: list[FusionState] = []
        fusion.state.subscribe(seen.append)

        result = await fusion.fuse(Request("report"), [EchoWorker("a", 0.6), EchoWorker("b", 1.0)])

        assert result.tag == "hyper_creation"
        assert result.result == "Creative breakthrough achieved: b handled report"
        assert result.confidence == pytest.approx(0.8)
        assert set(result.contributions) == {"a", "b"}
        assert seen == [FusionState.FUSING, FusionState.TRANSCENDENT]
        assert fusion.state.value is FusionState.TRANSCENDENT

    @pytest.mark.asyncio
    async def test_all_workers_failing_resets_state(self, fusion: FusionEngine) -> None:
        """Every engaged worker failing raises and returns to INDIVIDUAL."""
        with pytest.raises(ConcordError) as exc_info:
            await fusion.fuse(Request("report"), [FailingWorker("a"), FailingWorker("b")])

        assert exc_info.value.code is ErrorCode.FUSION_NO_CONSENSUS
        assert fusion.state.value is FusionState.INDIVIDUAL

    @pytest.mark.asyncio
    async def test_strategy_error_is_wrapped(self, fusion: FusionEngine) -> None:
        """A raising strategy surfaces as FUSION_FAILED chained to the cause."""

        async def broken(ctx: FusionContext) -> FusionResult:
            raise ValueError("strategy broke")

        fusion.register_strategy(FusionType.HYPER_CREATION, broken)

        with pytest.raises(ConcordError) as exc_info:
            await fusion.fuse(Request("report"), [])

        assert exc_info.value.code is ErrorCode.FUSION_FAILED
        assert isinstance(exc_info.value.__cause__, ValueError)
        assert "hyper_creation" in str(exc_info.value)
        assert fusion.state.value is FusionState.INDIVIDUAL

    @pytest.mark.asyncio
    async def test_no_workers_synthesizes_alone(self, fusion: FusionEngine) -> None:
        result = await fusion.fuse(Request("report"), [])
        assert result.result == "Creative breakthrough achieved"
        assert result.confidence == SOLO_CONFIDENCE
        assert result.contributions == {}

    @pytest.mark.asyncio
    async def test_partial_failure_still_succeeds(self, fusion: FusionEngine) -> None:
        result = await fusion.fuse(Request("report"), [FailingWorker("bad"), EchoWorker("good", 0.7)])
        assert result.confidence == pytest.approx(0.7)
        assert result.contributions["bad"].failed


class TestStrategies:
    """Tests for the individual strategies."""

    @pytest.mark.asyncio
    async def test_chrono_sculptor_threads_context(self, fusion: FusionEngine) -> None:
        a, b = EchoWorker("a"), EchoWorker("b")
        result = await fusion.fuse(Request("schedule_jobs"), [a, b])
        assert result.tag == "chrono_sculptor"
        assert result.result == "Time-space optimization complete: b handled schedule_jobs"
        assert "a: a handled schedule_jobs" in context_of(b)

    @pytest.mark.asyncio
    async def test_adaptive_genesis_runs_two_rounds(self, fusion: FusionEngine) -> None:
        worker = EchoWorker("a")
        result = await fusion.fuse(Request("adapt_flow"), [worker])
        assert result.tag == "adaptive_genesis"
        assert len(worker.calls) == 2
        assert "a: a handled adapt_flow" in context_of(worker, 1)

    @pytest.mark.asyncio
    async def test_interface_forge_puts_creative_first(self, fusion: FusionEngine) -> None:
        analytics, creative = EchoWorker("analytics"), EchoWorker("creative")
        result = await fusion.fuse(Request("interface_mockup"), [analytics, creative])
        assert result.tag == "interface_forge"
        assert list(result.contributions) == ["creative", "analytics"]
        assert "creative:" in context_of(analytics)

    def test_to_response_carries_tag(self) -> None:
        response = FusionResult(FusionType.CHRONO_SCULPTOR, "done", 0.5).to_response()
        assert response.metadata["fusion_type"] == "chrono_sculptor"
        assert response.content == "done"


class TestConstruction:
    """Tests for the strategy table."""

    def test_state_writer_is_claimed(self, fusion: FusionEngine) -> None:
        with pytest.raises(ConcordError) as exc_info:
            fusion.state.claim_writer()
        assert exc_info.value.code is ErrorCode.RUNTIME_WRITER_CLAIMED
