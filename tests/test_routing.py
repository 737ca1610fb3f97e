"""Tests for request classification and keyword routing."""

import pytest

from concord.routing import analyze_intent, classify, match_keyword, route, select_worker
from concord.types.config import EngineConfig
from concord.types.core import ProcessingType, Request, RequestComplexity

ROUTES = EngineConfig().routes


def _context(size: int) -> dict[str, int]:
    return {f"k{i}": i for i in range(size)}


class TestClassify:
    """Tests for complexity classification."""

    def test_more_than_ten_entries_is_transcendent(self) -> None:
        """Context size above 10 wins over every other rule."""
        request = Request("creative_writing", {**_context(11), "fusion_required": True})
        assert classify(request) is RequestComplexity.TRANSCENDENT

    def test_twelve_entries_without_keyword(self) -> None:
        """Any request type with 12 context entries is transcendent."""
        assert classify(Request("zzz", _context(12))) is RequestComplexity.TRANSCENDENT

    def test_exactly_ten_entries_is_not_transcendent(self) -> None:
        """The boundary is strictly greater than 10."""
        assert classify(Request("plain", _context(10))) is RequestComplexity.SIMPLE

    @pytest.mark.parametrize("size", [0, 1, 9])
    def test_fusion_key_is_complex(self, size: int) -> None:
        """fusion_required with small context is COMPLEX."""
        request = Request("analysis_report", {**_context(size), "fusion_required": False})
        assert classify(request) is RequestComplexity.COMPLEX

    def test_analysis_in_type_is_moderate(self) -> None:
        """'analysis' anywhere in the type gives MODERATE."""
        assert classify(Request("deep_analysis_task")) is RequestComplexity.MODERATE

    def test_default_is_simple(self) -> None:
        """No rule matching gives SIMPLE, with or without context."""
        assert classify(Request("creative_writing", {})) is RequestComplexity.SIMPLE
        assert classify(Request("hello")) is RequestComplexity.SIMPLE


class TestSelectWorker:
    """Tests for keyword worker selection."""

    def test_creative_keyword(self) -> None:
        assert select_worker("creative_writing", ROUTES) == "creative"

    def test_security_keyword(self) -> None:
        assert select_worker("security_audit", ROUTES) == "security"

    def test_first_route_wins(self) -> None:
        """Routes are checked in insertion order."""
        assert select_worker("creative_security", ROUTES) == "creative"

    def test_no_keyword_means_coordinator(self) -> None:
        assert select_worker("weather", ROUTES) is None

    def test_custom_routes(self) -> None:
        assert select_worker("paint", {"paint": "aura"}) == "aura"

    def test_match_keyword_agrees_with_route(self) -> None:
        routes = {"paint": "aura", "audit": "kai"}
        assert match_keyword("paint_audit", routes) == "paint"
        assert match_keyword("weather", routes) is None
        decision = route(Request("paint_audit"), routes)
        assert decision.keyword == "paint"
        assert decision.worker == select_worker("paint_audit", routes) == "aura"


class TestRoute:
    """Tests for the combined routing decision."""

    def test_simple_request_resolves_worker(self) -> None:
        decision = route(Request("creative_writing"), ROUTES)
        assert decision.complexity is RequestComplexity.SIMPLE
        assert decision.worker == "creative"
        assert decision.keyword == "creative"

    def test_non_simple_request_has_no_worker(self) -> None:
        decision = route(Request("security_analysis"), ROUTES)
        assert decision.complexity is RequestComplexity.MODERATE
        assert decision.worker is None

    def test_to_dict(self) -> None:
        decision = route(Request("weather"), ROUTES)
        assert decision.to_dict() == {"complexity": "simple", "worker": None, "keyword": None}


class TestAnalyzeIntent:
    """Tests for reading the processing type of an interaction."""

    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            ("Draft a roadmap for Q3", ProcessingType.STRATEGIC_EXECUTION),
            ("Is that morally acceptable?", ProcessingType.ETHICAL_EVALUATION),
            ("help me study graphs", ProcessingType.LEARNING_INTEGRATION),
            ("unify the ideas", ProcessingType.TRANSCENDENT_SYNTHESIS),
            ("tell me a story", ProcessingType.CREATIVE_ANALYTICAL),
        ],
    )
    def test_processing_type(self, content: str, expected: ProcessingType) -> None:
        intent = analyze_intent(content)
        assert intent.processing_type is expected
        assert intent.confidence == pytest.approx(0.9)

    def test_matches_word_prefixes_only(self) -> None:
        """'airplane' contains 'plan' but does not start with it."""
        assert analyze_intent("airplane").processing_type is ProcessingType.CREATIVE_ANALYTICAL

    def test_earlier_type_wins(self) -> None:
        intent = analyze_intent("plan the meaning")
        assert intent.processing_type is ProcessingType.TRANSCENDENT_SYNTHESIS
