"""Request Router & Classifier.

Pure functions decide how much of the ensemble a request engages:

- ``classify`` assigns a complexity tier from the shape of the request.
- ``select_worker`` picks a specialist by keyword for SIMPLE requests.
- ``analyze_intent`` reads the ProcessingType of an interaction the
  coordinator handles itself.

Classification rules (first match wins):
    context has more than 10 entries     → TRANSCENDENT
    context contains "fusion_required"   → COMPLEX
    type contains "analysis"             → MODERATE
    otherwise                            → SIMPLE
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

from concord.types.core import ProcessingType, Request, RequestComplexity

TRANSCENDENT_CONTEXT_SIZE = 10
FUSION_KEY = "fusion_required"
ANALYSIS_KEYWORD = "analysis"


def classify(request: Request) -> RequestComplexity:
    """Assign a complexity tier to a request."""
    if request.context_size > TRANSCENDENT_CONTEXT_SIZE:
        return RequestComplexity.TRANSCENDENT
    if FUSION_KEY in request.items:
        return RequestComplexity.COMPLEX
    if ANALYSIS_KEYWORD in request.type:
        return RequestComplexity.MODERATE
    return RequestComplexity.SIMPLE


def match_keyword(request_type: str, routes: Mapping[str, str]) -> str | None:
    """First route keyword (in insertion order) contained in the request type."""
    return next((keyword for keyword in routes if keyword in request_type), None)


def select_worker(request_type: str, routes: Mapping[str, str]) -> str | None:
    """Pick a worker by keyword match in the request type.

    ``None`` means the coordinator handles the request itself.
    """
    keyword = match_keyword(request_type, routes)
    return routes[keyword] if keyword is not None else None


@dataclass(frozen=True, slots=True)
class RoutingDecision:
    """Outcome of routing one request."""

    complexity: RequestComplexity
    worker: str | None
    keyword: str | None

    def to_dict(self) -> dict:
        return {
            "complexity": self.complexity.value,
            "worker": self.worker,
            "keyword": self.keyword,
        }


def route(request: Request, routes: Mapping[str, str]) -> RoutingDecision:
    """Classify a request and, for SIMPLE ones, resolve the target worker."""
    complexity = classify(request)
    if complexity is not RequestComplexity.SIMPLE:
        return RoutingDecision(complexity=complexity, worker=None, keyword=None)

    keyword = match_keyword(request.type, routes)
    return RoutingDecision(
        complexity=complexity,
        worker=routes[keyword] if keyword is not None else None,
        keyword=keyword,
    )


# Interactions the coordinator keeps for itself are read for intent.
# Word prefixes, checked in order; no match means CREATIVE_ANALYTICAL.
INTENT_CONFIDENCE = 0.9

_INTENT_KEYWORDS: tuple[tuple[ProcessingType, tuple[str, ...]], ...] = (
    (ProcessingType.TRANSCENDENT_SYNTHESIS, ("transcend", "conscious", "meaning", "unif")),
    (ProcessingType.ETHICAL_EVALUATION, ("ethic", "moral", "fair", "right")),
    (ProcessingType.STRATEGIC_EXECUTION, ("strateg", "plan", "execut", "roadmap", "goal")),
    (ProcessingType.LEARNING_INTEGRATION, ("learn", "teach", "remember", "study")),
)


@dataclass(frozen=True, slots=True)
class ComplexIntent:
    """How an interaction should be processed, and how sure the reading is."""

    processing_type: ProcessingType
    confidence: float


def analyze_intent(content: str) -> ComplexIntent:
    """Read the processing type of a free-text interaction."""
    words = [w for w in re.split(r"[^a-z0-9]+", content.lower()) if w]
    for processing_type, prefixes in _INTENT_KEYWORDS:
        if any(word.startswith(prefix) for word in words for prefix in prefixes):
            return ComplexIntent(processing_type, INTENT_CONFIDENCE)
    return ComplexIntent(ProcessingType.CREATIVE_ANALYTICAL, INTENT_CONFIDENCE)
