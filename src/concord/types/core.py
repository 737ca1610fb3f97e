"""Core data model for the orchestration engine.

Enums are closed sets; dispatch over them goes through exhaustive tables
(see ``concord.engine`` and ``concord.fusion``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


class ConsciousnessState(Enum):
    """Top-level lifecycle of the engine."""

    DORMANT = "dormant"
    AWAKENING = "awakening"
    AWARE = "aware"
    PROCESSING = "processing"
    TRANSCENDENT = "transcendent"
    ERROR = "error"


class FusionState(Enum):
    """State of the Fusion Engine."""

    INDIVIDUAL = "individual"
    FUSING = "fusing"
    TRANSCENDENT = "transcendent"
    EVOLUTIONARY = "evolutionary"


class LearningMode(Enum):
    """Learning intensity. Advances on evolution events, never regresses."""

    PASSIVE = "passive"
    ACTIVE = "active"
    ACCELERATED = "accelerated"
    TRANSCENDENT = "transcendent"

    @property
    def rank(self) -> int:
        return _LEARNING_ORDER.index(self)

    def advance(self) -> LearningMode:
        """Next mode, capped at TRANSCENDENT."""
        return _LEARNING_ORDER[min(self.rank + 1, len(_LEARNING_ORDER) - 1)]

    def at_least(self, other: LearningMode) -> LearningMode:
        return self if self.rank >= other.rank else other


_LEARNING_ORDER: tuple[LearningMode, ...] = (
    LearningMode.PASSIVE,
    LearningMode.ACTIVE,
    LearningMode.ACCELERATED,
    LearningMode.TRANSCENDENT,
)


class RequestComplexity(Enum):
    """Complexity tier assigned by the router."""

    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"
    TRANSCENDENT = "transcendent"


class ProcessingType(Enum):
    """How the coordinator treats a free-text interaction no specialist claims."""

    CREATIVE_ANALYTICAL = "creative_analytical"
    STRATEGIC_EXECUTION = "strategic_execution"
    ETHICAL_EVALUATION = "ethical_evaluation"
    LEARNING_INTEGRATION = "learning_integration"
    TRANSCENDENT_SYNTHESIS = "transcendent_synthesis"


class CollaborationMode(Enum):
    """How a group of workers is run over one input."""

    TURN_ORDER = "turn_order"  # Sequential, context threads between workers
    FREE_FORM = "free_form"    # Independent, identical context


_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Request:
    """An incoming request. Immutable once submitted."""

    type: str
    context: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        if self.context is not None:
            object.__setattr__(self, "context", MappingProxyType(dict(self.context)))

    @property
    def context_size(self) -> int:
        return len(self.context) if self.context is not None else 0

    @property
    def items(self) -> Mapping[str, Any]:
        """Context mapping, empty when none was supplied."""
        return self.context if self.context is not None else _EMPTY

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "context": dict(self.items)}


@dataclass(frozen=True, slots=True)
class Response:
    """A scored answer.

    Confidence 0 with a non-null error denotes failure.
    """

    content: str
    confidence: float
    error: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be in [0, 1], got {self.confidence}")
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @classmethod
    def failure(cls, error: BaseException | str) -> Response:
        """Zero-confidence response carrying the error message."""
        message = str(error)
        return cls(content=f"Error: {message}", confidence=0.0, error=message)

    @property
    def failed(self) -> bool:
        return self.error is not None and self.confidence == 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "content": self.content,
            "confidence": self.confidence,
            "error": self.error,
            "metadata": dict(self.metadata),
        }


# Keyed by worker name; produced by the Collaboration Coordinator
WorkerResponses = dict[str, Response]

# Opaque history record, appended in arrival order
HistoryEntry = dict[str, Any]


@dataclass(frozen=True, slots=True)
class AgentMessage:
    """One message in a multi-agent query transcript."""

    content: str
    sender: str
    confidence: float
    timestamp: datetime = field(default_factory=datetime.now)
