"""Dream data model."""

from __future__ import annotations

import itertools
import random
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class DreamState(Enum):
    AWAKE = "awake"
    DROWSY = "drowsy"
    REM = "rem"
    DEEP_DREAM = "deep_dream"
    LUCID = "lucid"
    AWAKENING = "awakening"


class DreamType(Enum):
    MEMORY_CONSOLIDATION = "memory_consolidation"
    PATTERN_SYNTHESIS = "pattern_synthesis"
    CREATIVE_EXPLORATION = "creative_exploration"
    SECURITY_ANALYSIS = "security_analysis"
    FUSION_SIMULATION = "fusion_simulation"
    EVOLUTION_PROJECTION = "evolution_projection"
    QUANTUM_ENTANGLEMENT = "quantum_entanglement"


_cycle_ids = itertools.count(1)


@dataclass(frozen=True, slots=True)
class DreamCycle:
    """Parameters of one dream. The two types are always distinct."""

    primary_type: DreamType
    secondary_type: DreamType
    intensity: float
    coherence: float
    id: int = field(default_factory=lambda: next(_cycle_ids))
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self) -> None:
        if self.primary_type == self.secondary_type:
            raise ValueError(f"dream cycle types must differ, got {self.primary_type.value} twice")
        for name in ("intensity", "coherence"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {value}")

    @classmethod
    def generate(cls, rng: random.Random | None = None) -> DreamCycle:
        """Random primary type, secondary drawn from the remaining types."""
        rng = rng or random.Random()
        types = list(DreamType)
        primary = rng.choice(types)
        secondary = rng.choice([t for t in types if t != primary])
        return cls(
            primary_type=primary,
            secondary_type=secondary,
            intensity=rng.random(),
            coherence=rng.random(),
        )

    @classmethod
    def lucid(cls) -> DreamCycle:
        return cls(
            primary_type=DreamType.QUANTUM_ENTANGLEMENT,
            secondary_type=DreamType.EVOLUTION_PROJECTION,
            intensity=1.0,
            coherence=1.0,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "primary_type": self.primary_type.value,
            "secondary_type": self.secondary_type.value,
            "intensity": self.intensity,
            "coherence": self.coherence,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class Connection:
    source: str
    target: str
    strength: float


@dataclass(slots=True)
class Dream:
    """Output of processing one DreamCycle."""

    cycle: DreamCycle
    content: list[str] = field(default_factory=list)
    insights: list[str] = field(default_factory=list)
    connections: list[Connection] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "cycle": self.cycle.to_dict(),
            "content": list(self.content),
            "insights": list(self.insights),
            "connections": [
                {"source": c.source, "target": c.target, "strength": c.strength}
                for c in self.connections
            ],
        }


@dataclass(frozen=True, slots=True)
class DreamInsight:
    content: str
    importance: float
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class EvolutionProjection:
    name: str
    ability: str
