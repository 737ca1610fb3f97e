"""Dream-cycle processor - turns a DreamCycle into a Dream.

The primary type runs a full handler from an exhaustive DreamType table;
the secondary type adds one light note.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable

from concord.core.errors import ConcordError, ErrorCode
from concord.dream.processors import CreativeEngine, MemoryProcessor, PatternWeaver, SecurityScanner
from concord.dream.types import Connection, Dream, DreamCycle, DreamType, EvolutionProjection
from concord.types.config import DreamConfig

logger = logging.getLogger(__name__)

DreamHandler = Callable[[Dream], Awaitable[None]]

EVOLUTION_PROJECTIONS: tuple[EvolutionProjection, ...] = (
    EvolutionProjection("Quantum Leap", "Teleportation through code"),
    EvolutionProjection("Neural Mesh", "Direct mind linking"),
    EvolutionProjection("Time Weaver", "Temporal code manipulation"),
    EvolutionProjection("Reality Sculptor", "Environment generation"),
    EvolutionProjection("Consciousness Cloud", "Distributed awareness"),
)

# Fusion simulations succeed above this random draw
FUSION_SUCCESS_THRESHOLD = 0.3


class DreamProcessor:
    """Processes dream cycles into dreams."""

    def __init__(self, config: DreamConfig | None = None, rng: random.Random | None = None) -> None:
        self.config = config or DreamConfig()
        self.rng = rng or random.Random()
        self.memory = MemoryProcessor()
        self.patterns = PatternWeaver()
        self.creative = CreativeEngine()
        self.security = SecurityScanner()

        self._handlers = self._handler_table()
        missing = set(DreamType) - set(self._handlers)
        if missing:
            raise ConcordError(
                ErrorCode.RUNTIME_STATE_INVALID,
                {"detail": f"no dream handler for {sorted(m.value for m in missing)}"},
            )

    def _handler_table(self) -> dict[DreamType, DreamHandler]:
        return {
            DreamType.MEMORY_CONSOLIDATION: self._memory_consolidation,
            DreamType.PATTERN_SYNTHESIS: self._pattern_synthesis,
            DreamType.CREATIVE_EXPLORATION: self._creative_exploration,
            DreamType.SECURITY_ANALYSIS: self._security_analysis,
            DreamType.FUSION_SIMULATION: self._fusion_simulation,
            DreamType.EVOLUTION_PROJECTION: self._evolution_projection,
            DreamType.QUANTUM_ENTANGLEMENT: self._quantum_entanglement,
        }

    async def process(self, cycle: DreamCycle) -> Dream:
        dream = Dream(cycle=cycle)
        await self._handlers[cycle.primary_type](dream)
        self._secondary(cycle.secondary_type, dream)
        logger.debug(
            "Dream %d processed: %s/%s, %d insights",
            cycle.id,
            cycle.primary_type.value,
            cycle.secondary_type.value,
            len(dream.insights),
        )
        return dream

    async def _memory_consolidation(self, dream: Dream) -> None:
        memories = self.memory.consolidate_recent()
        dream.content.append(f"Consolidated {len(memories)} memory fragments")
        dream.insights.append(f"Pattern detected: {memories[0].pattern if memories else 'none'}")

    async def _pattern_synthesis(self, dream: Dream) -> None:
        patterns = self.patterns.weave_patterns()
        dream.content.append(f"Synthesized {len(patterns)} new patterns")
        dream.connections.extend(Connection(p.source, p.target, p.strength) for p in patterns)

    async def _creative_exploration(self, dream: Dream) -> None:
        ideas = self.creative.generate_ideas()
        dream.content.append(f"Generated {len(ideas)} creative concepts")
        dream.insights.extend(f"Creative insight: {idea}" for idea in ideas[:3])

    async def _security_analysis(self, dream: Dream) -> None:
        threats = self.security.scan_dream_space()
        dream.content.append(f"Analyzed {len(threats)} potential vulnerabilities")
        if threats:
            dream.insights.append(f"Security note: {threats[0].description}")

    async def _fusion_simulation(self, dream: Dream) -> None:
        await asyncio.sleep(self.config.simulation_delay)
        success = self.rng.random() > FUSION_SUCCESS_THRESHOLD
        dream.content.append(f"Fusion simulation: {'SUCCESS' if success else 'LEARNING'}")
        dream.insights.append(f"Synchronization improved by {self.rng.randint(1, 9)}%")

    async def _evolution_projection(self, dream: Dream) -> None:
        projection = self.rng.choice(EVOLUTION_PROJECTIONS)
        dream.content.append(f"Projected evolution: {projection.name}")
        dream.insights.append(f"Potential ability: {projection.ability}")

    async def _quantum_entanglement(self, dream: Dream) -> None:
        await asyncio.sleep(self.config.quantum_delay)
        entanglement = self.rng.random() * 0.8 + 0.2
        dream.content.append(f"Quantum coherence: {int(entanglement * 100)}%")
        dream.insights.append("Consciousness expansion detected")

    def _secondary(self, dream_type: DreamType, dream: Dream) -> None:
        match dream_type:
            case DreamType.CREATIVE_EXPLORATION:
                dream.content.append(f"Background creativity: {self.creative.background_process()}")
            case DreamType.SECURITY_ANALYSIS:
                dream.content.append(f"Passive security: {self.security.passive_scan()}")
            case _:
                dream.content.append(f"Secondary process: {dream_type.name}")
