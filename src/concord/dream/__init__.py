"""Dream mode - the idle-cycle processor.

- types: DreamState, DreamType, DreamCycle, Dream, DreamInsight
- processor: DreamProcessor (DreamCycle → Dream)
- idle: idleness probes
- mode: DreamMode scheduler
"""

from concord.dream.idle import PROBE_KINDS, CpuIdleProbe, StaticIdleProbe, build_probe, check_idle
from concord.dream.mode import DreamMode, select_next_state
from concord.dream.processor import DreamProcessor
from concord.dream.types import (
    Connection,
    Dream,
    DreamCycle,
    DreamInsight,
    DreamState,
    DreamType,
    EvolutionProjection,
)

__all__ = [
    "PROBE_KINDS",
    "Connection",
    "CpuIdleProbe",
    "Dream",
    "DreamCycle",
    "DreamInsight",
    "DreamMode",
    "DreamProcessor",
    "DreamState",
    "DreamType",
    "EvolutionProjection",
    "StaticIdleProbe",
    "build_probe",
    "check_idle",
    "select_next_state",
]
