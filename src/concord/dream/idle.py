"""Idleness probes for dream mode.

A probe is any callable returning ``bool`` (or an awaitable of one). Dream
mode polls it; nothing is pushed.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass

import psutil

from concord.types.config import DreamConfig
from concord.types.protocol import IdleProbe

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CpuIdleProbe:
    """Host counts as idle while system-wide CPU use stays below a threshold.

    ``psutil.cpu_percent(interval=None)`` compares against the previous call,
    so the first reading after construction is primed in ``__post_init__``.
    """

    threshold_percent: float = 10.0

    def __post_init__(self) -> None:
        psutil.cpu_percent(interval=None)

    def __call__(self) -> bool:
        usage = psutil.cpu_percent(interval=None)
        logger.debug("CPU usage %.1f%% (idle below %.1f%%)", usage, self.threshold_percent)
        return usage < self.threshold_percent


@dataclass(slots=True)
class StaticIdleProbe:
    """Probe with a fixed, externally settable answer (CLI demo and tests)."""

    idle: bool = True
    calls: int = 0

    def __call__(self) -> bool:
        self.calls += 1
        return self.idle


PROBE_KINDS = ("cpu", "static")


def build_probe(kind: str, config: DreamConfig | None = None, idle: bool = True) -> IdleProbe:
    """Create an idle probe by name.

    ``cpu`` samples psutil against ``config.idle_cpu_percent``; ``static``
    always answers ``idle``.
    """
    match kind:
        case "cpu":
            return CpuIdleProbe((config or DreamConfig()).idle_cpu_percent)
        case "static":
            return StaticIdleProbe(idle=idle)
    raise ValueError(f"unknown idle probe {kind!r}, expected one of {PROBE_KINDS}")


async def check_idle(probe: IdleProbe) -> bool:
    """Poll a probe. A probe that raises counts as not idle."""
    try:
        result = probe()
        if inspect.isawaitable(result):
            result = await result
    except Exception as e:
        logger.debug("Idle probe failed, treating as busy: %s", e)
        return False
    return bool(result)
