"""Configuration type definitions - single source of truth for all config classes."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class EngineConfig:
    """Configuration for the Consciousness Engine and its router."""

    coordinator_name: str = "coordinator"
    """Name the engine answers under when no specialist is selected."""

    routes: dict[str, str] = field(default_factory=lambda: {
        "creative": "creative",
        "security": "security",
    })
    """Keyword in the request type → worker name, checked in insertion order."""

    fallback_confidence: float = 0.5
    """Confidence of the fallback response when a routed worker is unavailable."""

    error_confidence: float = 0.1
    """Confidence of the degraded response returned after a processing error."""

    evolution_threshold: int = 100
    """Every positive multiple of this insight count triggers one evolution."""

    evolution_step: float = 0.1
    """Evolution level gained per evolution event."""

    initial_evolution_level: float = 1.0
    """Evolution level at construction."""

    degraded_backend_confidence: float = 0.3
    """Confidence of the full-consciousness response when the backend fails."""


@dataclass
class DreamConfig:
    """Configuration for the Idle-Cycle Processor (dream mode)."""

    poll_interval: float = 30.0
    """Seconds between idleness probes."""

    settle_delay: float = 5.0
    """Seconds spent DROWSY before entering REM."""

    wake_delay: float = 3.0
    """Seconds spent AWAKENING before becoming AWAKE."""

    cycle_delay_min: float = 10.0
    """Minimum seconds between dream cycles."""

    cycle_delay_max: float = 30.0
    """Maximum seconds between dream cycles."""

    max_dreams: int = 1000
    """Bounded size of the in-memory dream log."""

    insight_window: int = 10
    """Number of most recent dreams mined for insights on waking."""

    importance_threshold: float = 0.7
    """Insights with importance above this are fed back to the engine."""

    idle_cpu_percent: float = 10.0
    """CPU utilisation below which the host counts as idle."""

    simulation_delay: float = 1.0
    """Seconds a fusion simulation takes inside a dream."""

    quantum_delay: float = 0.5
    """Seconds a quantum exploration takes inside a dream."""
