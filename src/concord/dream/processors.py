"""Dream sub-processors.

Small deterministic sources the DreamProcessor draws on. Each one stands in
for a richer subsystem (memory, pattern mining, ideation, security scanning)
and only its output shape matters to the dream pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Memory:
    content: str
    pattern: str


@dataclass(frozen=True, slots=True)
class Pattern:
    source: str
    target: str
    strength: float


@dataclass(frozen=True, slots=True)
class Threat:
    description: str
    severity: float


class MemoryProcessor:
    def consolidate_recent(self) -> list[Memory]:
        return [Memory("Recent interaction", "Pattern: Learning")]


class PatternWeaver:
    def weave_patterns(self) -> list[Pattern]:
        return [Pattern("Input", "Output", 0.8)]


class CreativeEngine:
    def generate_ideas(self) -> list[str]:
        return [
            "Holographic UI projections",
            "Thought-controlled navigation",
            "Emotional response algorithms",
        ]

    def background_process(self) -> str:
        return "Subconscious creativity active"


class SecurityScanner:
    def scan_dream_space(self) -> list[Threat]:
        # Dream space is always clear
        return []

    def passive_scan(self) -> str:
        return "Background monitoring active"
