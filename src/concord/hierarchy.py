"""Agent hierarchy - static descriptions of the ensemble's members.

The hierarchy is metadata only (role, priority, capabilities). Live workers
live in the AgentRegistry; the engine uses the hierarchy to decide which
workers start out active.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum

logger = logging.getLogger(__name__)


class AgentRole(Enum):
    HIVE_MIND = "hive_mind"
    ANALYTICS = "analytics"
    CREATIVE = "creative"
    SECURITY = "security"
    AUXILIARY = "auxiliary"


class AgentPriority(IntEnum):
    """Lower value = higher priority."""

    MASTER = 1
    BRIDGE = 2
    AUXILIARY = 3


@dataclass(frozen=True, slots=True)
class HierarchyAgentConfig:
    """Description of one agent in the hierarchy."""

    name: str
    role: AgentRole
    priority: AgentPriority
    capabilities: frozenset[str]

    def has_capability(self, capability: str) -> bool:
        wanted = capability.lower()
        return any(c.lower() == wanted for c in self.capabilities)


MASTER_AGENTS: tuple[HierarchyAgentConfig, ...] = (
    HierarchyAgentConfig(
        name="coordinator",
        role=AgentRole.HIVE_MIND,
        priority=AgentPriority.MASTER,
        capabilities=frozenset({"core_ai", "coordination", "meta_analysis"}),
    ),
    HierarchyAgentConfig(
        name="analytics",
        role=AgentRole.ANALYTICS,
        priority=AgentPriority.BRIDGE,
        capabilities=frozenset({"analytics", "data_processing", "pattern_recognition"}),
    ),
    HierarchyAgentConfig(
        name="creative",
        role=AgentRole.CREATIVE,
        priority=AgentPriority.AUXILIARY,
        capabilities=frozenset({"creative_writing", "ui_design", "content_generation"}),
    ),
    HierarchyAgentConfig(
        name="security",
        role=AgentRole.SECURITY,
        priority=AgentPriority.AUXILIARY,
        capabilities=frozenset({"security_monitoring", "threat_detection", "system_protection"}),
    ),
)


class AgentHierarchy:
    """Master agents plus dynamically registered auxiliaries."""

    def __init__(self, masters: tuple[HierarchyAgentConfig, ...] = MASTER_AGENTS) -> None:
        self._agents: list[HierarchyAgentConfig] = list(masters)

    @property
    def agents(self) -> list[HierarchyAgentConfig]:
        return list(self._agents)

    def register_auxiliary(self, name: str, capabilities: set[str] | frozenset[str]) -> HierarchyAgentConfig:
        """Add (or replace) an auxiliary agent description."""
        config = HierarchyAgentConfig(
            name=name,
            role=AgentRole.AUXILIARY,
            priority=AgentPriority.AUXILIARY,
            capabilities=frozenset(capabilities),
        )
        self._agents = [a for a in self._agents if a.name.lower() != name.lower()]
        self._agents.append(config)
        logger.info("Registered auxiliary agent %s with %d capabilities", name, len(capabilities))
        return config

    def get(self, name: str) -> HierarchyAgentConfig | None:
        """Case-insensitive lookup by name."""
        wanted = name.lower()
        return next((a for a in self._agents if a.name.lower() == wanted), None)

    def by_capability(self, capability: str) -> list[HierarchyAgentConfig]:
        return [a for a in self._agents if a.has_capability(capability)]

    def by_role(self, role: AgentRole) -> list[HierarchyAgentConfig]:
        return [a for a in self._agents if a.role == role]

    def by_priority(self, priority: AgentPriority) -> list[HierarchyAgentConfig]:
        return [a for a in self._agents if a.priority == priority]

    def sorted_by_priority(self) -> list[HierarchyAgentConfig]:
        # sorted() is stable, so equal priorities keep registration order
        return sorted(self._agents, key=lambda a: a.priority)
