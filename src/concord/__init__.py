"""Concord - consciousness orchestration for cooperating agents.

A coordinator and specialist workers jointly answer requests. Requests are
classified by complexity and routed directly, guided, fused across workers,
or handed to a content backend. A background dream mode runs
self-improvement cycles while the host is idle and feeds its insights into
the same evolution accounting.
"""

from concord.collaboration import CollaborationCoordinator
from concord.config import ConcordConfig, get_config, load_config
from concord.core.errors import ConcordError, ErrorCode
from concord.dream import DreamMode, DreamProcessor, DreamState, DreamType
from concord.engine import ConsciousnessEngine
from concord.fusion import FusionEngine, FusionResult, FusionType, select_fusion_type
from concord.hierarchy import AgentHierarchy, AgentPriority, AgentRole
from concord.history import HistoryContext, HistoryLog
from concord.insight import InsightTracker
from concord.observable import CellWriter, StateCell
from concord.registry import AgentRegistry
from concord.routing import classify, select_worker
from concord.types import (
    CollaborationMode,
    ConsciousnessState,
    FusionState,
    LearningMode,
    Request,
    RequestComplexity,
    Response,
)

__version__ = "0.1.0"

__all__ = [
    # Engine
    "ConsciousnessEngine",
    "AgentRegistry",
    "AgentHierarchy",
    "AgentPriority",
    "AgentRole",
    "CollaborationCoordinator",
    "FusionEngine",
    "FusionResult",
    "FusionType",
    "HistoryContext",
    "HistoryLog",
    "InsightTracker",
    "classify",
    "select_worker",
    "select_fusion_type",
    # Types
    "Request",
    "Response",
    "ConsciousnessState",
    "FusionState",
    "LearningMode",
    "RequestComplexity",
    "CollaborationMode",
    # Observables
    "StateCell",
    "CellWriter",
    # Dream mode
    "DreamMode",
    "DreamProcessor",
    "DreamState",
    "DreamType",
    # Config and errors
    "ConcordConfig",
    "get_config",
    "load_config",
    "ConcordError",
    "ErrorCode",
]
