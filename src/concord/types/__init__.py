"""Shared type definitions for Concord."""

from concord.types.config import DreamConfig, EngineConfig
from concord.types.core import (
    AgentMessage,
    CollaborationMode,
    ConsciousnessState,
    FusionState,
    HistoryEntry,
    LearningMode,
    ProcessingType,
    Request,
    RequestComplexity,
    Response,
    WorkerResponses,
)
from concord.types.protocol import (
    ContentBackend,
    ContextAwareWorker,
    IdleProbe,
    InsightSink,
    LoadAction,
    PersistAction,
    WorkerProtocol,
)

__all__ = [
    "AgentMessage",
    "CollaborationMode",
    "ConsciousnessState",
    "ContentBackend",
    "ContextAwareWorker",
    "DreamConfig",
    "EngineConfig",
    "FusionState",
    "HistoryEntry",
    "IdleProbe",
    "InsightSink",
    "LearningMode",
    "LoadAction",
    "PersistAction",
    "ProcessingType",
    "Request",
    "RequestComplexity",
    "Response",
    "WorkerProtocol",
    "WorkerResponses",
]
