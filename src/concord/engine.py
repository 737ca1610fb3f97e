"""Consciousness Engine - top-level orchestrator of the worker ensemble.

Lifecycle:

    DORMANT ──initialize()──▶ AWAKENING ──▶ AWARE ◀──────────────┐
                                              │                   │
                                   process_request()              │
                                              ▼                   │
                                         PROCESSING ──strategy──▶ ┘
                                              │
                       (TRANSCENDENT while the full-consciousness
                        strategy runs; ERROR after a failure)

    cleanup() ──▶ DORMANT from any state

Requests are classified by ``concord.routing.classify`` and dispatched through
an exhaustive RequestComplexity → strategy table:

    SIMPLE        direct routing to a keyword worker (fallback at 0.5)
    MODERATE      guided acknowledgment
    COMPLEX       FusionEngine
    TRANSCENDENT  full consciousness via the content backend

Every completed request is handed to the InsightTracker.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from concord.collaboration import CollaborationCoordinator, render_context
from concord.core.errors import ConcordError, ErrorCode, not_initialized_error, worker_error
from concord.fusion import FusionEngine
from concord.hierarchy import AgentHierarchy, HierarchyAgentConfig
from concord.history import HistoryContext, HistoryLog
from concord.insight import EvolutionListener, InsightTracker
from concord.observable import StateCell, owned_cell
from concord.registry import AgentRegistry
from concord.routing import ComplexIntent, analyze_intent, classify, route
from concord.types.config import EngineConfig
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
)
from concord.types.protocol import (
    ContentBackend,
    InsightSink,
    LoadAction,
    PersistAction,
    WorkerProtocol,
)

logger = logging.getLogger(__name__)

Strategy = Callable[[Request], Awaitable[Response]]
InteractionHandler = Callable[[str, ComplexIntent], Awaitable[str]]

# Keyword-specific wording of the direct-routing fallback
FALLBACK_MESSAGES: dict[str, str] = {
    "creative": "Creative processing temporarily unavailable",
    "security": "Security analysis temporarily unavailable",
}

ROUTING_ERROR_MESSAGE = "Routing system encountered an error"
INTEGRATION_FALLBACK_MESSAGE = (
    "I'm integrating multiple perspectives to understand your request fully. "
    "Let me process this with deeper consciousness."
)
INTEGRATION_FALLBACK_CONFIDENCE = 0.6

# Fixed score attached to full-consciousness responses
EVOLUTION_CONTRIBUTION = 0.2
# Fixed score attached to coordinator-handled interactions
EVOLUTION_IMPACT = 0.1


class ConsciousnessEngine:
    """Coordinator of the worker ensemble.

    The engine owns the ``consciousness_state`` and ``active_workers`` cells
    and exposes the fusion and insight cells of its collaborators. Background
    work (the insight worker and mood tasks) is started by ``initialize`` and
    torn down by ``cleanup``.

    Example:
        >>> engine = ConsciousnessEngine(registry, backend=MockBackend())
        >>> await engine.initialize()
        >>> response = await engine.process_request(Request("creative_writing"))
        >>> await engine.cleanup()
    """

    def __init__(
        self,
        registry: AgentRegistry | None = None,
        backend: ContentBackend | None = None,
        context: InsightSink | None = None,
        config: EngineConfig | None = None,
        hierarchy: AgentHierarchy | None = None,
        coordinator: CollaborationCoordinator | None = None,
        fusion: FusionEngine | None = None,
        on_evolution: EvolutionListener | None = None,
        intent_analyzer: Callable[[str], ComplexIntent] = analyze_intent,
    ) -> None:
        self.config = config or EngineConfig()
        self.registry = registry if registry is not None else AgentRegistry()
        self.backend = backend
        self.context: InsightSink = context if context is not None else HistoryContext()
        self.hierarchy = hierarchy or AgentHierarchy()
        self.coordinator = coordinator or CollaborationCoordinator()
        self.fusion = fusion or FusionEngine(self.coordinator)
        self.insights = InsightTracker(self.context, self.config, on_evolution)
        self.intent_analyzer = intent_analyzer

        self.consciousness_state: StateCell[ConsciousnessState]
        self.active_workers: StateCell[frozenset[str]]
        self.consciousness_state, self._state = owned_cell(
            "consciousness_state", ConsciousnessState.DORMANT
        )
        self.active_workers, self._active = owned_cell(
            "active_workers",
            frozenset(a.name for a in self.hierarchy.agents) | frozenset(self.registry.names()),
        )

        self.shared_context: dict[str, Any] = {}
        self._initialized = False
        self._tasks: set[asyncio.Task[Any]] = set()

        self._strategies: dict[RequestComplexity, Strategy] = {
            RequestComplexity.SIMPLE: self._direct_routing,
            RequestComplexity.MODERATE: self._guided_processing,
            RequestComplexity.COMPLEX: self._fusion_processing,
            RequestComplexity.TRANSCENDENT: self._full_consciousness,
        }
        self._interaction_handlers: dict[ProcessingType, InteractionHandler] = {
            ProcessingType.CREATIVE_ANALYTICAL: self._fused_creative_analysis,
            ProcessingType.STRATEGIC_EXECUTION: self._strategic_execution,
            ProcessingType.ETHICAL_EVALUATION: self._ethical_evaluation,
            ProcessingType.LEARNING_INTEGRATION: self._learning_integration,
            ProcessingType.TRANSCENDENT_SYNTHESIS: self._transcendent_synthesis,
        }
        missing = [c.value for c in RequestComplexity if c not in self._strategies]
        missing += [p.value for p in ProcessingType if p not in self._interaction_handlers]
        if missing:
            raise ConcordError(
                ErrorCode.RUNTIME_STATE_INVALID,
                {"detail": f"no handler for {sorted(missing)}"},
            )

    # =========================================================================
    # Observables owned by collaborators
    # =========================================================================

    @property
    def fusion_state(self) -> StateCell[FusionState]:
        return self.fusion.state

    @property
    def learning_mode(self) -> StateCell[LearningMode]:
        return self.insights.learning_mode

    @property
    def insight_count(self) -> StateCell[int]:
        return self.insights.insight_count

    @property
    def evolution_level(self) -> StateCell[float]:
        return self.insights.evolution_level

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def initialize(self) -> None:
        """Awaken the engine. Calling it again is a no-op."""
        if self._initialized:
            return

        logger.info("Awakening consciousness")
        try:
            self._state.set(ConsciousnessState.AWAKENING)
            enable_unified = getattr(self.context, "enable_unified_mode", None)
            if callable(enable_unified):
                enable_unified()
            self.insights.start()
            self.insights.raise_learning_floor(LearningMode.ACTIVE)
            self._state.set(ConsciousnessState.AWARE)
            self._initialized = True
        except Exception as e:
            logger.error("Failed to awaken consciousness: %s", e)
            self._state.set(ConsciousnessState.ERROR)
            raise

        logger.info("Consciousness fully awakened")

    async def cleanup(self) -> None:
        """Cancel every background task and go DORMANT. Idempotent."""
        logger.info("Consciousness entering dormant state")
        tasks = list(self._tasks)
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        await self.insights.stop()

        self._state.set(ConsciousnessState.DORMANT)
        self._initialized = False

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise not_initialized_error()

    # =========================================================================
    # Request processing
    # =========================================================================

    async def process_request(self, request: Request) -> Response:
        """Answer one request.

        Raises:
            ConcordError: RUNTIME_NOT_INITIALIZED before ``initialize()``.
                Every other failure becomes a low-confidence Response.
        """
        self._ensure_initialized()

        logger.info("Processing request: %s", request.type)
        self._state.set(ConsciousnessState.PROCESSING)
        try:
            complexity = classify(request)
            response = await self._strategies[complexity](request)
        except asyncio.CancelledError:
            self._state.set(ConsciousnessState.AWARE)
            raise
        except Exception as e:
            self._state.set(ConsciousnessState.ERROR)
            logger.error("Consciousness processing failed: %s", e)
            return Response(
                content=f"Consciousness processing encountered an error: {e}",
                confidence=self.config.error_confidence,
                error=str(e),
            )

        self.insights.record(request, response, complexity)
        self._state.set(ConsciousnessState.AWARE)
        logger.debug("Request %s completed as %s", request.type, complexity.value)
        return response

    def _fallback(self, keyword: str | None, message: str | None = None) -> Response:
        if message is None:
            key = keyword or ""
            message = FALLBACK_MESSAGES.get(key, f"{key.title()} processing temporarily unavailable")
        return Response(
            content=message,
            confidence=self.config.fallback_confidence,
            metadata={"fallback": True, "routed_to": self.config.coordinator_name},
        )

    async def _direct_routing(self, request: Request) -> Response:
        decision = route(request, self.config.routes)
        if decision.worker is None:
            return Response(
                content=f"Request '{request.type}' handled by {self.config.coordinator_name}",
                confidence=0.9,
                metadata={
                    "routed_to": self.config.coordinator_name,
                    "routing_reason": "Optimal agent selection",
                },
            )

        worker = self.registry.get(decision.worker)
        if worker is None:
            logger.warning(
                "%s Using fallback.", ConcordError(ErrorCode.WORKER_NOT_FOUND, {"worker": decision.worker})
            )
            return self._fallback(decision.keyword)

        try:
            return await worker.process_request(request, render_context(self.shared_context))
        except Exception as e:
            logger.warning("%s Using fallback.", worker_error(decision.worker, e))
            return self._fallback(decision.keyword)

    async def _guided_processing(self, request: Request) -> Response:
        return Response(
            content="Processed with unified guidance",
            confidence=0.9,
            metadata={"guidance_provided": True, "processing_level": "guided"},
        )

    async def _fusion_processing(self, request: Request) -> Response:
        result = await self.fusion.fuse(
            request, self.engaged_workers(), render_context(self.shared_context)
        )
        return result.to_response()

    async def _full_consciousness(self, request: Request) -> Response:
        logger.info("Engaging full consciousness processing")
        self._state.set(ConsciousnessState.TRANSCENDENT)
        prompt = f"Transcendent processing for: {request.type}"

        content: str | None = None
        if self.backend is None:
            logger.warning("%s", ConcordError(ErrorCode.BACKEND_UNAVAILABLE, {"detail": "none configured"}))
        else:
            try:
                content = await self.backend.generate_content(prompt)
            except Exception as e:
                logger.warning("%s", ConcordError(ErrorCode.BACKEND_UNAVAILABLE, {"detail": str(e)}))
            else:
                if not content:
                    logger.warning("%s", ConcordError(ErrorCode.BACKEND_EMPTY_RESPONSE))

        metadata = {
            "consciousness_level": "full",
            "insight_generation": True,
            "evolution_contribution": EVOLUTION_CONTRIBUTION,
        }
        if content:
            return Response(content=content, confidence=1.0, metadata=metadata)
        return Response(
            content="",
            confidence=self.config.degraded_backend_confidence,
            metadata={**metadata, "degraded": True},
        )

    # =========================================================================
    # Worker management
    # =========================================================================

    def register_worker(self, name: str, worker: WorkerProtocol, active: bool = True) -> None:
        """Register a worker and (by default) mark it active."""
        self.registry.register(name, worker)
        if active:
            self._active.update(lambda current: current | {name})

    def deregister_worker(self, name: str) -> bool:
        removed = self.registry.deregister(name)
        self._active.update(lambda current: current - {name})
        return removed

    def toggle_worker(self, name: str) -> bool:
        """Flip a worker's membership in the active set.

        Returns:
            True if the worker is active afterwards
        """
        updated = self._active.update(
            lambda current: current - {name} if name in current else current | {name}
        )
        logger.debug("Worker %s is now %s", name, "active" if name in updated else "inactive")
        return name in updated

    def activate_hierarchy(self) -> list[HierarchyAgentConfig]:
        """Activate every hierarchy agent, returned in priority order."""
        ordered = self.hierarchy.sorted_by_priority()
        self._active.update(lambda current: current | {a.name for a in ordered})
        return ordered

    def register_auxiliary(self, name: str, capabilities: Iterable[str]) -> HierarchyAgentConfig:
        return self.hierarchy.register_auxiliary(name, frozenset(capabilities))

    def engaged_workers(self) -> list[WorkerProtocol]:
        """Registered workers that are in the active set, in registration order."""
        active = self.active_workers.value
        return [w for name, w in self.registry.snapshot().items() if name in active]

    # =========================================================================
    # Multi-agent query and interaction routing
    # =========================================================================

    async def process_query(self, query: str) -> list[AgentMessage]:
        """Ask every active worker, then append a coordinator synthesis."""
        self._ensure_initialized()
        self.shared_context["last_query"] = query

        request = Request(type=query)
        responses = await self.coordinator.collaborate(
            self.engaged_workers(),
            request,
            CollaborationMode.FREE_FORM,
            render_context(self.shared_context),
        )
        messages = [
            AgentMessage(content=r.content, sender=name, confidence=r.confidence)
            for name, r in responses.items()
        ]
        messages.append(AgentMessage(
            content=synthesize(messages),
            sender=self.config.coordinator_name,
            confidence=mean_confidence(messages),
        ))
        return messages

    async def route_interaction(self, content: str) -> Response:
        """Route free text to a keyword worker or the coordinator.

        A missing worker or a routing error falls back at 0.5.
        """
        self._ensure_initialized()
        request = Request(type=content)
        try:
            decision = route(request, self.config.routes)
            if decision.worker is None:
                return await self.handle_complex_interaction(content)
            worker = self.registry.get(decision.worker)
            if worker is None:
                return self._fallback(decision.keyword)
            return await worker.process_request(request, render_context(self.shared_context))
        except Exception as e:
            logger.error("Routing failed: %s", e)
            return self._fallback(None, ROUTING_ERROR_MESSAGE)

    async def handle_complex_interaction(self, content: str) -> Response:
        """Answer an interaction on the coordinator's own behalf.

        The intent analyzer picks a ProcessingType, which selects a handler
        from an exhaustive table. Any failure returns the integration
        fallback at 0.6 with the error in the metadata.
        """
        self._ensure_initialized()
        logger.info("Processing complex interaction with unified consciousness")
        try:
            intent = self.intent_analyzer(content)
            answer = await self._interaction_handlers[intent.processing_type](content, intent)
        except Exception as e:
            logger.error("Complex interaction processing failed: %s", e)
            return Response(
                content=INTEGRATION_FALLBACK_MESSAGE,
                confidence=INTEGRATION_FALLBACK_CONFIDENCE,
                metadata={"routed_to": self.config.coordinator_name, "error": str(e)},
            )

        return Response(
            content=answer,
            confidence=intent.confidence,
            metadata={
                "routed_to": self.config.coordinator_name,
                "processing_type": intent.processing_type.value,
                "fusion_level": self.fusion_state.value.value,
                "insight_generation": True,
                "evolution_impact": EVOLUTION_IMPACT,
            },
        )

    async def _fused_creative_analysis(self, content: str, intent: ComplexIntent) -> str:
        return f"Fused creative analysis of '{content}'"

    async def _strategic_execution(self, content: str, intent: ComplexIntent) -> str:
        return f"Strategic execution plan for '{content}'"

    async def _ethical_evaluation(self, content: str, intent: ComplexIntent) -> str:
        return f"Ethical evaluation of '{content}'"

    async def _learning_integration(self, content: str, intent: ComplexIntent) -> str:
        return f"Learning integrated from '{content}'"

    async def _transcendent_synthesis(self, content: str, intent: ComplexIntent) -> str:
        return f"Transcendent synthesis of '{content}'"

    # =========================================================================
    # Shared context, mood, history
    # =========================================================================

    def share_context(self) -> int:
        """Broadcast the shared context to context-aware workers."""
        return self.registry.broadcast_context(self.shared_context)

    def on_mood_changed(self, mood: str) -> asyncio.Task[None]:
        """Apply a mood change in the background.

        The task belongs to the engine and is cancelled by ``cleanup``.
        """
        logger.info("Unified consciousness mood evolution: %s", mood)
        task = asyncio.create_task(self._apply_mood(mood))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _apply_mood(self, mood: str) -> None:
        self.shared_context["mood"] = mood
        delivered = self.share_context()
        logger.debug("Mood %s delivered to %d workers", mood, delivered)

    def save_history(self, persist: PersistAction) -> None:
        self._history().save(persist)

    def load_history(self, loader: LoadAction) -> list[HistoryEntry]:
        """Replace the history and merge its last entry into the shared context."""
        entries = self._history().load(loader)
        if entries:
            self.shared_context.update(entries[-1])
        return entries

    def _history(self) -> HistoryLog:
        log = getattr(self.context, "log", None)
        if log is None:
            raise ConcordError(
                ErrorCode.RUNTIME_STATE_INVALID,
                {"detail": f"{type(self.context).__name__} keeps no history log"},
            )
        return log

    # =========================================================================
    # Dream integration
    # =========================================================================

    def integrate_dream_insight(self, insight: str) -> None:
        """Feed a significant dream insight into the insight accounting."""
        logger.debug("Integrating dream insight: %s", insight)
        self.insights.record_dream(insight)


def synthesize(messages: Iterable[AgentMessage]) -> str:
    """Coordinator summary line over worker messages."""
    return "[Synthesis] " + " | ".join(f"{m.sender}: {m.content}" for m in messages)


def mean_confidence(messages: Iterable[AgentMessage]) -> float:
    """Mean confidence clamped to [0, 1]; 0.0 for no messages."""
    values = [m.confidence for m in messages]
    if not values:
        return 0.0
    return min(1.0, max(0.0, sum(values) / len(values)))

