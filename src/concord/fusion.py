"""Fusion Engine - specialised multi-worker synthesis for complex requests.

State machine (owned here, exposed as a StateCell):

    INDIVIDUAL ──fuse()──▶ FUSING ──strategy ok──▶ TRANSCENDENT
                              │
                              └──strategy fails──▶ INDIVIDUAL (error re-raised)

Four named strategies, each an independent replaceable unit that returns a
FusionResult tagged with its name:

    hyper_creation     FREE_FORM burst, best answer wins
    chrono_sculptor    TURN_ORDER refinement, last answer wins
    adaptive_genesis   two FREE_FORM rounds merged by consensus
    interface_forge    TURN_ORDER led by the creative worker
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from concord.collaboration import CollaborationCoordinator, worker_name
from concord.core.errors import ConcordError, ErrorCode, fusion_error
from concord.observable import StateCell, owned_cell
from concord.types.core import (
    CollaborationMode,
    FusionState,
    Request,
    Response,
    WorkerResponses,
)
from concord.types.protocol import WorkerProtocol

logger = logging.getLogger(__name__)


class FusionType(Enum):
    HYPER_CREATION = "hyper_creation"
    CHRONO_SCULPTOR = "chrono_sculptor"
    ADAPTIVE_GENESIS = "adaptive_genesis"
    INTERFACE_FORGE = "interface_forge"


# Confidence of a fusion carried out with no workers to draw on
SOLO_CONFIDENCE = 0.6

_KEYWORDS: tuple[tuple[FusionType, tuple[str, ...]], ...] = (
    (FusionType.CHRONO_SCULPTOR, ("time", "tempor", "schedul", "optimi", "perf")),
    (FusionType.ADAPTIVE_GENESIS, ("adapt", "learn", "evolv")),
    (FusionType.INTERFACE_FORGE, ("interface", "ui", "layout", "design")),
)


def select_fusion_type(request: Request) -> FusionType:
    """Choose a fusion strategy for a request.

    An explicit ``context["fusion_type"]`` naming a strategy wins; otherwise
    word prefixes in the request type decide, defaulting to HYPER_CREATION.
    """
    explicit = request.items.get("fusion_type")
    if isinstance(explicit, str):
        try:
            return FusionType(explicit.lower())
        except ValueError:
            logger.debug("Ignoring unknown fusion_type %r", explicit)

    words = [w for w in re.split(r"[^a-z0-9]+", request.type.lower()) if w]
    for fusion_type, prefixes in _KEYWORDS:
        if any(word.startswith(prefix) for word in words for prefix in prefixes):
            return fusion_type
    return FusionType.HYPER_CREATION


@dataclass(frozen=True, slots=True)
class FusionResult:
    """Structured output of one fusion, tagged with its strategy."""

    fusion_type: FusionType
    result: str
    confidence: float
    contributions: dict[str, Response] = field(default_factory=dict)

    @property
    def tag(self) -> str:
        return self.fusion_type.value

    def to_response(self) -> Response:
        return Response(
            content=self.result,
            confidence=self.confidence,
            metadata={
                "fusion_type": self.tag,
                "contributors": sorted(self.contributions),
            },
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "fusion_type": self.tag,
            "result": self.result,
            "confidence": self.confidence,
            "contributions": {k: v.to_dict() for k, v in self.contributions.items()},
        }


@dataclass(frozen=True, slots=True)
class FusionContext:
    """Everything a strategy needs to run."""

    request: Request
    workers: Sequence[WorkerProtocol]
    coordinator: CollaborationCoordinator
    context: str = ""


FusionStrategy = Callable[[FusionContext], Awaitable[FusionResult]]


def _synthesize(
    fusion_type: FusionType,
    headline: str,
    responses: WorkerResponses,
    winner: Response | None = None,
) -> FusionResult:
    """Fold worker responses into a FusionResult.

    Raises:
        ConcordError: Workers were engaged but none produced a usable answer.
    """
    if not responses:
        return FusionResult(fusion_type, headline, SOLO_CONFIDENCE)

    usable = {name: r for name, r in responses.items() if not r.failed}
    if not usable:
        raise ConcordError(ErrorCode.FUSION_NO_CONSENSUS, {"fusion_type": fusion_type.value})

    chosen = winner if winner is not None and not winner.failed else max(
        usable.values(), key=lambda r: r.confidence
    )
    confidence = sum(r.confidence for r in usable.values()) / len(usable)
    return FusionResult(
        fusion_type=fusion_type,
        result=f"{headline}: {chosen.content}",
        confidence=min(1.0, max(0.0, confidence)),
        contributions=dict(responses),
    )


async def hyper_creation(ctx: FusionContext) -> FusionResult:
    responses = await ctx.coordinator.collaborate(
        ctx.workers, ctx.request, CollaborationMode.FREE_FORM, ctx.context
    )
    return _synthesize(FusionType.HYPER_CREATION, "Creative breakthrough achieved", responses)


async def chrono_sculptor(ctx: FusionContext) -> FusionResult:
    responses = await ctx.coordinator.collaborate(
        ctx.workers, ctx.request, CollaborationMode.TURN_ORDER, ctx.context
    )
    # Last usable answer has seen every earlier one
    last = next((r for r in reversed(responses.values()) if not r.failed), None)
    return _synthesize(
        FusionType.CHRONO_SCULPTOR, "Time-space optimization complete", responses, winner=last
    )


async def adaptive_genesis(ctx: FusionContext) -> FusionResult:
    first = await ctx.coordinator.collaborate(
        ctx.workers, ctx.request, CollaborationMode.FREE_FORM, ctx.context
    )
    usable = [f"{name}: {r.content}" for name, r in first.items() if not r.failed]
    second_context = "\n".join([ctx.context, *usable]) if usable else ctx.context
    second = await ctx.coordinator.collaborate(
        ctx.workers, ctx.request, CollaborationMode.FREE_FORM, second_context
    )
    merged = CollaborationCoordinator.aggregate([first, second])
    return _synthesize(FusionType.ADAPTIVE_GENESIS, "Adaptive solution generated", merged)


async def interface_forge(ctx: FusionContext) -> FusionResult:
    # Creative workers lead, the rest refine; sorted() keeps relative order
    ordered = sorted(ctx.workers, key=lambda w: "creative" not in worker_name(w).lower())
    responses = await ctx.coordinator.collaborate(
        ordered, ctx.request, CollaborationMode.TURN_ORDER, ctx.context
    )
    return _synthesize(FusionType.INTERFACE_FORGE, "Revolutionary interface created", responses)


DEFAULT_STRATEGIES: dict[FusionType, FusionStrategy] = {
    FusionType.HYPER_CREATION: hyper_creation,
    FusionType.CHRONO_SCULPTOR: chrono_sculptor,
    FusionType.ADAPTIVE_GENESIS: adaptive_genesis,
    FusionType.INTERFACE_FORGE: interface_forge,
}


class FusionEngine:
    """Owns FusionState and runs fusion strategies.

    Example:
        >>> engine = FusionEngine(CollaborationCoordinator())
        >>> result = await engine.fuse(request, workers)
        >>> result.tag
        'hyper_creation'
    """

    def __init__(
        self,
        coordinator: CollaborationCoordinator,
        strategies: dict[FusionType, FusionStrategy] | None = None,
        selector: Callable[[Request], FusionType] = select_fusion_type,
    ) -> None:
        self.coordinator = coordinator
        self.selector = selector
        self._strategies = dict(DEFAULT_STRATEGIES)
        if strategies:
            self._strategies.update(strategies)
        missing = set(FusionType) - set(self._strategies)
        if missing:
            raise ConcordError(
                ErrorCode.CONFIG_INVALID,
                {"key": "fusion.strategies", "detail": f"missing {sorted(m.value for m in missing)}"},
            )
        self.state: StateCell[FusionState]
        self.state, self._state = owned_cell("fusion_state", FusionState.INDIVIDUAL)

    def register_strategy(self, fusion_type: FusionType, strategy: FusionStrategy) -> None:
        """Replace the strategy for one fusion type."""
        self._strategies[fusion_type] = strategy

    async def fuse(
        self,
        request: Request,
        workers: Sequence[WorkerProtocol],
        context: str = "",
    ) -> FusionResult:
        """Run one fusion.

        Raises:
            ConcordError: FUSION_FAILED / FUSION_NO_CONSENSUS. FusionState is
                back to INDIVIDUAL before the error propagates.
        """
        logger.info("Activating fusion capabilities")
        self._state.set(FusionState.FUSING)
        fusion_name = "unknown"
        try:
            fusion_type = self.selector(request)
            fusion_name = fusion_type.value
            logger.info("Activating %s fusion with %d workers", fusion_name, len(workers))
            result = await self._strategies[fusion_type](
                FusionContext(request, tuple(workers), self.coordinator, context)
            )
        except asyncio.CancelledError:
            self._state.set(FusionState.INDIVIDUAL)
            raise
        except ConcordError as e:
            self._state.set(FusionState.INDIVIDUAL)
            logger.warning("Fusion %s failed: %s", fusion_name, e)
            if e.category == "fusion":
                raise
            raise fusion_error(fusion_name, e) from e
        except Exception as e:
            self._state.set(FusionState.INDIVIDUAL)
            logger.warning("Fusion %s failed: %s", fusion_name, e)
            raise fusion_error(fusion_name, e) from e

        self._state.set(FusionState.TRANSCENDENT)
        return result
