"""Collaboration Coordinator - run a group of workers over one input.

Two modes:

    TURN_ORDER   worker 1 ──▶ worker 2 ──▶ worker 3     (strictly sequential)
                 ctx         ctx + w1      ctx + w1 + w2

    FREE_FORM    worker 1 ┐
                 worker 2 ├─ same ctx, run concurrently
                 worker 3 ┘

A worker that raises is converted into a zero-confidence error Response
for that worker only; siblings are unaffected.

``aggregate`` merges several response maps by per-worker best confidence
(consensus).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from concord.types.core import CollaborationMode, Request, Response, WorkerResponses
from concord.types.protocol import WorkerProtocol

logger = logging.getLogger(__name__)


def worker_name(worker: WorkerProtocol) -> str:
    """Worker's declared name, falling back to its class name."""
    try:
        name = worker.name
    except Exception:
        name = None
    return name or type(worker).__name__


def render_context(data: Mapping[str, Any]) -> str:
    """Render a context mapping as stable ``key: value`` lines."""
    return "\n".join(f"{key}: {value}" for key, value in data.items())


class CollaborationCoordinator:
    """Runs workers sequentially or independently and merges their answers."""

    async def collaborate(
        self,
        workers: Sequence[WorkerProtocol],
        request: Request,
        mode: CollaborationMode = CollaborationMode.FREE_FORM,
        context: str = "",
    ) -> WorkerResponses:
        """Run ``workers`` over one request.

        Args:
            workers: Workers in turn order
            request: The shared input
            mode: TURN_ORDER threads context; FREE_FORM isolates it
            context: Base textual context

        Returns:
            Mapping of worker name → Response (one entry per worker)
        """
        logger.debug(
            "Starting collaboration: mode=%s, workers=%s",
            mode.value,
            [worker_name(w) for w in workers],
        )
        match mode:
            case CollaborationMode.TURN_ORDER:
                responses = await self._turn_order(workers, request, context)
            case CollaborationMode.FREE_FORM:
                responses = await self._free_form(workers, request, context)
        logger.debug("Collaboration complete: %d responses", len(responses))
        return responses

    async def _turn_order(
        self,
        workers: Sequence[WorkerProtocol],
        request: Request,
        context: str,
    ) -> WorkerResponses:
        responses: WorkerResponses = {}
        dynamic_context = context
        for worker in workers:
            name = worker_name(worker)
            response = await self._call(worker, name, request, dynamic_context, "TURN_ORDER")
            responses[name] = response
            # Failures are appended too, so context always grows
            dynamic_context = f"{dynamic_context}\n{name}: {response.content}"
        return responses

    async def _free_form(
        self,
        workers: Sequence[WorkerProtocol],
        request: Request,
        context: str,
    ) -> WorkerResponses:
        names = [worker_name(w) for w in workers]
        results = await asyncio.gather(*(
            self._call(worker, name, request, context, "FREE_FORM")
            for worker, name in zip(workers, names)
        ))
        return dict(zip(names, results))

    async def _call(
        self,
        worker: WorkerProtocol,
        name: str,
        request: Request,
        context: str,
        tag: str,
    ) -> Response:
        try:
            response = await worker.process_request(request, context)
        except Exception as e:
            logger.warning("[%s] Error from %s: %s", tag, name, e)
            return Response.failure(e)
        logger.debug(
            "[%s] %s responded (confidence=%.2f)", tag, name, response.confidence
        )
        return response

    async def participate(
        self,
        data: Mapping[str, Any],
        workers: Sequence[WorkerProtocol],
        user_input: Any = None,
        mode: CollaborationMode = CollaborationMode.FREE_FORM,
    ) -> WorkerResponses:
        """Collaborate over a data mapping.

        The query is ``user_input`` when given, else ``data["latestInput"]``;
        the whole mapping becomes the base context.
        """
        query = str(user_input) if user_input is not None else str(data.get("latestInput", ""))
        request = Request(type=query, context=dict(data))
        return await self.collaborate(workers, request, mode, render_context(data))

    @staticmethod
    def aggregate(response_maps: Iterable[Mapping[str, Response]]) -> WorkerResponses:
        """Per-worker consensus across several response maps.

        For each worker keeps the highest-confidence Response; ties go to
        the first one seen. Workers with no entries are absent.
        """
        best: WorkerResponses = {}
        for response_map in response_maps:
            for name, response in response_map.items():
                current = best.get(name)
                if current is None or response.confidence > current.confidence:
                    best[name] = response
        for name, response in best.items():
            logger.debug("Consensus for %s: confidence=%.2f", name, response.confidence)
        return best
