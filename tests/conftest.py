"""Pytest fixtures and test doubles for Concord tests."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
import pytest_asyncio

from concord.config import reset_config
from concord.engine import ConsciousnessEngine
from concord.models import ContextAwareEchoWorker, EchoWorker, MockBackend
from concord.registry import AgentRegistry
from concord.types.config import DreamConfig, EngineConfig
from concord.types.core import Request, Response


class FailingWorker:
    """Worker whose every call raises."""

    def __init__(self, name: str, message: str = "worker exploded") -> None:
        self._name = name
        self.message = message
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    async def process_request(self, request: Request, context: str) -> Response:
        self.calls += 1
        raise RuntimeError(self.message)


class SlowWorker:
    """Worker that records start order and yields before answering."""

    def __init__(self, name: str, log: list[str], delay: float = 0.01) -> None:
        self._name = name
        self.log = log
        self.delay = delay

    @property
    def name(self) -> str:
        return self._name

    async def process_request(self, request: Request, context: str) -> Response:
        self.log.append(f"start:{self._name}")
        await asyncio.sleep(self.delay)
        self.log.append(f"end:{self._name}")
        return Response(content=f"{self._name} done", confidence=0.5)


class FailingSink:
    """Insight sink that refuses every record."""

    def __init__(self) -> None:
        self.calls = 0

    def record_insight(self, request: str, response: str, complexity: str, **extra: Any) -> None:
        self.calls += 1
        raise OSError("disk full")


class RecordingSink:
    """Insight sink that keeps every record it receives."""

    def __init__(self) -> None:
        self.records: list[dict[str, Any]] = []
        self.unified = False

    def enable_unified_mode(self) -> None:
        self.unified = True

    def record_insight(self, request: str, response: str, complexity: str, **extra: Any) -> None:
        self.records.append({"request": request, "response": response, "complexity": complexity, **extra})


def context_of(worker: EchoWorker, call: int = 0) -> str:
    """Context string a worker received on a given call."""
    return worker.calls[call][1]


@pytest.fixture(autouse=True)
def _reset_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def backend() -> MockBackend:
    return MockBackend(responses=["A transcendent answer"])


@pytest.fixture
def registry() -> AgentRegistry:
    registry = AgentRegistry()
    registry.register("creative", ContextAwareEchoWorker("creative", confidence=0.9))
    registry.register("security", EchoWorker("security", confidence=0.95))
    registry.register("analytics", EchoWorker("analytics", confidence=0.85))
    return registry


@pytest.fixture
def engine_config() -> EngineConfig:
    return EngineConfig()


@pytest_asyncio.fixture
async def engine(registry: AgentRegistry, backend: MockBackend, engine_config: EngineConfig):
    engine = ConsciousnessEngine(registry, backend=backend, config=engine_config)
    await engine.initialize()
    yield engine
    await engine.cleanup()


@pytest.fixture
def fast_dream_config() -> DreamConfig:
    """Dream timings small enough for tests."""
    return DreamConfig(
        poll_interval=0.01,
        settle_delay=0.0,
        wake_delay=0.0,
        cycle_delay_min=0.01,
        cycle_delay_max=0.02,
        simulation_delay=0.0,
        quantum_delay=0.0,
    )
