"""In-process implementations of the engine's external interfaces.

- MockBackend: scripted ContentBackend for tests and demos
- EchoWorker / ContextAwareEchoWorker: deterministic sub-agents
"""

from concord.models.mock import MockBackend
from concord.models.workers import ContextAwareEchoWorker, EchoWorker, demo_registry

__all__ = [
    "MockBackend",
    "EchoWorker",
    "ContextAwareEchoWorker",
    "demo_registry",
]
