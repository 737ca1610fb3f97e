"""Mock content backend for testing."""

from dataclasses import dataclass, field


@dataclass(slots=True)
class MockBackend:
    """Mock content-generation backend.

    Returns predefined responses in rotation or echoes the prompt. Set
    ``error`` to make every call raise, or ``empty`` to return ``None``.
    """

    responses: list[str] = field(default_factory=list)
    error: Exception | None = None
    empty: bool = False
    _call_count: int = field(default=0, init=False)
    _prompts: list[str] = field(default_factory=list, init=False)

    @property
    def call_count(self) -> int:
        """Number of times generate_content was called."""
        return self._call_count

    @property
    def prompts(self) -> list[str]:
        """All prompts received."""
        return self._prompts

    async def generate_content(self, prompt: str) -> str | None:
        """Generate a mock response."""
        self._prompts.append(prompt)
        self._call_count += 1

        if self.error is not None:
            raise self.error
        if self.empty:
            return None
        if self.responses:
            return self.responses[(self._call_count - 1) % len(self.responses)]
        return f"Mock response to: {prompt[:50]}"
