"""LLM provider factory."""

from typing import Iterator, List, Optional

from .provider import LLMProvider
from .gemini import GeminiProvider
from ..utils.logger import Logger
from ..utils.errors import LLMError


class MockProvider(LLMProvider):
    """Mock provider for testing.

    Replies are taken from ``responses`` in order; an Exception instance in
    the queue is raised instead of returned. ``fail_stream`` makes every
    streaming call fail so the blocking fallback runs.
    """

    default_model = "mock"

    def __init__(
        self,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        responses: Optional[List] = None,
        fail_stream: bool = False
    ):
        super().__init__(model, api_key)
        self.responses = list(responses or [])
        self.fail_stream = fail_stream
        self.calls: List[dict] = []

    def _next(self, kind: str, prompt: str, **kwargs) -> str:
        self.calls.append({"kind": kind, "prompt": prompt, **kwargs})
        if not self.responses:
            raise LLMError("No mock response queued")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def stream_json(self, prompt, system, schema, temperature=0.3, thinking_budget=None) -> Iterator[str]:
        if self.fail_stream:
            self.calls.append({"kind": "stream", "prompt": prompt, "temperature": temperature})
            raise LLMError("Streaming unavailable")
        text = self._next("stream", prompt, temperature=temperature, thinking_budget=thinking_budget)
        # Split into a few chunks to exercise the consumer
        step = max(1, len(text) // 3)
        for i in range(0, len(text), step):
            yield text[i:i + step]

    def generate_json(self, prompt, system, schema, temperature=0.3, thinking_budget=None) -> str:
        return self._next("json", prompt, temperature=temperature, thinking_budget=thinking_budget)

    def generate_text(self, prompt, system, temperature=0.3, max_output_tokens=None) -> str:
        return self._next("text", prompt, temperature=temperature, max_output_tokens=max_output_tokens)


def create_provider(
        provider: str = "gemini",
        model: Optional[str] = None,
        api_key: Optional[str] = None
) -> LLMProvider:
    """Create LLM provider instance."""
    providers = {
        "gemini": GeminiProvider,
        "mock": MockProvider,
    }

    if provider not in providers:
        raise LLMError(f"Unknown provider: {provider}")

    Logger.debug(f"Creating {provider} provider with model {model or 'default'}")
    return providers[provider](model, api_key)


__all__ = ["LLMProvider", "GeminiProvider", "MockProvider", "create_provider"]
