"""Base LLM provider interface."""

from abc import ABC, abstractmethod
from typing import Iterator, List, Optional, Type, Union

from pydantic import BaseModel

SystemPrompt = Union[str, List[str]]


class LLMProvider(ABC):
    """Abstract base class for LLM providers.

    Structured calls take a pydantic model as ``schema`` and return the raw
    JSON text; validation belongs to the caller.
    """

    default_model: Optional[str] = None

    def __init__(self, model: Optional[str] = None, api_key: Optional[str] = None):
        self.model = model or self.default_model
        self.api_key = api_key

    @abstractmethod
    def stream_json(
        self,
        prompt: str,
        system: SystemPrompt,
        schema: Type[BaseModel],
        temperature: float = 0.3,
        thinking_budget: Optional[int] = None
    ) -> Iterator[str]:
        """Yield text chunks of a structured response as they arrive."""
        pass

    @abstractmethod
    def generate_json(
        self,
        prompt: str,
        system: SystemPrompt,
        schema: Type[BaseModel],
        temperature: float = 0.3,
        thinking_budget: Optional[int] = None
    ) -> str:
        """Return a complete structured response."""
        pass

    @abstractmethod
    def generate_text(
        self,
        prompt: str,
        system: SystemPrompt,
        temperature: float = 0.3,
        max_output_tokens: Optional[int] = None
    ) -> str:
        """Return a free-text response."""
        pass

