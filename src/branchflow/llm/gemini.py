"""Google Gemini provider implementation."""

from typing import Iterator, Optional, Type

from google import genai
from google.genai import types
from pydantic import BaseModel

from .provider import LLMProvider, SystemPrompt
from ..utils.logger import Logger
from ..utils.errors import LLMError


class GeminiProvider(LLMProvider):
    """Gemini provider using the google-genai client."""

    default_model = "gemini-2.5-flash"

    def __init__(self, model: Optional[str] = None, api_key: Optional[str] = None):
        super().__init__(model, api_key)
        if not api_key:
            raise LLMError("Google AI key not configured. Run: branchflow config init")
        self.client = genai.Client(api_key=api_key)

    def _config(
        self,
        system: SystemPrompt,
        temperature: float,
        schema: Optional[Type[BaseModel]] = None,
        thinking_budget: Optional[int] = None,
        max_output_tokens: Optional[int] = None
    ) -> types.GenerateContentConfig:
        config = types.GenerateContentConfig(
            system_instruction=system,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
        )
        if schema is not None:
            config.response_mime_type = "application/json"
            config.response_schema = schema
        if thinking_budget is not None:
            config.thinking_config = types.ThinkingConfig(thinking_budget=thinking_budget)
        return config

    def stream_json(
        self,
        prompt: str,
        system: SystemPrompt,
        schema: Type[BaseModel],
        temperature: float = 0.3,
        thinking_budget: Optional[int] = None
    ) -> Iterator[str]:
        """Stream a structured response from Gemini."""
        config = self._config(system, temperature, schema, thinking_budget)
        try:
            for chunk in self.client.models.generate_content_stream(
                model=self.model,
                contents=prompt,
                config=config
            ):
                if chunk.text:
                    yield chunk.text
        except Exception as e:
            Logger.debug(f"Gemini streaming error: {e}")
            raise LLMError(f"Gemini streaming error: {e}") from e

    def generate_json(
        self,
        prompt: str,
        system: SystemPrompt,
        schema: Type[BaseModel],
        temperature: float = 0.3,
        thinking_budget: Optional[int] = None
    ) -> str:
        """Call Gemini once for a structured response."""
        return self._call(prompt, self._config(system, temperature, schema, thinking_budget))

    def generate_text(
        self,
        prompt: str,
        system: SystemPrompt,
        temperature: float = 0.3,
        max_output_tokens: Optional[int] = None
    ) -> str:
        return self._call(
            prompt,
            self._config(system, temperature, max_output_tokens=max_output_tokens)
        )

    def _call(self, prompt: str, config: types.GenerateContentConfig) -> str:
        """Call Gemini API."""
        try:
            response = self.client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config
            )
        except Exception as e:
            Logger.debug(f"Gemini API error: {e}")
            raise LLMError(f"Gemini API error: {e}") from e

        if not response.text:
            raise LLMError("Gemini returned an empty response")
        return response.text
