"""
OpenAI LLM provider.

Supports the GPT-4.1 family via the official openai Python SDK.
"""
from __future__ import annotations

import logging
import time

import openai

from . import register_provider
from .base import BaseLLMProvider, LLMResponse

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4.1-mini"


@register_provider
class OpenAIProvider(BaseLLMProvider):
    """OpenAI GPT LLM provider."""

    PROVIDER_NAME = "openai"

    def __init__(self, api_key: str = None):
        super().__init__(api_key=api_key)
        self._client = None

    def _ensure_client(self):
        """Lazily initialize the client if not yet created."""
        if self._client is None:
            if not self.api_key:
                raise ValueError("OpenAI API key is required.")
            self._client = openai.OpenAI(api_key=self.api_key, timeout=120.0)
        return self._client

    def chat(
        self,
        messages: list,
        model: str = None,
        max_tokens: int = 4096,
        temperature: float = 0,
        json_output: bool = False,
    ) -> LLMResponse:
        """Send a chat completion request to OpenAI.

        Args:
            messages: List of message dicts with 'role' and 'content' keys.
                      Supports 'system', 'user', and 'assistant' roles.
            model: Model identifier. Defaults to gpt-4.1-mini.
            max_tokens: Maximum tokens in the response.
            temperature: Sampling temperature (0 = deterministic).
            json_output: Request ``response_format={"type": "json_object"}``.

        Returns:
            LLMResponse with completion result and cost metadata.
        """
        client = self._ensure_client()
        model = model or DEFAULT_MODEL

        kwargs = {
            "model": model,
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        if json_output:
            kwargs["response_format"] = {"type": "json_object"}

        start_time = time.time()
        response = client.chat.completions.create(**kwargs)
        latency_ms = int((time.time() - start_time) * 1000)

        choice = response.choices[0]
        content = choice.message.content or ""

        input_tokens = response.usage.prompt_tokens if response.usage else 0
        output_tokens = response.usage.completion_tokens if response.usage else 0

        return LLMResponse(
            content=content,
            model=model,
            provider=self.PROVIDER_NAME,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost=self.estimate_cost(input_tokens, output_tokens, model),
            latency_ms=latency_ms,
            finish_reason=choice.finish_reason or "",
        )
