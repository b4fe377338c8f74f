"""
Anthropic Claude LLM provider.

Supports Claude Haiku and Sonnet via the official anthropic Python SDK.
"""
from __future__ import annotations

import logging
import time

import anthropic

from . import register_provider
from .base import BaseLLMProvider, LLMResponse

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5"


@register_provider
class ClaudeProvider(BaseLLMProvider):
    """Anthropic Claude LLM provider."""

    PROVIDER_NAME = "claude"

    def __init__(self, api_key: str = None):
        super().__init__(api_key=api_key)
        self._client = None

    def _ensure_client(self):
        """Lazily initialize the client if not yet created."""
        if self._client is None:
            if not self.api_key:
                raise ValueError("Anthropic API key is required.")
            self._client = anthropic.Anthropic(api_key=self.api_key, timeout=120.0)
        return self._client

    def chat(
        self,
        messages: list,
        model: str = None,
        max_tokens: int = 4096,
        temperature: float = 0,
        json_output: bool = False,
    ) -> LLMResponse:
        """Send a chat completion request to Claude.

        A 'system' role message is extracted and passed as the system
        parameter. Claude has no JSON mode; ``json_output`` is ignored and the
        prompt itself asks for JSON.
        """
        client = self._ensure_client()
        model = model or DEFAULT_MODEL

        system_message = None
        chat_messages = []
        for msg in messages:
            if msg.get("role") == "system":
                system_message = msg["content"]
            else:
                chat_messages.append(msg)

        kwargs = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": chat_messages,
            "temperature": temperature,
        }
        if system_message:
            kwargs["system"] = system_message

        start_time = time.time()
        response = client.messages.create(**kwargs)
        latency_ms = int((time.time() - start_time) * 1000)

        content = ""
        for block in response.content:
            if hasattr(block, "text"):
                content += block.text

        input_tokens = response.usage.input_tokens
        output_tokens = response.usage.output_tokens

        return LLMResponse(
            content=content,
            model=model,
            provider=self.PROVIDER_NAME,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost=self.estimate_cost(input_tokens, output_tokens, model),
            latency_ms=latency_ms,
            finish_reason=response.stop_reason or "",
        )
