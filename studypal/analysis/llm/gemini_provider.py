"""
Google Gemini LLM provider.

Default provider for the study flows, via the google-generativeai SDK.
"""
from __future__ import annotations

import logging
import time

import google.generativeai as genai

from . import register_provider
from .base import BaseLLMProvider, LLMResponse

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"


@register_provider
class GeminiProvider(BaseLLMProvider):
    """Google Gemini LLM provider."""

    PROVIDER_NAME = "gemini"

    def _ensure_configured(self):
        if not self.api_key:
            raise ValueError("Google API key is required.")
        genai.configure(api_key=self.api_key)

    def chat(
        self,
        messages: list,
        model: str = None,
        max_tokens: int = 4096,
        temperature: float = 0,
        json_output: bool = False,
    ) -> LLMResponse:
        """Send a chat request to Gemini.

        A 'system' message becomes the model's system instruction; the
        remaining messages map to Gemini's 'user'/'model' turns.
        """
        self._ensure_configured()
        model = model or DEFAULT_MODEL

        system_message = None
        contents = []
        for msg in messages:
            if msg.get("role") == "system":
                system_message = msg["content"]
                continue
            role = "model" if msg.get("role") == "assistant" else "user"
            contents.append({"role": role, "parts": [msg["content"]]})

        generation_config = {
            "max_output_tokens": max_tokens,
            "temperature": temperature,
        }
        if json_output:
            generation_config["response_mime_type"] = "application/json"

        gm = genai.GenerativeModel(
            model,
            system_instruction=system_message,
            generation_config=generation_config,
        )

        start_time = time.time()
        response = gm.generate_content(contents)
        latency_ms = int((time.time() - start_time) * 1000)

        content = response.text or ""
        usage = getattr(response, "usage_metadata", None)
        input_tokens = getattr(usage, "prompt_token_count", 0) or 0
        output_tokens = getattr(usage, "candidates_token_count", 0) or 0

        finish_reason = ""
        if response.candidates:
            finish_reason = str(response.candidates[0].finish_reason)

        return LLMResponse(
            content=content,
            model=model,
            provider=self.PROVIDER_NAME,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost=self.estimate_cost(input_tokens, output_tokens, model),
            latency_ms=latency_ms,
            finish_reason=finish_reason,
        )
