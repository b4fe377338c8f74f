"""
Provider contract for the study flows.

Every flow asks the model for one JSON object and validates it, so a
provider only has to turn chat messages into an ``LLMResponse``. Reading the
JSON object back out of the reply, and pricing it from the model catalogue,
is shared here.
"""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass

from .config import estimate_cost, get_all_models_for_provider


def parse_json_reply(content: str) -> dict | None:
    """Parse a model reply as a JSON object.

    Tolerates markdown code fences and prose around the object by falling
    back to the outermost ``{...}`` span. Returns None when nothing parses.
    """
    text = content.strip()
    if text.startswith("```"):
        text = "\n".join(l for l in text.split("\n") if not l.strip().startswith("```"))
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        start, end = text.find("{"), text.rfind("}")
        if start == -1 or end < start:
            return None
        try:
            parsed = json.loads(text[start:end + 1])
        except json.JSONDecodeError:
            return None
    return parsed if isinstance(parsed, dict) else None


@dataclass
class LLMResponse:
    """One model reply plus the usage figures logged for each flow run."""

    content: str
    model: str
    provider: str
    input_tokens: int = 0
    output_tokens: int = 0
    cost: float = 0.0
    latency_ms: int = 0
    finish_reason: str = ""

    def json_object(self) -> dict | None:
        """The reply's JSON object, or None if the model sent something else."""
        return parse_json_reply(self.content)

    def usage_summary(self) -> str:
        return (
            f"{self.provider}/{self.model} "
            f"{self.input_tokens}+{self.output_tokens} tokens "
            f"in {self.latency_ms}ms (${self.cost:.4f})"
        )


class BaseLLMProvider(ABC):
    """A chat backend registered under ``PROVIDER_NAME``.

    Subclasses implement ``chat``. Model lists and prices come from
    ``MODEL_CONFIG`` under the same name.
    """

    PROVIDER_NAME: str = ""

    def __init__(self, api_key: str = None):
        self.api_key = api_key

    @abstractmethod
    def chat(
        self,
        messages: list,
        model: str = None,
        max_tokens: int = 4096,
        temperature: float = 0,
        json_output: bool = False,
    ) -> LLMResponse:
        """Send *messages* (dicts with 'role' and 'content') to the model.

        With ``json_output`` the provider switches on its native JSON mode
        when it has one; the prompts ask for JSON either way.
        """

    def list_models(self) -> list[str]:
        return get_all_models_for_provider(self.PROVIDER_NAME)

    def estimate_cost(self, input_tokens: int, output_tokens: int, model: str) -> float:
        return estimate_cost(self.PROVIDER_NAME, model, input_tokens, output_tokens)
