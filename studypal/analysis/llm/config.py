"""
Model catalogue and pricing for the supported LLM providers.

Prices are per million tokens in USD. ``basic`` models serve the quick
flows (explanations, grading, help); ``advanced`` ones write study plans
and reports.
"""
from __future__ import annotations

MODEL_CONFIG = {
    "gemini": {
        "label": "Google Gemini",
        "api_key_setting": "api_key_gemini",
        "env_key": "GOOGLE_API_KEY",
        "models": {
            "gemini-2.5-flash": {
                "input_price": 0.30,
                "output_price": 2.50,
                "tier": "basic",
            },
            "gemini-2.5-pro": {
                "input_price": 1.25,
                "output_price": 10.0,
                "tier": "advanced",
            },
        },
    },
    "openai": {
        "label": "OpenAI",
        "api_key_setting": "api_key_openai",
        "env_key": "OPENAI_API_KEY",
        "models": {
            "gpt-4.1-mini": {
                "input_price": 0.40,
                "output_price": 1.60,
                "tier": "basic",
            },
            "gpt-4.1": {
                "input_price": 2.0,
                "output_price": 8.0,
                "tier": "advanced",
            },
        },
    },
    "claude": {
        "label": "Anthropic Claude",
        "api_key_setting": "api_key_claude",
        "env_key": "ANTHROPIC_API_KEY",
        "models": {
            "claude-haiku-4-5": {
                "input_price": 1.0,
                "output_price": 5.0,
                "tier": "basic",
            },
            "claude-sonnet-4-5": {
                "input_price": 3.0,
                "output_price": 15.0,
                "tier": "advanced",
            },
        },
    },
}


def get_model_pricing(provider: str, model: str) -> dict | None:
    """Look up pricing for a provider/model pair, or None if unknown."""
    provider_config = MODEL_CONFIG.get(provider, {})
    return provider_config.get("models", {}).get(model)


def get_all_models_for_provider(provider: str) -> list[str]:
    """Return all model identifiers for a given provider."""
    provider_config = MODEL_CONFIG.get(provider, {})
    return list(provider_config.get("models", {}).keys())


def get_model_for_tier(provider: str, tier: str) -> str | None:
    """First model of *provider* in *tier* ('basic' or 'advanced')."""
    for name, info in MODEL_CONFIG.get(provider, {}).get("models", {}).items():
        if info.get("tier") == tier:
            return name
    return None


def estimate_cost(provider: str, model: str, input_tokens: int, output_tokens: int) -> float:
    pricing = get_model_pricing(provider, model)
    if pricing is None:
        return 0.0
    cost = (input_tokens / 1_000_000) * pricing["input_price"]
    cost += (output_tokens / 1_000_000) * pricing["output_price"]
    return round(cost, 6)
