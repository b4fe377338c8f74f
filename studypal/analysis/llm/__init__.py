"""
Chat backends for the study flows.

A provider is a ``BaseLLMProvider`` subclass registered under the same name
as its ``MODEL_CONFIG`` entry; that name is what users pick on the settings
page and what ``AI_PROVIDER`` holds. Flows only ever see ``LLMResponse``
objects and read the JSON object out of them.
"""

import importlib
import logging

from .config import MODEL_CONFIG

logger = logging.getLogger(__name__)

# Modules imported at package load; each registers one provider.
PROVIDER_MODULES = ("gemini_provider", "openai_provider", "claude_provider")

_providers = {}


def register_provider(cls):
    """Class decorator: make *cls* selectable by its PROVIDER_NAME."""
    if cls.PROVIDER_NAME not in MODEL_CONFIG:
        raise ValueError(f"Provider {cls.PROVIDER_NAME!r} has no MODEL_CONFIG entry")
    _providers[cls.PROVIDER_NAME] = cls
    return cls


def get_provider(name: str, api_key: str = None):
    """Instantiate the provider registered as *name*.

    Raises:
        ValueError: *name* is not a loaded provider.
    """
    try:
        cls = _providers[name]
    except KeyError:
        raise ValueError(
            f"Unknown LLM provider: {name}. Available: {sorted(_providers)}"
        ) from None
    return cls(api_key=api_key)


def get_available_providers():
    """Providers whose SDK imported cleanly, keyed by name."""
    return dict(_providers)


for _module in PROVIDER_MODULES:
    try:
        importlib.import_module(f".{_module}", package=__package__)
    except ImportError as e:
        logger.warning(f"LLM provider {_module} unavailable: {e}")
