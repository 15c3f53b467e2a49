"""LLM provider registry with lazy loading.

Usage:
    from src.analysis.llm import get_provider

    provider = get_provider("gemini")
    raw = await provider.generate(request, api_key=key)
"""

from __future__ import annotations

import importlib

from src.analysis.llm.base import LLMProvider, ProviderRequest, parse_response

__all__ = [
    "LLMProvider",
    "ProviderRequest",
    "available_providers",
    "get_provider",
    "parse_response",
]

# Lazy registry: maps provider name → (module_path, class_name)
_REGISTRY: dict[str, tuple[str, str]] = {
    "gemini": ("src.analysis.llm.gemini", "GeminiProvider"),
}


def get_provider(name: str) -> LLMProvider:
    """Instantiate and return an LLM provider by name.

    Raises:
        ValueError: If the provider name is unknown.
    """
    if name not in _REGISTRY:
        valid = ", ".join(sorted(_REGISTRY))
        msg = f"Unknown LLM provider '{name}'. Available: {valid}"
        raise ValueError(msg)

    module_path, class_name = _REGISTRY[name]
    module = importlib.import_module(module_path)
    cls = getattr(module, class_name)
    return cls()  # type: ignore[no-any-return]


def available_providers() -> list[str]:
    """Return sorted list of registered provider names."""
    return sorted(_REGISTRY)
