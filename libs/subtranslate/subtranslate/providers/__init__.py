"""Provider abstractions for external services."""

from subtranslate.providers.registry import get_llm_provider

__all__ = ["get_llm_provider"]
