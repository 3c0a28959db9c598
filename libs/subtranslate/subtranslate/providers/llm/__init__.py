"""LLM Provider implementations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from subtranslate.providers.llm.base import LLMCompletionResult, LLMProvider, LLMUsage, Message

if TYPE_CHECKING:
    from subtranslate.providers.llm.anthropic import AnthropicProvider
    from subtranslate.providers.llm.gemini import GeminiProvider
    from subtranslate.providers.llm.openai_compat import OpenAICompatProvider

__all__ = [
    "AnthropicProvider",
    "GeminiProvider",
    "LLMCompletionResult",
    "LLMProvider",
    "LLMUsage",
    "Message",
    "OpenAICompatProvider",
]


def __getattr__(name: str) -> Any:
    # SDK-backed providers are imported lazily so unused SDKs cost nothing at import.
    if name == "AnthropicProvider":
        from subtranslate.providers.llm.anthropic import AnthropicProvider

        return AnthropicProvider
    if name == "GeminiProvider":
        from subtranslate.providers.llm.gemini import GeminiProvider

        return GeminiProvider
    if name == "OpenAICompatProvider":
        from subtranslate.providers.llm.openai_compat import OpenAICompatProvider

        return OpenAICompatProvider
    raise AttributeError(name)
