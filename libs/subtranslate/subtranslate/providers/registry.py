"""Provider factory and registry."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from subtranslate.exceptions import ConfigurationError
from subtranslate.providers.llm.base import LLMProvider


def _require_api_key(provider: str, config: Mapping[str, Any]) -> str:
    api_key = str(config.get("api_key") or "").strip()
    if not api_key:
        raise ConfigurationError(f"{provider} provider requires api_key (set LLM_API_KEY)")
    return api_key


def get_llm_provider(config: Mapping[str, Any]) -> LLMProvider:
    """Get LLM provider based on configuration."""
    provider_type = str(config.get("provider") or "gemini").strip().lower()
    timeout = float(config.get("timeout") or 120.0)

    match provider_type:
        case "openai" | "openai_compat":
            from subtranslate.providers.llm.openai_compat import OpenAICompatProvider

            # Local OpenAI-compatible servers (vLLM, llama.cpp) often run without a key.
            return OpenAICompatProvider(
                api_key=str(config.get("api_key") or ""),
                model=str(config.get("model") or "gpt-4o-mini"),
                base_url=config.get("base_url"),
                provider=provider_type,
                timeout=timeout,
            )
        case "gemini":
            from subtranslate.providers.llm.gemini import GeminiProvider

            return GeminiProvider(
                api_key=_require_api_key("Gemini", config),
                model=str(config.get("model") or "gemini-2.5-flash"),
                base_url=config.get("base_url"),
                timeout=timeout,
            )
        case "anthropic" | "claude":
            from subtranslate.providers.llm.anthropic import AnthropicProvider

            return AnthropicProvider(
                api_key=_require_api_key("Anthropic", config),
                model=str(config.get("model") or "claude-sonnet-4-20250514"),
                base_url=config.get("base_url"),
                timeout=timeout,
            )
        case _:
            raise ConfigurationError(f"Unknown LLM provider: {provider_type}")
