"""Anthropic LLM Provider implementation using official SDK."""

from __future__ import annotations

import logging
import time

import anthropic

from subtranslate.error_codes import ErrorCode
from subtranslate.exceptions import ProviderError
from subtranslate.providers.llm._retry import RetryableLLMError, transport_retry
from subtranslate.providers.llm._utils import build_usage, log_llm_call
from subtranslate.providers.llm.base import LLMCompletionResult, LLMProvider, LLMUsage, Message

logger = logging.getLogger(__name__)

DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 8192


def _split_system_messages(messages: list[Message]) -> tuple[str | None, list[dict[str, str]]]:
    system_chunks: list[str] = []
    out: list[dict[str, str]] = []
    for m in messages:
        role = str(m.role or "").strip().lower()
        if role == "system":
            if m.content:
                system_chunks.append(str(m.content))
            continue
        if role not in {"user", "assistant"}:
            role = "user"
        out.append({"role": role, "content": str(m.content or "")})
    system = "\n\n".join(system_chunks).strip()
    return (system or None), out


class AnthropicProvider(LLMProvider):
    """Anthropic provider using official SDK with streaming support."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_ANTHROPIC_MODEL,
        base_url: str | None = None,
        timeout: float = 120.0,
    ) -> None:
        self.provider = "anthropic"
        self.api_key = str(api_key or "").strip()
        if not self.api_key:
            raise ValueError("AnthropicProvider requires api_key")
        self.model = str(model or "").strip() or DEFAULT_ANTHROPIC_MODEL

        # SDK expects base_url without the /v1 suffix
        resolved = str(base_url or "").strip().rstrip("/")
        if resolved.endswith("/v1"):
            resolved = resolved[:-3]
        self.base_url = resolved or None

        self._client = anthropic.AsyncAnthropic(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=float(timeout),
        )

    @transport_retry(logger)
    async def complete_with_usage(
        self,
        messages: list[Message],
        temperature: float = 0.3,
        max_tokens: int | None = None,
    ) -> LLMCompletionResult:
        system, chat = _split_system_messages(messages)
        started = time.perf_counter()
        text_chunks: list[str] = []
        usage: LLMUsage | None = None

        try:
            async with self._client.messages.stream(
                model=self.model,
                messages=chat,
                system=system or anthropic.NOT_GIVEN,
                temperature=float(temperature),
                max_tokens=int(max_tokens) if max_tokens is not None else DEFAULT_MAX_TOKENS,
            ) as stream:
                async for text in stream.text_stream:
                    text_chunks.append(text)

                final_message = await stream.get_final_message()
                if final_message and final_message.usage:
                    usage = build_usage(
                        final_message.usage.input_tokens,
                        final_message.usage.output_tokens,
                    )
        except anthropic.RateLimitError as exc:
            logger.warning("llm rate limited: %s", exc)
            raise RetryableLLMError(
                self.provider, str(exc), rate_limited=True, error_code=ErrorCode.LLM_FAILED
            ) from exc
        except anthropic.APIStatusError as exc:
            if exc.status_code >= 500:
                logger.warning("llm server error: %s", exc)
                raise RetryableLLMError(self.provider, str(exc), error_code=ErrorCode.LLM_FAILED) from exc
            logger.warning("llm request failed: %s", exc)
            raise ProviderError(self.provider, str(exc), error_code=ErrorCode.LLM_FAILED) from exc
        except anthropic.APIConnectionError as exc:
            # APITimeoutError is a subclass
            logger.warning("llm connection error: %s", exc)
            raise RetryableLLMError(self.provider, str(exc), error_code=ErrorCode.LLM_TIMEOUT) from exc

        latency_ms = int((time.perf_counter() - started) * 1000)
        log_llm_call(logger, provider=self.provider, model=self.model, latency_ms=latency_ms, usage=usage)
        return LLMCompletionResult(text="".join(text_chunks), usage=usage)

    async def close(self) -> None:
        await self._client.close()
