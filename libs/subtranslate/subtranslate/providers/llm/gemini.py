"""Google Gemini LLM Provider implementation (google-genai SDK)."""

from __future__ import annotations

import logging
import time
from typing import Any, TypedDict

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from subtranslate.error_codes import ErrorCode
from subtranslate.exceptions import ProviderError
from subtranslate.providers.llm._retry import RetryableLLMError, transport_retry
from subtranslate.providers.llm._utils import build_usage, log_llm_call, truncate_detail
from subtranslate.providers.llm.base import LLMCompletionResult, LLMProvider, LLMUsage, Message

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


class _GeminiPart(TypedDict):
    text: str


class _GeminiContent(TypedDict):
    role: str
    parts: list[_GeminiPart]


def _split_system_instruction(messages: list[Message]) -> tuple[str | None, list[_GeminiContent]]:
    system_chunks: list[str] = []
    contents: list[_GeminiContent] = []
    for m in messages:
        role = str(m.role or "").strip().lower()
        if role == "system":
            if m.content:
                system_chunks.append(m.content)
            continue
        role = "model" if role in {"assistant", "model"} else "user"
        contents.append({"role": role, "parts": [{"text": str(m.content)}]})
    system_instruction = "\n\n".join(system_chunks).strip()
    return system_instruction or None, contents


def _parse_usage_metadata(response: object) -> LLMUsage | None:
    usage_obj = getattr(response, "usage_metadata", None)
    if usage_obj is None:
        return None
    return build_usage(
        getattr(usage_obj, "prompt_token_count", None),
        getattr(usage_obj, "candidates_token_count", None),
        total_tokens=getattr(usage_obj, "total_token_count", None),
    )


class GeminiProvider(LLMProvider):
    """Google Gemini API provider (Google AI Studio / compatible endpoints)."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        base_url: str | None = None,
        timeout: float = 120.0,
    ) -> None:
        self.provider = "gemini"
        self.api_key = str(api_key or "")
        self.model = str(model or "").strip() or DEFAULT_GEMINI_MODEL
        self.base_url = str(base_url or "").strip() or None
        if not self.api_key:
            raise ValueError("GeminiProvider requires api_key")

        http_kwargs: dict[str, Any] = {"timeout": int(float(timeout) * 1000)}  # milliseconds
        if self.base_url:
            http_kwargs["base_url"] = self.base_url
        self._client = genai.Client(
            api_key=self.api_key,
            http_options=genai_types.HttpOptions(**http_kwargs),
        )

    @transport_retry(logger)
    async def complete_with_usage(
        self,
        messages: list[Message],
        temperature: float = 0.3,
        max_tokens: int | None = None,
    ) -> LLMCompletionResult:
        system_instruction, contents = _split_system_instruction(messages)
        config = genai_types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=float(temperature),
            max_output_tokens=int(max_tokens) if max_tokens is not None else None,
        )

        started = time.perf_counter()
        try:
            response = await self._client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )
        except genai_errors.APIError as exc:
            status = int(getattr(exc, "code", 0) or 0)
            message = truncate_detail(str(exc))
            if status == 429 or status >= 500:
                logger.warning("llm request failed (status=%s): %s", status, message)
                raise RetryableLLMError(
                    self.provider, message, rate_limited=status == 429, error_code=ErrorCode.LLM_FAILED
                ) from exc
            raise ProviderError(self.provider, message, error_code=ErrorCode.LLM_FAILED) from exc
        except httpx.TimeoutException as exc:
            logger.warning("llm request timeout: %s", exc)
            raise RetryableLLMError(self.provider, str(exc), error_code=ErrorCode.LLM_TIMEOUT) from exc
        except httpx.TransportError as exc:
            logger.warning("llm request failed: %s", exc)
            raise RetryableLLMError(self.provider, str(exc), error_code=ErrorCode.LLM_FAILED) from exc

        latency_ms = int((time.perf_counter() - started) * 1000)
        usage = _parse_usage_metadata(response)
        log_llm_call(logger, provider=self.provider, model=self.model, latency_ms=latency_ms, usage=usage)
        return LLMCompletionResult(text=str(getattr(response, "text", "") or ""), usage=usage)

    async def close(self) -> None:
        aclose = getattr(self._client.aio, "aclose", None)
        if callable(aclose):
            await aclose()
