"""OpenAI-compatible LLM Provider implementation."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import AsyncIterator

import httpx

from subtranslate.error_codes import ErrorCode
from subtranslate.exceptions import ProviderError
from subtranslate.providers.llm._retry import RetryableLLMError, transport_retry
from subtranslate.providers.llm._utils import build_usage, log_llm_call, truncate_detail
from subtranslate.providers.llm.base import LLMCompletionResult, LLMProvider, LLMUsage, Message

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"


async def _iter_sse_data(response: httpx.Response) -> AsyncIterator[str]:
    data_lines: list[str] = []
    async for line in response.aiter_lines():
        if not line:
            if data_lines:
                yield "\n".join(data_lines)
                data_lines = []
            continue
        if line.startswith(":"):
            continue
        if line.startswith("data:"):
            data_lines.append(line[5:].lstrip())
    if data_lines:
        yield "\n".join(data_lines)


def _format_http_error(response: httpx.Response, body: bytes | None) -> str:
    detail = body.decode("utf-8", errors="replace") if body else ""
    detail = truncate_detail(detail)
    if detail:
        return f"HTTP {response.status_code} {response.reason_phrase}: {detail}"
    return f"HTTP {response.status_code} {response.reason_phrase}"


def _delta_text(event: object) -> str:
    if not isinstance(event, dict):
        return ""
    choices = event.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    delta = choices[0].get("delta")
    if not isinstance(delta, dict):
        return ""
    content = delta.get("content")
    return content if isinstance(content, str) else ""


def _parse_usage(event: object) -> LLMUsage | None:
    if not isinstance(event, dict) or not isinstance(event.get("usage"), dict):
        return None
    usage = event["usage"]
    return build_usage(
        usage.get("prompt_tokens"),
        usage.get("completion_tokens"),
        total_tokens=usage.get("total_tokens"),
    )


class OpenAICompatProvider(LLMProvider):
    """OpenAI-compatible API provider (works with OpenAI, vLLM, etc.)."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str | None = None,
        provider: str = "openai",
        timeout: float = 120.0,
    ) -> None:
        self.provider = provider
        resolved = str(base_url or "").strip()
        self.base_url = (resolved or DEFAULT_OPENAI_BASE_URL).rstrip("/")
        self.api_key = api_key
        self.model = model
        self.timeout = float(timeout)
        self._client: httpx.AsyncClient | None = None

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    @transport_retry(logger)
    async def complete_with_usage(
        self,
        messages: list[Message],
        temperature: float = 0.3,
        max_tokens: int | None = None,
    ) -> LLMCompletionResult:
        payload: dict[str, object] = {
            "model": self.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
            "stream": True,
            "stream_options": {"include_usage": True},
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        client = await self._get_client()
        started = time.perf_counter()
        text_chunks: list[str] = []
        usage: LLMUsage | None = None
        try:
            async with client.stream(
                "POST",
                f"{self.base_url}/chat/completions",
                headers=self._headers(),
                json=payload,
            ) as response:
                if response.status_code >= 400:
                    body = await response.aread()
                    message = _format_http_error(response, body)
                    if response.status_code == 429 or response.status_code >= 500:
                        raise RetryableLLMError(
                            self.provider,
                            message,
                            rate_limited=response.status_code == 429,
                            error_code=ErrorCode.LLM_FAILED,
                        )
                    raise ProviderError(self.provider, message, error_code=ErrorCode.LLM_FAILED)

                async for data in _iter_sse_data(response):
                    if data.strip() == "[DONE]":
                        break
                    try:
                        event = json.loads(data)
                    except json.JSONDecodeError:
                        logger.debug("llm stream non-json data: %r", data[:200])
                        continue

                    if isinstance(event, dict) and isinstance(event.get("error"), dict):
                        error_msg = str(event["error"].get("message") or "unknown error")
                        raise ProviderError(self.provider, error_msg, error_code=ErrorCode.LLM_FAILED)

                    usage = _parse_usage(event) or usage
                    piece = _delta_text(event)
                    if piece:
                        text_chunks.append(piece)
        except httpx.TimeoutException as exc:
            logger.warning("llm request timeout: %s", exc)
            raise RetryableLLMError(self.provider, str(exc), error_code=ErrorCode.LLM_TIMEOUT) from exc
        except httpx.TransportError as exc:
            logger.warning("llm request failed: %s", exc)
            raise RetryableLLMError(self.provider, str(exc), error_code=ErrorCode.LLM_FAILED) from exc

        latency_ms = int((time.perf_counter() - started) * 1000)
        log_llm_call(logger, provider=self.provider, model=self.model, latency_ms=latency_ms, usage=usage)
        return LLMCompletionResult(text="".join(text_chunks), usage=usage)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
