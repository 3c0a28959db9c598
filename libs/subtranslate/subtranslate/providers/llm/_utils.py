"""Shared utilities for LLM providers."""

from __future__ import annotations

import logging

from subtranslate.providers.llm.base import LLMUsage

_MAX_ERROR_DETAIL = 2000


def build_usage(
    prompt_tokens: object,
    completion_tokens: object,
    *,
    total_tokens: object = None,
) -> LLMUsage | None:
    prompt = prompt_tokens if isinstance(prompt_tokens, int) else None
    completion = completion_tokens if isinstance(completion_tokens, int) else None
    total = total_tokens if isinstance(total_tokens, int) else None
    if prompt is None and completion is None and total is None:
        return None
    if total is None and prompt is not None and completion is not None:
        total = prompt + completion
    return LLMUsage(prompt_tokens=prompt, completion_tokens=completion, total_tokens=total)


def truncate_detail(detail: str, limit: int = _MAX_ERROR_DETAIL) -> str:
    s = str(detail or "").strip()
    if len(s) <= limit:
        return s
    return s[:limit] + "…"


def log_llm_call(
    logger: logging.Logger,
    *,
    provider: str,
    model: str,
    latency_ms: int,
    usage: LLMUsage | None,
) -> None:
    logger.info(
        "llm call (provider=%s, model=%s, latency_ms=%s, prompt_tokens=%s, completion_tokens=%s, total_tokens=%s)",
        provider,
        model,
        int(latency_ms),
        getattr(usage, "prompt_tokens", None),
        getattr(usage, "completion_tokens", None),
        getattr(usage, "total_tokens", None),
    )
