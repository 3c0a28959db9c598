"""Translation backends: the single capability the orchestrator depends on."""

from __future__ import annotations

import logging
import time
from typing import Protocol, runtime_checkable

from subtranslate.formatters.srt import from_wire_format
from subtranslate.models.segment import Chunk
from subtranslate.providers.llm import LLMProvider, Message
from subtranslate.services.llm_logger import LLMRequestLogger, RequestMeta
from subtranslate.translation.prompts import SYSTEM_PROMPT, build_translation_prompt

logger = logging.getLogger(__name__)


@runtime_checkable
class TranslationBackend(Protocol):
    async def translate(self, chunk: Chunk, *, attempt: int = 1) -> str:
        """Return raw wire-format text for `chunk.translate_segments`."""
        ...


class LLMTranslationBackend:
    """Backend that prompts an LLM provider for one chunk at a time."""

    def __init__(
        self,
        provider: LLMProvider,
        *,
        source_language: str,
        target_language: str,
        request_logger: LLMRequestLogger | None = None,
        temperature: float = 0.3,
        max_tokens: int | None = None,
    ) -> None:
        self.provider = provider
        self.source_language = source_language
        self.target_language = target_language
        self.request_logger = request_logger
        self.temperature = float(temperature)
        self.max_tokens = max_tokens

    def _meta(self, chunk: Chunk) -> RequestMeta:
        return RequestMeta(
            source_language=self.source_language,
            target_language=self.target_language,
            chunk_index=chunk.chunk_index,
            total_chunks=chunk.total_chunks,
            segments_to_translate=len(chunk.translate_segments),
            context_segments=len(chunk.context_segments),
        )

    async def translate(self, chunk: Chunk, *, attempt: int = 1) -> str:
        prompt = build_translation_prompt(
            chunk,
            source_language=self.source_language,
            target_language=self.target_language,
            attempt=attempt,
        )
        meta = self._meta(chunk)
        request_id = None
        if self.request_logger is not None:
            request_id = await self.request_logger.log_request(prompt, meta)

        started = time.perf_counter()
        try:
            text = await self.provider.complete(
                [
                    Message(role="system", content=SYSTEM_PROMPT),
                    Message(role="user", content=prompt),
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as exc:
            if self.request_logger is not None and request_id is not None:
                duration_ms = int((time.perf_counter() - started) * 1000)
                await self.request_logger.log_error(request_id, prompt, exc, meta, duration_ms=duration_ms)
            raise

        text = str(text or "").strip()
        if self.request_logger is not None and request_id is not None:
            duration_ms = int((time.perf_counter() - started) * 1000)
            await self.request_logger.log_response(
                request_id,
                text,
                meta,
                duration_ms=duration_ms,
                translated_segments=len(from_wire_format(text)),
            )
        return text

    async def close(self) -> None:
        await self.provider.close()
