"""Per-request LLM exchange logging.

Every request, response and error is written to its own text file under the log
directory so a failed run can be replayed by hand. Logging never fails a
translation: every error in here is reported through `logging` and swallowed.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class LogWriter(Protocol):
    async def write(self, file_name: str, content: str) -> None: ...


class FileLogWriter:
    """Writes UTF-8 files into `log_dir`, creating it on first use."""

    def __init__(self, log_dir: str | Path) -> None:
        self.log_dir = Path(log_dir)

    def _write_sync(self, file_name: str, content: str) -> Path:
        self.log_dir.mkdir(parents=True, exist_ok=True)
        path = self.log_dir / file_name
        path.write_text(content, encoding="utf-8")
        return path

    async def write(self, file_name: str, content: str) -> None:
        try:
            path = await asyncio.to_thread(self._write_sync, file_name, content)
        except OSError as exc:
            logger.error("failed to write llm log (dir=%s, file=%s, error=%s)", self.log_dir, file_name, exc)
            return
        logger.debug("llm log written (path=%s)", path)


@dataclass(frozen=True)
class RequestMeta:
    """Everything known about a request when it is sent."""

    source_language: str
    target_language: str
    chunk_index: int | None = None
    total_chunks: int | None = None
    segments_to_translate: int | None = None
    context_segments: int | None = None


def _na(value: object) -> str:
    return "N/A" if value is None else str(value)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _chunk_label(meta: RequestMeta) -> str:
    if meta.chunk_index is None:
        return "N/A"
    return f"{meta.chunk_index + 1}/{_na(meta.total_chunks)}"


class LLMRequestLogger:
    def __init__(self, writer: LogWriter, *, model: str) -> None:
        self._writer = writer
        self.model = model

    @staticmethod
    def new_request_id() -> str:
        return f"req_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"

    def _header(self, request_id: str, meta: RequestMeta) -> list[str]:
        return [
            f"TIMESTAMP: {_timestamp()}",
            f"REQUEST_ID: {request_id}",
            f"MODEL: {self.model}",
            f"SOURCE_LANGUAGE: {meta.source_language}",
            f"TARGET_LANGUAGE: {meta.target_language}",
            f"CHUNK: {_chunk_label(meta)}",
        ]

    async def _safe_write(self, file_name: str, lines: list[str]) -> None:
        try:
            await self._writer.write(file_name, "\n".join(lines) + "\n")
        except Exception as exc:
            logger.error("llm logger write failed (file=%s, error=%s)", file_name, exc)

    async def log_request(self, prompt: str, meta: RequestMeta) -> str:
        request_id = self.new_request_id()
        logger.debug(
            "llm request started (request_id=%s, model=%s, chunk=%s, prompt_chars=%d, translate=%s, context=%s)",
            request_id,
            self.model,
            _chunk_label(meta),
            len(prompt),
            _na(meta.segments_to_translate),
            _na(meta.context_segments),
        )
        await self._safe_write(
            f"{request_id}_request.txt",
            [
                *self._header(request_id, meta),
                f"SEGMENTS_TO_TRANSLATE: {_na(meta.segments_to_translate)}",
                f"CONTEXT_SEGMENTS: {_na(meta.context_segments)}",
                f"PROMPT_LENGTH: {len(prompt)}",
                "",
                "=== PROMPT ===",
                prompt,
            ],
        )
        return request_id

    async def log_response(
        self,
        request_id: str,
        response: str,
        meta: RequestMeta,
        *,
        duration_ms: int,
        translated_segments: int | None = None,
    ) -> None:
        logger.debug(
            "llm request completed (request_id=%s, chunk=%s, duration_ms=%d, response_chars=%d, entries=%s)",
            request_id,
            _chunk_label(meta),
            duration_ms,
            len(response),
            _na(translated_segments),
        )
        await self._safe_write(
            f"{request_id}_response.txt",
            [
                *self._header(request_id, meta),
                f"DURATION_MS: {duration_ms}",
                f"RESPONSE_LENGTH: {len(response)}",
                f"TRANSLATED_SEGMENTS: {_na(translated_segments)}",
                "",
                "=== RESPONSE ===",
                response,
            ],
        )

    async def log_error(
        self,
        request_id: str,
        prompt: str,
        error: BaseException,
        meta: RequestMeta,
        *,
        duration_ms: int,
    ) -> None:
        logger.error(
            "llm request failed (request_id=%s, chunk=%s, duration_ms=%d, error=%s)",
            request_id,
            _chunk_label(meta),
            duration_ms,
            error,
        )
        await self._safe_write(
            f"{request_id}_error.txt",
            [
                *self._header(request_id, meta),
                f"DURATION_MS: {duration_ms}",
                f"PROMPT_LENGTH: {len(prompt)}",
                "",
                "=== ERROR ===",
                f"TYPE: {type(error).__name__}",
                f"MESSAGE: {error}",
                "",
                "=== ORIGINAL PROMPT ===",
                prompt,
            ],
        )
