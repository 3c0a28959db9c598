"""Concurrent, per-chunk validated translation of a transcript."""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Sequence

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from subtranslate.exceptions import ChunkTranslationError, ChunkValidationError
from subtranslate.formatters.srt import from_wire_format, to_wire_format
from subtranslate.models.segment import (
    Chunk,
    Segment,
    TranscriptEntry,
    TranscriptTranslation,
    TranslationProgress,
)
from subtranslate.translation.backend import TranslationBackend
from subtranslate.utils.chunking import (
    DEFAULT_BREAK_SEARCH_RATIO,
    DEFAULT_CONTEXT_SIZE,
    DEFAULT_MAX_CHUNK_SIZE,
    DEFAULT_NATURAL_BREAK_MS,
    plan_chunks,
)
from subtranslate.utils.transcript import to_segments
from subtranslate.validation import validate_chunk

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[TranslationProgress], Awaitable[None] | None]
SleepFn = Callable[[float], Awaitable[None]]

CHUNK_SEPARATOR = "\n\n=== CHUNK SEPARATOR ===\n\n"


class _ProgressCounter:
    """Segment counter whose events are delivered by a single consumer task.

    The count is updated under the lock; the callback runs outside it, in the
    order the events were produced.
    """

    def __init__(self, total: int, callback: ProgressCallback | None) -> None:
        self.total = int(total)
        self.completed = 0
        self._callback = callback
        self._lock = asyncio.Lock()
        self._queue: asyncio.Queue[TranslationProgress | None] = asyncio.Queue()
        self._consumer: asyncio.Task[None] | None = None

    def start(self) -> None:
        if self._callback is not None and self._consumer is None:
            self._consumer = asyncio.create_task(self._drain())

    async def _drain(self) -> None:
        while True:
            event = await self._queue.get()
            if event is None:
                return
            await self._emit(event)

    async def _emit(self, event: TranslationProgress) -> None:
        if self._callback is None:
            return
        try:
            result = self._callback(event)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            logger.warning(
                "progress callback failed (completed=%d, total=%d, error=%s)",
                event.completed,
                event.total,
                exc,
            )

    def _percentage(self) -> int:
        return round(self.completed / self.total * 100) if self.total else 100

    async def advance(self, count: int) -> None:
        async with self._lock:
            self.completed = min(self.total, self.completed + int(count))
            event = TranslationProgress(completed=self.completed, total=self.total, percentage=self._percentage())
        if self._consumer is not None:
            self._queue.put_nowait(event)

    async def finish(self) -> None:
        async with self._lock:
            event = TranslationProgress(completed=self.total, total=self.total, percentage=100)
        if self._consumer is not None:
            self._queue.put_nowait(event)
        await self.close()

    async def close(self) -> None:
        """Deliver queued events and stop the consumer; safe to call twice."""
        consumer, self._consumer = self._consumer, None
        if consumer is None:
            return
        self._queue.put_nowait(None)
        await consumer


class TranslationOrchestrator:
    def __init__(
        self,
        backend: TranslationBackend,
        *,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        context_size: int = DEFAULT_CONTEXT_SIZE,
        natural_break_ms: int = DEFAULT_NATURAL_BREAK_MS,
        break_search_ratio: float = DEFAULT_BREAK_SEARCH_RATIO,
        max_attempts: int = 3,
        retry_backoff_s: float = 1.0,
        max_concurrency: int | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.backend = backend
        self.max_chunk_size = int(max_chunk_size)
        self.context_size = int(context_size)
        self.natural_break_ms = int(natural_break_ms)
        self.break_search_ratio = float(break_search_ratio)
        self.max_attempts = max(1, int(max_attempts))
        self.retry_backoff_s = max(0.0, float(retry_backoff_s))
        self.max_concurrency = int(max_concurrency) if max_concurrency else None
        self._sleep = sleep

    async def translate_transcript(
        self,
        entries: Sequence[TranscriptEntry],
        on_progress: ProgressCallback | None = None,
    ) -> TranscriptTranslation:
        return await self.translate_segments(to_segments(entries), on_progress=on_progress)

    async def translate_segments(
        self,
        segments: Sequence[Segment],
        on_progress: ProgressCallback | None = None,
    ) -> TranscriptTranslation:
        """Translate all segments, one backend request per planned chunk.

        Chunks run concurrently; each reply must cover exactly the chunk's segment
        numbers or the chunk is retried. The first chunk that cannot be translated
        aborts the run with `ChunkTranslationError`.
        """
        items = list(segments)
        if not items:
            counter = _ProgressCounter(0, on_progress)
            counter.start()
            await counter.finish()
            return TranscriptTranslation()

        chunks = plan_chunks(
            items,
            max_chunk_size=self.max_chunk_size,
            context_size=self.context_size,
            natural_break_ms=self.natural_break_ms,
            break_search_ratio=self.break_search_ratio,
        )
        logger.info(
            "translation started (segments=%d, chunks=%d, max_chunk_size=%d, context_size=%d)",
            len(items),
            len(chunks),
            self.max_chunk_size,
            self.context_size,
        )

        counter = _ProgressCounter(len(items), on_progress)
        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None

        async def _run(chunk: Chunk) -> tuple[int, list[TranscriptEntry], str]:
            if semaphore is None:
                entries, raw = await self._translate_chunk(chunk)
            else:
                async with semaphore:
                    entries, raw = await self._translate_chunk(chunk)
            await counter.advance(len(entries))
            return chunk.chunk_index, entries, raw

        counter.start()
        try:
            results = await asyncio.gather(*[_run(chunk) for chunk in chunks])
        except Exception:
            await counter.close()
            raise
        results.sort(key=lambda item: item[0])

        entries = sorted(
            (entry for _, chunk_entries, _ in results for entry in chunk_entries),
            key=lambda e: int(e.number),
        )
        raw_input = CHUNK_SEPARATOR.join(to_wire_format(chunk.segments) for chunk in chunks)
        raw_output = CHUNK_SEPARATOR.join(raw for _, _, raw in results)

        await counter.finish()
        logger.info("translation completed (segments=%d, entries=%d)", len(items), len(entries))
        return TranscriptTranslation(entries=entries, raw_input=raw_input, raw_output=raw_output)

    async def _attempt(self, chunk: Chunk, attempt: int) -> tuple[list[TranscriptEntry], str]:
        try:
            raw = await self.backend.translate(chunk, attempt=attempt)
        except Exception as exc:
            raise ChunkTranslationError(
                chunk.chunk_index,
                chunk.total_chunks,
                f"{type(exc).__name__}: {exc}",
                attempts=attempt,
            ) from exc

        raw = str(raw or "")
        entries = from_wire_format(raw)
        validate_chunk(chunk, entries)
        return entries, raw

    def _log_retry(self, chunk: Chunk) -> Callable[[RetryCallState], None]:
        def _before_sleep(state: RetryCallState) -> None:
            exc = state.outcome.exception() if state.outcome else None
            wait_s = state.next_action.sleep if state.next_action else 0.0
            logger.warning(
                "chunk validation failed, retrying (chunk=%s, attempt=%d/%d, wait_s=%.1f, error=%s)",
                chunk.label,
                state.attempt_number,
                self.max_attempts,
                wait_s,
                exc,
            )

        return _before_sleep

    async def _translate_chunk(self, chunk: Chunk) -> tuple[list[TranscriptEntry], str]:
        retrying = AsyncRetrying(
            retry=retry_if_exception_type(ChunkValidationError),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.retry_backoff_s, increment=self.retry_backoff_s),
            sleep=self._sleep,
            before_sleep=self._log_retry(chunk),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    result = await self._attempt(chunk, attempt.retry_state.attempt_number)
        except ChunkValidationError as exc:
            logger.error(
                "chunk translation failed (chunk=%s, attempts=%d, error=%s)",
                chunk.label,
                self.max_attempts,
                exc,
            )
            raise ChunkTranslationError(
                chunk.chunk_index,
                chunk.total_chunks,
                str(exc),
                attempts=self.max_attempts,
            ) from exc

        logger.debug("chunk translated (chunk=%s, entries=%d)", chunk.label, len(result[0]))
        return result
