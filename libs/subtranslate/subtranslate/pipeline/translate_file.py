"""End-to-end SRT translation: parse, translate, validate, reconstruct."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from subtranslate.config import Settings
from subtranslate.diagnostics import analyze_translation_failure, save_debug_data
from subtranslate.exceptions import ConfigurationError, GlobalValidationError
from subtranslate.formatters.srt import parse_srt, reconstruct_srt
from subtranslate.translation.backend import TranslationBackend
from subtranslate.translation.orchestrator import ProgressCallback, TranslationOrchestrator
from subtranslate.validation import validate_translation

logger = logging.getLogger(__name__)


def default_output_path(input_path: str | Path, target_language: str) -> Path:
    """`movie.srt` -> `movie_cs.srt`, next to the input."""
    path = Path(input_path)
    return path.with_name(f"{path.stem}_{target_language}.srt")


def build_orchestrator(backend: TranslationBackend, settings: Settings) -> TranslationOrchestrator:
    chunking = settings.chunking
    translation = settings.translation
    return TranslationOrchestrator(
        backend,
        max_chunk_size=chunking.max_chunk_size,
        context_size=chunking.context_size,
        natural_break_ms=chunking.natural_break_ms,
        break_search_ratio=chunking.break_search_ratio,
        max_attempts=translation.max_attempts,
        retry_backoff_s=translation.retry_backoff_s,
        max_concurrency=translation.max_concurrency,
    )


async def translate_srt_content(
    content: str,
    *,
    backend: TranslationBackend,
    settings: Settings,
    on_progress: ProgressCallback | None = None,
    log_dir: str | Path | None = None,
) -> str:
    segments = parse_srt(content)
    logger.info("subtitles parsed (segments=%d)", len(segments))

    orchestrator = build_orchestrator(backend, settings)
    result = await orchestrator.translate_segments(segments, on_progress=on_progress)

    try:
        validate_translation(segments, result.entries)
    except GlobalValidationError as exc:
        analysis = analyze_translation_failure(segments, result.entries)
        logger.error(
            "global validation failed (missing=%s, extra=%s, insights=%s, error=%s)",
            analysis.missing_numbers,
            analysis.extra_numbers,
            "; ".join(analysis.insights),
            exc,
        )
        await save_debug_data(
            segments,
            result.entries,
            log_dir=log_dir or settings.log_dir,
            raw_input=result.raw_input,
            raw_output=result.raw_output,
        )
        raise

    return reconstruct_srt(segments, result.entries)


async def translate_subtitle_file(
    input_path: str | Path,
    output_path: str | Path | None = None,
    *,
    backend: TranslationBackend,
    settings: Settings,
    on_progress: ProgressCallback | None = None,
) -> Path:
    """Translate `input_path` into `output_path` and return the written path.

    Nothing is written unless the whole file translated and validated; the input is
    only ever read.
    """
    src = Path(input_path)
    if not src.is_file():
        raise ConfigurationError(f"Input file not found: {src}")
    dst = Path(output_path) if output_path else default_output_path(src, settings.translation.target_language)
    if dst.resolve() == src.resolve():
        raise ConfigurationError(f"Output path must differ from input: {dst}")

    content = await asyncio.to_thread(src.read_text, encoding="utf-8-sig")
    translated = await translate_srt_content(
        content,
        backend=backend,
        settings=settings,
        on_progress=on_progress,
    )

    def _write() -> None:
        dst.parent.mkdir(parents=True, exist_ok=True)
        dst.write_text(translated, encoding="utf-8")

    await asyncio.to_thread(_write)
    logger.info("translated subtitles written (input=%s, output=%s)", src, dst)
    return dst
