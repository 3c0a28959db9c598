"""Command-line entry point: translate one SRT file."""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Sequence

from subtranslate.config import Settings
from subtranslate.exceptions import SubTranslateError
from subtranslate.models.segment import TranslationProgress
from subtranslate.pipeline.translate_file import translate_subtitle_file
from subtranslate.providers import get_llm_provider
from subtranslate.services.llm_logger import FileLogWriter, LLMRequestLogger
from subtranslate.translation.backend import LLMTranslationBackend
from subtranslate.utils.logging_setup import setup_logging

logger = logging.getLogger("subtranslate.cli")


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Translate an SRT subtitle file with an LLM.")
    parser.add_argument("--input", "-i", required=True, help="Path to the source .srt file")
    parser.add_argument("--output", "-o", default=None, help="Output path (defaults to <stem>_<target>.srt)")
    parser.add_argument("--target-language", "-t", default="cs", help="Target language code")
    parser.add_argument("--source-language", default="en", help="Source language code")
    parser.add_argument("--max-chunk-size", type=int, default=None, help="Segments per request")
    parser.add_argument("--context-size", type=int, default=None, help="Preceding segments sent as context")
    parser.add_argument("--provider", default=None, help="LLM provider: gemini, openai, anthropic")
    parser.add_argument("--model", default=None, help="Model name (provider default when unset)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    settings.translation.source_language = str(args.source_language)
    settings.translation.target_language = str(args.target_language)
    if args.max_chunk_size is not None:
        settings.chunking.max_chunk_size = int(args.max_chunk_size)
    if args.context_size is not None:
        settings.chunking.context_size = int(args.context_size)
    if args.provider:
        settings.llm.provider = str(args.provider)
    if args.model:
        settings.llm.model = str(args.model)
    return settings


def _log_progress(progress: TranslationProgress) -> None:
    logger.info("progress %d%% (%d/%d segments)", progress.percentage, progress.completed, progress.total)


async def _run(args: argparse.Namespace, settings: Settings) -> int:
    provider = get_llm_provider(settings.llm_config())
    request_logger = None
    if settings.llm_log_requests:
        request_logger = LLMRequestLogger(FileLogWriter(settings.log_dir), model=provider.model)

    backend = LLMTranslationBackend(
        provider,
        source_language=settings.translation.source_language,
        target_language=settings.translation.target_language,
        request_logger=request_logger,
        temperature=settings.llm.temperature,
        max_tokens=settings.llm.max_tokens,
    )
    try:
        output = await translate_subtitle_file(
            args.input,
            args.output,
            backend=backend,
            settings=settings,
            on_progress=_log_progress,
        )
    finally:
        await backend.close()

    logger.info("done (output=%s)", output)
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)
    try:
        settings = _apply_overrides(Settings(), args)
        setup_logging(settings, level_override="DEBUG" if args.verbose else None)
        code = asyncio.run(_run(args, settings))
    except SubTranslateError as exc:
        logger.error("translation failed (error_code=%s, error=%s)", getattr(exc.error_code, "value", exc.error_code), exc)
        code = 1
    raise SystemExit(code)


if __name__ == "__main__":
    main()
