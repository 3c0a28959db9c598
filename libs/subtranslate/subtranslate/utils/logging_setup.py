"""Logging initialization helpers."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from subtranslate.config import LoggingSettings, Settings

# SDK loggers that log every HTTP request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "google_genai", "anthropic")


def _build_handlers(cfg: LoggingSettings, *, log_dir: str, level: int) -> list[logging.Handler]:
    formatter = logging.Formatter(fmt=str(cfg.format), datefmt=str(cfg.datefmt))

    handlers: list[logging.Handler] = []
    if cfg.console:
        stream = logging.StreamHandler()
        handlers.append(stream)

    if cfg.file:
        file_path = Path(str(cfg.file))
        if not file_path.is_absolute():
            file_path = Path(log_dir) / file_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                file_path,
                maxBytes=int(cfg.max_bytes),
                backupCount=int(cfg.backup_count),
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logging(settings: Settings, *, level_override: str | None = None) -> None:
    """Configure the `subtranslate` logger tree from Settings.

    Idempotent: a second call is a no-op. `level_override` (e.g. from a CLI
    `--verbose` flag) wins over `LOG_LEVEL`.
    """
    logger = logging.getLogger("subtranslate")
    if getattr(logger, "_subtranslate_configured", False):
        return

    level_name = str(level_override or settings.logging.level or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logger.setLevel(level)
    logger.handlers = _build_handlers(settings.logging, log_dir=settings.log_dir, level=level)
    logger.propagate = False

    if level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    setattr(logger, "_subtranslate_configured", True)
