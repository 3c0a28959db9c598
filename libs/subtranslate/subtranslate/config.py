"""Configuration management using pydantic-settings."""

from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from subtranslate.exceptions import ConfigurationError

_ENV_FILES = (".env", "../.env", "../../.env")


class LLMConfig(BaseSettings):
    """LLM provider configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    provider: str = "gemini"
    base_url: str | None = None
    api_key: str = ""
    model: str | None = None  # provider default when unset
    temperature: float = Field(default=0.3, ge=0)
    max_tokens: int | None = Field(default=None, ge=1)
    timeout: float = Field(default=120.0, gt=0)  # 单个请求超时（秒）


class ChunkingConfig(BaseSettings):
    """Chunk planner configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CHUNKING_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    max_chunk_size: int = Field(default=25, ge=1)
    context_size: int = Field(default=3, ge=0)
    # Gap between two subtitles that counts as a scene/pause boundary.
    natural_break_ms: int = Field(default=3000, ge=0)
    # Only breaks past this fraction of a tentative chunk may shorten it.
    break_search_ratio: float = Field(default=0.7, ge=0, le=1)


class TranslationConfig(BaseSettings):
    """Per-run translation behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="TRANSLATION_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    source_language: str = "en"
    target_language: str = "cs"
    max_attempts: int = Field(default=3, ge=1, description="Attempts per chunk on validation failure.")
    retry_backoff_s: float = Field(
        default=1.0,
        ge=0,
        description="Linear backoff unit; the wait after attempt N is N * retry_backoff_s.",
    )
    max_concurrency: int | None = Field(
        default=None,
        ge=1,
        description="Optional cap on simultaneous chunk requests (unbounded when unset).",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=_ENV_FILES,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
    console: bool = True
    file: str | None = None
    max_bytes: int = Field(default=10 * 1024 * 1024, ge=0)
    backup_count: int = Field(default=5, ge=0)


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=_ENV_FILES, env_file_encoding="utf-8", extra="ignore"
    )

    log_dir: str = "./logs"
    # Write one text file per LLM request/response/error under log_dir.
    llm_log_requests: bool = True

    llm: LLMConfig = LLMConfig()
    chunking: ChunkingConfig = ChunkingConfig()
    translation: TranslationConfig = TranslationConfig()

    # Logging
    logging: LoggingSettings = LoggingSettings()

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        raw = str(self.log_dir or "").strip()
        if not raw:
            raise ConfigurationError("log_dir must not be empty")
        self.log_dir = str(Path(raw).expanduser().resolve())
        return self

    def llm_config(self) -> dict[str, Any]:
        """Return an LLM config dict for the provider registry."""
        cfg = self.llm.model_dump()
        provider = str(cfg.get("provider") or "").strip().lower()
        if not provider:
            raise ConfigurationError("LLM provider is not configured (missing provider)")
        cfg["provider"] = provider

        # `base_url` is optional (provider-specific):
        # - openai/openai_compat: default to OpenAI public endpoint
        # - anthropic/gemini: SDK default unless overridden
        base_url = str(cfg.get("base_url") or "").strip()
        if provider in {"openai", "openai_compat"}:
            cfg["base_url"] = base_url or "https://api.openai.com/v1"
        elif base_url:
            cfg["base_url"] = base_url
        else:
            cfg.pop("base_url", None)
        return cfg
