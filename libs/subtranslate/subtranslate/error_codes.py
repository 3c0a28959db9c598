"""Canonical error codes attached to subtranslate errors."""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    UNKNOWN = "UNKNOWN"
    INVALID_CONFIG = "INVALID_CONFIG"

    LLM_FAILED = "LLM_FAILED"
    LLM_TIMEOUT = "LLM_TIMEOUT"

    CHUNK_VALIDATION_FAILED = "CHUNK_VALIDATION_FAILED"
    CHUNK_TRANSLATION_FAILED = "CHUNK_TRANSLATION_FAILED"
    GLOBAL_VALIDATION_FAILED = "GLOBAL_VALIDATION_FAILED"
    MISSING_TRANSLATION = "MISSING_TRANSLATION"
