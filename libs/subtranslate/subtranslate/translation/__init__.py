"""Chunked subtitle translation."""

from subtranslate.translation.backend import LLMTranslationBackend, TranslationBackend
from subtranslate.translation.orchestrator import CHUNK_SEPARATOR, ProgressCallback, TranslationOrchestrator
from subtranslate.translation.prompts import SYSTEM_PROMPT, build_translation_prompt

__all__ = [
    "CHUNK_SEPARATOR",
    "LLMTranslationBackend",
    "ProgressCallback",
    "SYSTEM_PROMPT",
    "TranslationBackend",
    "TranslationOrchestrator",
    "build_translation_prompt",
]
