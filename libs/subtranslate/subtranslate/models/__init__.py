"""Core data models for subtranslate."""

from subtranslate.models.segment import (
    Chunk,
    Segment,
    TranscriptEntry,
    TranscriptTranslation,
    TranslationProgress,
)

__all__ = [
    "Chunk",
    "Segment",
    "TranscriptEntry",
    "TranscriptTranslation",
    "TranslationProgress",
]
