"""Exact-set validation of translated entries, per chunk and per file."""

from __future__ import annotations

from collections.abc import Sequence

from subtranslate.exceptions import ChunkValidationError, GlobalValidationError
from subtranslate.models.segment import Chunk, Segment, TranscriptEntry


def _matches(expected: list[int], actual: list[int]) -> bool:
    return len(expected) == len(actual) and set(expected) == set(actual)


def validate_chunk(chunk: Chunk, entries: Sequence[TranscriptEntry]) -> None:
    """Raise `ChunkValidationError` unless `entries` cover exactly the chunk's segments."""
    expected = chunk.expected_numbers
    actual = [int(e.number) for e in entries]
    if _matches(expected, actual):
        return
    raise ChunkValidationError(
        chunk.chunk_index,
        chunk.total_chunks,
        expected_numbers=expected,
        actual_numbers=actual,
    )


def validate_translation(segments: Sequence[Segment], entries: Sequence[TranscriptEntry]) -> None:
    """Whole-file gate run before reconstruction."""
    expected = [int(s.sequence) for s in segments]
    actual = [int(e.number) for e in entries]
    if _matches(expected, actual):
        return
    raise GlobalValidationError(expected_numbers=expected, actual_numbers=actual)
