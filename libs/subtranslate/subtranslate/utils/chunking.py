"""Gap-biased chunk planning for batched translation."""

from __future__ import annotations

import math
from collections.abc import Sequence

from subtranslate.exceptions import ConfigurationError
from subtranslate.models.segment import Chunk, Segment
from subtranslate.utils.timestamps import parse_timestamp

DEFAULT_MAX_CHUNK_SIZE = 25
DEFAULT_CONTEXT_SIZE = 3
DEFAULT_NATURAL_BREAK_MS = 3000
DEFAULT_BREAK_SEARCH_RATIO = 0.7


def detect_natural_breaks(
    segments: Sequence[Segment],
    *,
    threshold_ms: int = DEFAULT_NATURAL_BREAK_MS,
) -> list[int]:
    """Return indices that start a new scene.

    Index `i + 1` is a break when the silence between segment `i`'s end and segment
    `i + 1`'s start is strictly greater than `threshold_ms`.
    """
    breaks: list[int] = []
    for i in range(len(segments) - 1):
        gap = parse_timestamp(segments[i + 1].start_time) - parse_timestamp(segments[i].end_time)
        if gap > threshold_ms:
            breaks.append(i + 1)
    return breaks


def plan_chunks(
    segments: Sequence[Segment],
    *,
    max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
    context_size: int = DEFAULT_CONTEXT_SIZE,
    natural_break_ms: int = DEFAULT_NATURAL_BREAK_MS,
    break_search_ratio: float = DEFAULT_BREAK_SEARCH_RATIO,
) -> list[Chunk]:
    """Partition segments into translation chunks.

    Each chunk holds at most `max_chunk_size` segments to translate. When a natural
    break falls in the tail of a tentative chunk (past `break_search_ratio` of its
    span) the chunk is cut there, so dialogue around a pause stays together. Every
    chunk after the first carries up to `context_size` preceding segments as
    read-only context.

    Notes:
    - Concatenating `translate_segments` over all chunks reproduces `segments`.
    - Input of at most `max_chunk_size` segments (including none) yields a single
      chunk without context.
    """
    if int(max_chunk_size) < 1:
        raise ConfigurationError(f"max_chunk_size must be >= 1 (got {max_chunk_size})")
    if int(context_size) < 0:
        raise ConfigurationError(f"context_size must be >= 0 (got {context_size})")

    items = list(segments)
    total = len(items)
    if total <= max_chunk_size:
        return [Chunk(context_segments=[], translate_segments=items, chunk_index=0, total_chunks=1)]

    breaks = detect_natural_breaks(items, threshold_ms=natural_break_ms)
    chunks: list[Chunk] = []
    cursor = 0

    while cursor < total:
        size = min(int(max_chunk_size), total - cursor)
        floor_idx = cursor + math.floor(size * float(break_search_ratio))
        end = cursor + size

        nearby = next((b for b in breaks if floor_idx < b <= end), None)
        if nearby is not None and nearby < total:
            size = nearby - cursor

        context = items[max(0, cursor - int(context_size)) : cursor] if cursor > 0 else []
        chunks.append(
            Chunk(
                context_segments=context,
                translate_segments=items[cursor : cursor + size],
                chunk_index=len(chunks),
                total_chunks=0,
            )
        )
        cursor += size

    for chunk in chunks:
        chunk.total_chunks = len(chunks)
    return chunks
