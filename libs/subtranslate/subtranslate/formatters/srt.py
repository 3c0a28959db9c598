"""SRT codec and the timing-free wire format used for backend exchange.

Wire format: one block per segment, the sequence number on the first line and the
(possibly multi-line) text below it, blocks separated by a blank line::

    12
    <i>Hello</i>

    13
    [door slams]
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence

from subtranslate.exceptions import MissingTranslationError
from subtranslate.models.segment import Segment, TranscriptEntry

logger = logging.getLogger(__name__)

_BLOCK_SEP_RE = re.compile(r"\n\s*\n")
_INDEX_RE = re.compile(r"^[0-9]+$")
_TIMING_RE = re.compile(r"^([0-9]{2}:[0-9]{2}:[0-9]{2},[0-9]{3})\s*-->\s*([0-9]{2}:[0-9]{2}:[0-9]{2},[0-9]{3})$")


def _normalize(text: str) -> str:
    raw = str(text or "")
    if raw.startswith("\ufeff"):
        raw = raw[1:]
    return raw.replace("\r\n", "\n").replace("\r", "\n")


def _split_blocks(text: str) -> list[list[str]]:
    blocks: list[list[str]] = []
    for block in _BLOCK_SEP_RE.split(_normalize(text)):
        stripped = block.strip()
        if stripped:
            blocks.append(stripped.split("\n"))
    return blocks


def _parse_int(line: str) -> int | None:
    # ASCII digits only; int() also takes "1_0", "+5" and other scripts
    text = line.strip()
    if not _INDEX_RE.match(text):
        return None
    return int(text)


def parse_srt(content: str) -> list[Segment]:
    """Parse SubRip text into segments; malformed blocks are dropped."""
    segments: list[Segment] = []
    for lines in _split_blocks(content):
        if len(lines) < 3:
            logger.debug("srt block skipped (lines=%d)", len(lines))
            continue

        sequence = _parse_int(lines[0])
        if sequence is None:
            logger.debug("srt block skipped (bad index=%r)", lines[0][:40])
            continue

        match = _TIMING_RE.match(lines[1].strip())
        if match is None:
            logger.debug("srt block skipped (sequence=%d, bad timing=%r)", sequence, lines[1][:60])
            continue

        segments.append(
            Segment(
                sequence=sequence,
                start_time=match.group(1),
                end_time=match.group(2),
                text="\n".join(lines[2:]).strip(),
            )
        )
    return segments


def reconstruct_srt(
    segments: Sequence[Segment],
    translated_entries: Iterable[TranscriptEntry],
) -> str:
    """Rebuild SubRip text with original numbering/timing and translated text."""
    translated: dict[int, str] = {}
    for entry in translated_entries:
        translated[int(entry.number)] = entry.text

    blocks: list[str] = []
    for segment in segments:
        text = translated.get(int(segment.sequence))
        if not text:
            raise MissingTranslationError(segment.sequence, segment.text)
        blocks.append(f"{segment.sequence}\n{segment.start_time} --> {segment.end_time}\n{text}\n")
    return "\n".join(blocks).strip()


def to_wire_format(segments: Iterable[Segment]) -> str:
    return "\n\n".join(f"{s.sequence}\n{s.text}" for s in segments)


def from_wire_format(text: str) -> list[TranscriptEntry]:
    """Parse wire-format blocks; blocks without a number or text are dropped."""
    entries: list[TranscriptEntry] = []
    for lines in _split_blocks(text):
        if len(lines) < 2:
            continue
        number = _parse_int(lines[0])
        if number is None:
            continue
        body = "\n".join(lines[1:]).strip()
        if body:
            entries.append(TranscriptEntry(number=number, text=body))
    return entries


def count_segments(content: str) -> int:
    return len(parse_srt(content))
