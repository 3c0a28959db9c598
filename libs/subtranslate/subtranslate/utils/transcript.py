"""Transcript views of segments and the tolerant `number: text` reply parser."""

from __future__ import annotations

import re
from collections.abc import Iterable

from subtranslate.models.segment import Segment, TranscriptEntry
from subtranslate.utils.timestamps import ZERO_TIMESTAMP

# Grammar (line oriented, blank lines ignored):
#   reply        := line*
#   entry_start  := DIGITS ":" WS* TEXT
#   continuation := any other line, appended to the open entry
_ENTRY_START_RE = re.compile(r"^([0-9]+):\s*(.+)$")


def to_transcript(segments: Iterable[Segment]) -> list[TranscriptEntry]:
    return [TranscriptEntry(number=int(s.sequence), text=s.text) for s in segments]


def to_segments(entries: Iterable[TranscriptEntry]) -> list[Segment]:
    """Rehydrate entries into segments with dummy timing (only number/text matter)."""
    return [
        Segment(
            sequence=int(e.number),
            start_time=ZERO_TIMESTAMP,
            end_time=ZERO_TIMESTAMP,
            text=e.text,
        )
        for e in entries
    ]


def parse_reply(text: str) -> list[TranscriptEntry]:
    """Parse free-form `number: text` model output.

    Never raises: garbage yields fewer or garbled entries, which validation then
    rejects. Continuation lines before the first entry are dropped, as are entries
    whose text is empty (with their continuations).
    """
    entries: list[TranscriptEntry] = []
    current_number: int | None = None
    current_lines: list[str] = []

    def _flush() -> None:
        if current_number is not None and current_lines:
            entries.append(TranscriptEntry(number=current_number, text="\n".join(current_lines)))

    for raw_line in str(text or "").splitlines():
        line = raw_line.strip()
        if not line:
            continue

        match = _ENTRY_START_RE.match(line)
        if match is not None:
            _flush()
            body = match.group(2).strip()
            current_number = int(match.group(1)) if body else None
            current_lines = [body] if body else []
            continue

        if current_number is not None:
            current_lines.append(line)

    _flush()
    return entries
