"""SRT timestamp helpers."""

from __future__ import annotations

import re

_TIMESTAMP_RE = re.compile(r"([0-9]{2}):([0-9]{2}):([0-9]{2}),([0-9]{3})")

ZERO_TIMESTAMP = "00:00:00,000"


def parse_timestamp(timestamp: str) -> int:
    """Return `HH:MM:SS,mmm` as milliseconds; unparseable input yields 0."""
    match = _TIMESTAMP_RE.search(str(timestamp or ""))
    if match is None:
        return 0
    hours, minutes, seconds, millis = (int(g) for g in match.groups())
    return hours * 3_600_000 + minutes * 60_000 + seconds * 1000 + millis


def format_timestamp(ms: int) -> str:
    total_ms = max(0, int(ms))
    millis = total_ms % 1000
    total_s = total_ms // 1000
    s = total_s % 60
    total_m = total_s // 60
    m = total_m % 60
    h = total_m // 60
    return f"{h:02d}:{m:02d}:{s:02d},{millis:03d}"
