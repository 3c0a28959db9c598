"""Utility helpers."""

from subtranslate.utils.chunking import detect_natural_breaks, plan_chunks
from subtranslate.utils.timestamps import format_timestamp, parse_timestamp
from subtranslate.utils.transcript import parse_reply, to_segments, to_transcript

__all__ = [
    "detect_natural_breaks",
    "plan_chunks",
    "format_timestamp",
    "parse_timestamp",
    "parse_reply",
    "to_segments",
    "to_transcript",
]
