"""Subtitle codecs."""

from subtranslate.formatters.srt import (
    count_segments,
    from_wire_format,
    parse_srt,
    reconstruct_srt,
    to_wire_format,
)

__all__ = ["count_segments", "from_wire_format", "parse_srt", "reconstruct_srt", "to_wire_format"]
