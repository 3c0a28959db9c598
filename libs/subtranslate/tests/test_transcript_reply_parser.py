from __future__ import annotations

import random

import pytest

from subtranslate.models.segment import Segment, TranscriptEntry
from subtranslate.utils.timestamps import ZERO_TIMESTAMP, format_timestamp, parse_timestamp
from subtranslate.utils.transcript import parse_reply, to_segments, to_transcript


def test_parse_reply_joins_continuation_lines() -> None:
    reply = "1: Hello there\nhow are you\n\n2:Bye\n\n   \n10:  see you"
    assert parse_reply(reply) == [
        TranscriptEntry(number=1, text="Hello there\nhow are you"),
        TranscriptEntry(number=2, text="Bye"),
        TranscriptEntry(number=10, text="see you"),
    ]


def test_parse_reply_drops_leading_noise_and_empty_entries() -> None:
    reply = "Here is the translation:\n3:\norphan continuation\n4: real"
    assert parse_reply(reply) == [TranscriptEntry(number=4, text="real")]


def test_parse_reply_never_raises_on_garbage() -> None:
    for garbage in ("", "   ", "::::", "abc: def", "1 2 3", "```json\n{}\n```", None):
        assert parse_reply(garbage) == []  # type: ignore[arg-type]


def test_transcript_conversion_uses_dummy_timing() -> None:
    segments = [Segment(sequence=7, start_time="00:00:01,000", end_time="00:00:02,000", text="Hi")]
    entries = to_transcript(segments)
    assert entries == [TranscriptEntry(number=7, text="Hi")]

    back = to_segments(entries)
    assert back == [Segment(sequence=7, start_time=ZERO_TIMESTAMP, end_time=ZERO_TIMESTAMP, text="Hi")]


def test_timestamp_helpers() -> None:
    assert parse_timestamp("01:02:03,456") == 3_723_456
    assert parse_timestamp("garbage") == 0
    assert format_timestamp(3_723_456) == "01:02:03,456"
    assert format_timestamp(-5) == ZERO_TIMESTAMP


_NOISE = ["", " ", "4", "56", ":", ": ", "\r", "\t", "<i>", "é", "٣", "_", "+", "->", "word"]


@pytest.mark.parametrize("seed", range(20))
def test_parse_reply_never_raises_on_random_lines(seed: int) -> None:
    rng = random.Random(seed)
    lines = ["".join(rng.choice(_NOISE) for _ in range(rng.randint(0, 6))) for _ in range(rng.randint(0, 40))]

    entries = parse_reply("\n".join(lines))

    assert isinstance(entries, list)
    assert all(isinstance(e.number, int) and e.text for e in entries)
