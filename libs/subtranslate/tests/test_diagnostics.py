from __future__ import annotations

import json

import pytest

from conftest import make_segments
from subtranslate.diagnostics import SequenceGap, analyze_translation_failure, save_debug_data
from subtranslate.models.segment import TranscriptEntry


def _entries(numbers) -> list[TranscriptEntry]:  # noqa: ANN001
    return [TranscriptEntry(number=n, text=f"t{n}") for n in numbers]


def test_consecutive_gap_points_at_a_chunk() -> None:
    segments = make_segments(30)
    analysis = analyze_translation_failure(segments, _entries([n for n in range(1, 31) if not 12 <= n <= 18]))

    assert analysis.missing_numbers == list(range(12, 19))
    assert analysis.sequence_gaps == [SequenceGap(start=12, end=18)]
    assert analysis.insights == [
        "7 segments missing from translation",
        "Missing consecutive segments 12-18 - likely a chunk processing issue",
    ]


def test_single_missing_segment() -> None:
    analysis = analyze_translation_failure(make_segments(10), _entries([n for n in range(1, 11) if n != 7]))
    assert "Only missing segment 7 - likely a single segment issue" in analysis.insights


def test_two_separate_missing_segments() -> None:
    analysis = analyze_translation_failure(make_segments(10), _entries([1, 2, 4, 5, 6, 7, 8, 10]))

    assert analysis.sequence_gaps == [SequenceGap(3, 3), SequenceGap(9, 9)]
    assert "Missing segments in 2 separate ranges - likely multiple processing issues" in analysis.insights
    assert "Exactly 2 missing segments - common when the backend skips or merges segments" in analysis.insights


def test_extra_segments_beyond_range() -> None:
    analysis = analyze_translation_failure(make_segments(5), _entries(range(1, 7)))

    assert analysis.missing_numbers == []
    assert analysis.extra_numbers == [6]
    assert analysis.insights[0].startswith("1 extra segments in translation")
    assert analysis.insights[1].startswith("Translation goes beyond original range (6 > 5)")


@pytest.mark.asyncio
async def test_save_debug_data_writes_json(tmp_path) -> None:
    segments = make_segments(3)
    path = await save_debug_data(
        segments,
        _entries([1, 3]),
        log_dir=tmp_path / "logs",
        raw_input="1\nline 1",
        raw_output="1\nt1",
    )

    assert path is not None
    assert path.parent == tmp_path / "logs"
    assert path.name.startswith("translation-failure-")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["analysis"]["missing_numbers"] == [2]
    assert data["analysis"]["original_count"] == 3
    assert data["raw_llm_output"] == "1\nt1"
    assert data["original_segments"][0]["sequence"] == 1
    assert data["transcript_entries"] == [
        {"number": 1, "text": "line 1"},
        {"number": 2, "text": "line 2"},
        {"number": 3, "text": "line 3"},
    ]


@pytest.mark.asyncio
async def test_save_debug_data_swallows_write_errors(tmp_path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    path = await save_debug_data(make_segments(2), _entries([1]), log_dir=blocker)
    assert path is None
