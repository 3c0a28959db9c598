"""Diagnostics for whole-file validation failures.

Everything here is advisory: the output feeds log records and a JSON dump, never
control flow or retries.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from subtranslate.models.segment import Segment, TranscriptEntry
from subtranslate.utils.transcript import to_transcript

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SequenceGap:
    """An inclusive run of consecutive missing segment numbers."""

    start: int
    end: int


@dataclass
class FailureAnalysis:
    missing_numbers: list[int] = field(default_factory=list)
    extra_numbers: list[int] = field(default_factory=list)
    sequence_gaps: list[SequenceGap] = field(default_factory=list)
    insights: list[str] = field(default_factory=list)


def _group_consecutive(numbers: Sequence[int]) -> list[SequenceGap]:
    gaps: list[SequenceGap] = []
    if not numbers:
        return gaps
    start = end = numbers[0]
    for n in numbers[1:]:
        if n == end + 1:
            end = n
            continue
        gaps.append(SequenceGap(start=start, end=end))
        start = end = n
    gaps.append(SequenceGap(start=start, end=end))
    return gaps


def analyze_translation_failure(
    segments: Sequence[Segment],
    entries: Sequence[TranscriptEntry],
) -> FailureAnalysis:
    original = {int(s.sequence) for s in segments}
    translated = {int(e.number) for e in entries}

    missing = sorted(original - translated)
    extra = sorted(translated - original)
    gaps = _group_consecutive(missing)

    insights: list[str] = []
    if missing:
        insights.append(f"{len(missing)} segments missing from translation")
        if len(gaps) == 1 and gaps[0].start == gaps[0].end:
            insights.append(f"Only missing segment {missing[0]} - likely a single segment issue")
        elif len(gaps) == 1:
            insights.append(
                f"Missing consecutive segments {gaps[0].start}-{gaps[0].end} - likely a chunk processing issue"
            )
        else:
            insights.append(
                f"Missing segments in {len(gaps)} separate ranges - likely multiple processing issues"
            )

    if extra:
        insights.append(
            f"{len(extra)} extra segments in translation - the backend may have generated additional content"
        )

    if original and translated and max(translated) > max(original):
        insights.append(
            f"Translation goes beyond original range ({max(translated)} > {max(original)}) "
            "- the backend may have continued generating"
        )

    if len(missing) == 2 and not extra:
        insights.append("Exactly 2 missing segments - common when the backend skips or merges segments")

    return FailureAnalysis(
        missing_numbers=missing,
        extra_numbers=extra,
        sequence_gaps=gaps,
        insights=insights,
    )


async def save_debug_data(
    segments: Sequence[Segment],
    entries: Sequence[TranscriptEntry],
    *,
    log_dir: str | Path,
    raw_input: str = "",
    raw_output: str = "",
) -> Path | None:
    """Dump everything needed to diagnose a failed run; returns the file path.

    Errors are logged and swallowed.
    """
    now = datetime.now(timezone.utc)
    stamp = now.isoformat().replace(":", "-").replace(".", "-").replace("+00-00", "Z")
    path = Path(log_dir) / f"translation-failure-{stamp}.json"

    try:
        analysis = analyze_translation_failure(segments, entries)
        payload = {
            "timestamp": now.isoformat().replace("+00:00", "Z"),
            "original_segments": [asdict(s) for s in segments],
            "transcript_entries": [asdict(e) for e in to_transcript(segments)],
            "translated_entries": [asdict(e) for e in entries],
            "raw_llm_input": raw_input,
            "raw_llm_output": raw_output,
            "analysis": {
                "original_count": len(segments),
                "translated_count": len(entries),
                "original_numbers": sorted(int(s.sequence) for s in segments),
                "translated_numbers": sorted(int(e.number) for e in entries),
                **asdict(analysis),
            },
        }
        text = json.dumps(payload, ensure_ascii=False, indent=2)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")

        await asyncio.to_thread(_write)
    except Exception as exc:
        logger.warning("failed to save debug data (path=%s, error=%s)", path, exc)
        return None

    logger.info("debug data saved (path=%s)", path)
    return path
