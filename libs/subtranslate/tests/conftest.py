from __future__ import annotations

import pytest

from subtranslate.config import Settings
from subtranslate.models.segment import Segment
from subtranslate.utils.timestamps import format_timestamp


@pytest.fixture()
def settings(tmp_path) -> Settings:
    cfg = Settings(log_dir=str(tmp_path / "logs"), llm_log_requests=False)
    cfg.translation.retry_backoff_s = 0.0
    return cfg


def make_segments(count: int, *, start: int = 1, pauses_after: set[int] | None = None) -> list[Segment]:
    """`count` one-second segments 500ms apart; a 5s pause follows each index in `pauses_after`."""
    pauses = pauses_after or set()
    segments: list[Segment] = []
    t = 1000
    for i in range(count):
        segments.append(
            Segment(
                sequence=start + i,
                start_time=format_timestamp(t),
                end_time=format_timestamp(t + 1000),
                text=f"line {start + i}",
            )
        )
        t += 1000 + (5000 if i in pauses else 500)
    return segments
