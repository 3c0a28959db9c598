"""Segment models for subtitle parsing, chunking and translation."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Segment:
    """One timed subtitle block, exactly as parsed from the source file."""

    sequence: int
    start_time: str  # "HH:MM:SS,mmm"
    end_time: str
    text: str


@dataclass(frozen=True)
class TranscriptEntry:
    """Timing-free (number, text) unit; the thing that gets translated."""

    number: int
    text: str


@dataclass
class Chunk:
    """A batch of segments sent to the backend in one request.

    `context_segments` are already-seen segments included only for linguistic
    context; they never appear in `translate_segments`.
    """

    context_segments: list[Segment] = field(default_factory=list)
    translate_segments: list[Segment] = field(default_factory=list)
    chunk_index: int = 0
    total_chunks: int = 1

    @property
    def segments(self) -> list[Segment]:
        return [*self.context_segments, *self.translate_segments]

    @property
    def expected_numbers(self) -> list[int]:
        return [int(s.sequence) for s in self.translate_segments]

    @property
    def label(self) -> str:
        return f"{self.chunk_index + 1}/{self.total_chunks}"


@dataclass(frozen=True)
class TranslationProgress:
    completed: int
    total: int
    percentage: int


@dataclass
class TranscriptTranslation:
    """Orchestrator output: entries sorted by number plus raw exchange text."""

    entries: list[TranscriptEntry] = field(default_factory=list)
    raw_input: str = ""
    raw_output: str = ""
