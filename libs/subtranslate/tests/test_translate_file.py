from __future__ import annotations

from pathlib import Path

import pytest

from subtranslate import cli
from subtranslate.exceptions import ChunkTranslationError, ConfigurationError, GlobalValidationError
from subtranslate.models.segment import Chunk, TranscriptEntry, TranscriptTranslation
from subtranslate.pipeline.translate_file import (
    default_output_path,
    translate_srt_content,
    translate_subtitle_file,
)
from subtranslate.translation.orchestrator import TranslationOrchestrator

SOURCE = (
    "1\n00:00:01,000 --> 00:00:02,000\nGood morning.\n\n"
    "2\n00:00:02,500 --> 00:00:04,000\n<i>How are you?</i>\n\n"
    "3\n00:00:09,000 --> 00:00:10,000\n[phone rings]\n"
)


class _UpperBackend:
    def __init__(self) -> None:
        self.calls = 0

    async def translate(self, chunk: Chunk, *, attempt: int = 1) -> str:  # noqa: ARG002
        self.calls += 1
        return "\n\n".join(f"{s.sequence}\n{s.text.upper()}" for s in chunk.translate_segments)

    async def close(self) -> None:
        return None


class _ShortBackend:
    async def translate(self, chunk: Chunk, *, attempt: int = 1) -> str:  # noqa: ARG002
        return f"{chunk.expected_numbers[0]}\nonly one"


def test_default_output_path() -> None:
    assert default_output_path("/data/movie.en.srt", "cs") == Path("/data/movie.en_cs.srt")
    assert default_output_path(Path("show.srt"), "de") == Path("show_de.srt")


@pytest.mark.asyncio
async def test_translate_srt_content_keeps_timing(settings) -> None:
    out = await translate_srt_content(SOURCE, backend=_UpperBackend(), settings=settings)
    assert out == (
        "1\n00:00:01,000 --> 00:00:02,000\nGOOD MORNING.\n\n"
        "2\n00:00:02,500 --> 00:00:04,000\n<I>HOW ARE YOU?</I>\n\n"
        "3\n00:00:09,000 --> 00:00:10,000\n[PHONE RINGS]"
    )


@pytest.mark.asyncio
async def test_translate_file_writes_default_output(settings, tmp_path) -> None:
    src = tmp_path / "episode.srt"
    src.write_text(SOURCE, encoding="utf-8")

    out = await translate_subtitle_file(src, backend=_UpperBackend(), settings=settings)

    assert out == tmp_path / "episode_cs.srt"
    assert "GOOD MORNING." in out.read_text(encoding="utf-8")
    assert src.read_text(encoding="utf-8") == SOURCE


@pytest.mark.asyncio
async def test_translate_file_writes_nothing_on_chunk_failure(settings, tmp_path) -> None:
    src = tmp_path / "episode.srt"
    src.write_text(SOURCE, encoding="utf-8")
    dst = tmp_path / "out" / "episode.srt"

    with pytest.raises(ChunkTranslationError):
        await translate_subtitle_file(src, dst, backend=_ShortBackend(), settings=settings)

    assert not dst.exists()
    assert src.read_text(encoding="utf-8") == SOURCE


@pytest.mark.asyncio
async def test_global_validation_failure_dumps_debug_data(settings, tmp_path, monkeypatch) -> None:
    async def _incomplete(self, segments, on_progress=None) -> TranscriptTranslation:  # noqa: ANN001, ARG001
        return TranscriptTranslation(
            entries=[TranscriptEntry(number=1, text="x"), TranscriptEntry(number=3, text="z")],
            raw_input="in",
            raw_output="out",
        )

    monkeypatch.setattr(TranslationOrchestrator, "translate_segments", _incomplete)
    src = tmp_path / "episode.srt"
    src.write_text(SOURCE, encoding="utf-8")

    with pytest.raises(GlobalValidationError, match="Missing translations for segments: 2"):
        await translate_subtitle_file(src, backend=_UpperBackend(), settings=settings)

    assert not (tmp_path / "episode_cs.srt").exists()
    dumps = list(Path(settings.log_dir).glob("translation-failure-*.json"))
    assert len(dumps) == 1


@pytest.mark.asyncio
async def test_translate_file_rejects_bad_paths(settings, tmp_path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        await translate_subtitle_file(tmp_path / "missing.srt", backend=_UpperBackend(), settings=settings)

    src = tmp_path / "a.srt"
    src.write_text(SOURCE, encoding="utf-8")
    with pytest.raises(ConfigurationError, match="must differ"):
        await translate_subtitle_file(src, src, backend=_UpperBackend(), settings=settings)


def test_cli_translates_file(tmp_path, monkeypatch) -> None:
    src = tmp_path / "clip.srt"
    src.write_text(SOURCE, encoding="utf-8")

    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setattr(cli, "setup_logging", lambda *_args, **_kwargs: None)
    monkeypatch.setattr(cli, "get_llm_provider", lambda _cfg: type("P", (), {"model": "fake"})())
    monkeypatch.setattr(cli, "LLMTranslationBackend", lambda *_args, **_kwargs: _UpperBackend())

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["-i", str(src), "-t", "fr"])

    assert exc_info.value.code == 0
    assert "GOOD MORNING." in (tmp_path / "clip_fr.srt").read_text(encoding="utf-8")


def test_cli_exits_with_1_on_error(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setattr(cli, "setup_logging", lambda *_args, **_kwargs: None)
    monkeypatch.setattr(cli, "get_llm_provider", lambda _cfg: type("P", (), {"model": "fake"})())
    monkeypatch.setattr(cli, "LLMTranslationBackend", lambda *_args, **_kwargs: _UpperBackend())

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["--input", str(tmp_path / "nope.srt")])

    assert exc_info.value.code == 1
