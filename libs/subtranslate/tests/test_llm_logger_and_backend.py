from __future__ import annotations

import re

import pytest

from conftest import make_segments
from subtranslate.exceptions import ProviderError
from subtranslate.models.segment import Chunk
from subtranslate.providers.llm.base import LLMCompletionResult, LLMProvider, Message
from subtranslate.services.llm_logger import FileLogWriter, LLMRequestLogger, RequestMeta
from subtranslate.translation.backend import LLMTranslationBackend, TranslationBackend
from subtranslate.translation.prompts import SYSTEM_PROMPT, build_translation_prompt


class _MemoryWriter:
    def __init__(self) -> None:
        self.files: dict[str, str] = {}

    async def write(self, file_name: str, content: str) -> None:
        self.files[file_name] = content


class _BrokenWriter:
    async def write(self, file_name: str, content: str) -> None:  # noqa: ARG002
        raise RuntimeError("disk on fire")


class _FakeProvider(LLMProvider):
    provider = "fake"
    model = "fake-model"

    def __init__(self, reply: str | Exception) -> None:
        self.reply = reply
        self.messages: list[Message] = []
        self.closed = False

    async def complete_with_usage(
        self,
        messages: list[Message],
        temperature: float = 0.3,  # noqa: ARG002
        max_tokens: int | None = None,  # noqa: ARG002
    ) -> LLMCompletionResult:
        self.messages = list(messages)
        if isinstance(self.reply, Exception):
            raise self.reply
        return LLMCompletionResult(text=self.reply)

    async def close(self) -> None:
        self.closed = True


def _chunk() -> Chunk:
    segments = make_segments(6)
    return Chunk(context_segments=segments[1:3], translate_segments=segments[3:5], chunk_index=1, total_chunks=4)


_META = RequestMeta(
    source_language="en",
    target_language="cs",
    chunk_index=1,
    total_chunks=4,
    segments_to_translate=2,
    context_segments=2,
)


@pytest.mark.asyncio
async def test_file_log_writer_writes_request_response_and_error(tmp_path) -> None:
    request_logger = LLMRequestLogger(FileLogWriter(tmp_path / "llm"), model="m1")

    request_id = await request_logger.log_request("PROMPT BODY", _META)
    assert re.fullmatch(r"req_\d+_[0-9a-f]{9}", request_id)

    await request_logger.log_response(request_id, "4\nahoj", _META, duration_ms=12, translated_segments=1)
    await request_logger.log_error(request_id, "PROMPT BODY", RuntimeError("timeout"), _META, duration_ms=30)

    request_text = (tmp_path / "llm" / f"{request_id}_request.txt").read_text(encoding="utf-8")
    assert "MODEL: m1" in request_text
    assert "CHUNK: 2/4" in request_text
    assert "=== PROMPT ===\nPROMPT BODY" in request_text

    response_text = (tmp_path / "llm" / f"{request_id}_response.txt").read_text(encoding="utf-8")
    assert "DURATION_MS: 12" in response_text
    assert "TRANSLATED_SEGMENTS: 1" in response_text

    error_text = (tmp_path / "llm" / f"{request_id}_error.txt").read_text(encoding="utf-8")
    assert "TYPE: RuntimeError" in error_text
    assert "MESSAGE: timeout" in error_text


@pytest.mark.asyncio
async def test_logger_failures_never_escalate(tmp_path) -> None:
    request_logger = LLMRequestLogger(_BrokenWriter(), model="m1")
    request_id = await request_logger.log_request("p", _META)
    await request_logger.log_response(request_id, "r", _META, duration_ms=1)

    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    await FileLogWriter(blocker).write("a.txt", "content")


def test_prompt_includes_context_segments_and_contract() -> None:
    prompt = build_translation_prompt(_chunk(), source_language="en", target_language="cs")

    assert "from en to cs" in prompt
    assert "This is chunk 2/4." in prompt
    assert "CONTEXT ONLY" in prompt
    assert "2\nline 2\n\n3\nline 3" in prompt
    assert "TRANSLATE THESE SEGMENTS (segments 4, 5):\n4\nline 4\n\n5\nline 5" in prompt
    assert "Output EXACTLY 2 segments (4, 5)." in prompt
    assert "Attempt" not in prompt


def test_prompt_without_context_and_on_retry() -> None:
    chunk = Chunk(translate_segments=make_segments(1), chunk_index=0, total_chunks=1)
    prompt = build_translation_prompt(chunk, source_language="en", target_language="de", attempt=2)

    assert "CONTEXT ONLY" not in prompt
    assert "Attempt 2:" in prompt
    assert "Output EXACTLY 1 segments (1)." in prompt


@pytest.mark.asyncio
async def test_llm_backend_returns_trimmed_reply_and_logs_exchange() -> None:
    provider = _FakeProvider("\n4\nahoj\n\n5\nsvěte\n\n")
    writer = _MemoryWriter()
    backend = LLMTranslationBackend(
        provider,
        source_language="en",
        target_language="cs",
        request_logger=LLMRequestLogger(writer, model=provider.model),
    )
    assert isinstance(backend, TranslationBackend)

    text = await backend.translate(_chunk(), attempt=1)

    assert text == "4\nahoj\n\n5\nsvěte"
    assert provider.messages[0] == Message(role="system", content=SYSTEM_PROMPT)
    assert "segments 4, 5" in provider.messages[1].content
    names = sorted(writer.files)
    assert len(names) == 2
    assert names[0].endswith("_request.txt")
    assert names[1].endswith("_response.txt")
    assert "TRANSLATED_SEGMENTS: 2" in writer.files[names[1]]

    await backend.close()
    assert provider.closed


@pytest.mark.asyncio
async def test_llm_backend_logs_and_reraises_provider_errors() -> None:
    provider = _FakeProvider(ProviderError("fake", "HTTP 400 Bad Request"))
    writer = _MemoryWriter()
    backend = LLMTranslationBackend(
        provider,
        source_language="en",
        target_language="cs",
        request_logger=LLMRequestLogger(writer, model=provider.model),
    )

    with pytest.raises(ProviderError, match="HTTP 400"):
        await backend.translate(_chunk())

    error_files = [name for name in writer.files if name.endswith("_error.txt")]
    assert len(error_files) == 1
    assert "TYPE: ProviderError" in writer.files[error_files[0]]
