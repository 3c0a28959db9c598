"""subtranslate exception hierarchy."""

from __future__ import annotations

from collections.abc import Iterable

from subtranslate.error_codes import ErrorCode


class SubTranslateError(Exception):
    """Base error for subtranslate."""

    error_code: ErrorCode | str | None = None


class ConfigurationError(SubTranslateError):
    """Raised when configuration or inputs are invalid."""

    error_code = ErrorCode.INVALID_CONFIG


class ProviderError(SubTranslateError):
    """Raised when an external provider call fails."""

    def __init__(
        self,
        provider: str,
        message: str,
        *,
        error_code: ErrorCode | str | None = None,
    ) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.message = message
        self.error_code = error_code


def _fmt(numbers: Iterable[int]) -> str:
    return ", ".join(str(n) for n in numbers)


class TranslationValidationError(SubTranslateError):
    """Returned entries do not match the expected segment numbers.

    Both the expected and the actual number lists are kept sorted so a failure can
    be diagnosed from the message alone.
    """

    def __init__(
        self,
        scope: str,
        *,
        expected_numbers: Iterable[int],
        actual_numbers: Iterable[int],
    ) -> None:
        expected = sorted(int(n) for n in expected_numbers)
        actual = sorted(int(n) for n in actual_numbers)
        expected_set = set(expected)
        actual_set = set(actual)

        self.scope = scope
        self.expected_numbers = expected
        self.actual_numbers = actual
        self.expected_count = len(expected)
        self.actual_count = len(actual)
        self.missing_numbers = sorted(expected_set - actual_set)
        self.extra_numbers = sorted(actual_set - expected_set)
        super().__init__(self._build_message())

    @property
    def count_mismatch(self) -> bool:
        return self.expected_count != self.actual_count

    def _headline(self) -> str:
        if self.count_mismatch:
            return f"Expected {self.expected_count} segments but got {self.actual_count}."
        return "Segment numbers do not match."

    def _build_message(self) -> str:
        parts = [self._headline()]
        if self.missing_numbers:
            parts.append(f"Missing translations for segments: {_fmt(self.missing_numbers)}.")
        if self.extra_numbers:
            parts.append(f"Unexpected segments in translation: {_fmt(self.extra_numbers)}.")
        parts.append(f"Expected segments: [{_fmt(self.expected_numbers)}],")
        parts.append(f"Got segments: [{_fmt(self.actual_numbers)}].")
        return " ".join(parts)


class ChunkValidationError(TranslationValidationError):
    """A single chunk's reply failed validation (retryable)."""

    error_code = ErrorCode.CHUNK_VALIDATION_FAILED

    def __init__(
        self,
        chunk_index: int,
        total_chunks: int,
        *,
        expected_numbers: Iterable[int],
        actual_numbers: Iterable[int],
    ) -> None:
        self.chunk_index = int(chunk_index)
        self.total_chunks = int(total_chunks)
        super().__init__(
            f"chunk {self.chunk_index + 1}/{self.total_chunks}",
            expected_numbers=expected_numbers,
            actual_numbers=actual_numbers,
        )

    def _headline(self) -> str:
        return f"Chunk {self.chunk_index + 1}/{self.total_chunks} validation failed: {super()._headline()}"


class GlobalValidationError(TranslationValidationError):
    """The whole-file result failed validation."""

    error_code = ErrorCode.GLOBAL_VALIDATION_FAILED

    def __init__(self, *, expected_numbers: Iterable[int], actual_numbers: Iterable[int]) -> None:
        super().__init__("whole file", expected_numbers=expected_numbers, actual_numbers=actual_numbers)

    def _headline(self) -> str:
        if self.count_mismatch:
            return (
                f"Segment count mismatch: original has {self.expected_count} segments, "
                f"translation has {self.actual_count}."
            )
        return "Translated segment numbers do not match the original."


class ChunkTranslationError(SubTranslateError):
    """A chunk could not be translated; aborts the whole file."""

    error_code = ErrorCode.CHUNK_TRANSLATION_FAILED

    def __init__(self, chunk_index: int, total_chunks: int, message: str, *, attempts: int = 1) -> None:
        self.chunk_index = int(chunk_index)
        self.total_chunks = int(total_chunks)
        self.attempts = int(attempts)
        self.message = message
        super().__init__(
            f"Chunk {self.chunk_index + 1}/{self.total_chunks} translation failed "
            f"after {self.attempts} attempt(s): {message}"
        )


class MissingTranslationError(SubTranslateError):
    """Reconstruction found no translation for a segment."""

    error_code = ErrorCode.MISSING_TRANSLATION

    def __init__(self, sequence: int, original_text: str) -> None:
        self.sequence = int(sequence)
        self.original_text = original_text
        super().__init__(
            f'Missing translation for segment {self.sequence}. Original text was: "{original_text}"'
        )
