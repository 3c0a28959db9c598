"""Prompt construction for chunk translation."""

from __future__ import annotations

from subtranslate.formatters.srt import to_wire_format
from subtranslate.models.segment import Chunk

SYSTEM_PROMPT = """You are a professional subtitle translator.

## Output contract

- Plain text only, no commentary and no code fences
- One block per requested segment: the segment number on its own line, the translated text on the following line(s)
- Exactly one blank line between blocks
- Never merge or split segments; every requested number appears exactly once

## Translation rules

- Preserve inline markup such as <i>, <b>, {\\an8} exactly as given
- Preserve line breaks inside a segment
- Translate descriptions in square brackets, e.g. [music playing]
- Segments marked as context are for understanding only and must not be output
"""


def _example_numbers(numbers: list[int]) -> tuple[int, int]:
    first = numbers[0] if numbers else 1
    second = numbers[1] if len(numbers) > 1 else first + 1
    return first, second


def build_translation_prompt(
    chunk: Chunk,
    *,
    source_language: str,
    target_language: str,
    attempt: int = 1,
) -> str:
    numbers = chunk.expected_numbers
    count = len(numbers)
    number_list = ", ".join(str(n) for n in numbers)

    header = f"Translate the following subtitles from {source_language} to {target_language}."
    parts = [header, f"\nThis is chunk {chunk.label}."]
    if attempt > 1:
        parts.append(
            f"Attempt {attempt}: the previous answer did not contain exactly the requested segments."
        )

    if chunk.context_segments:
        parts.append(
            "\nCONTEXT ONLY (do not translate or output these):\n"
            f"{to_wire_format(chunk.context_segments)}\n\n--- END OF CONTEXT ---"
        )

    parts.append(
        f"\nTRANSLATE THESE SEGMENTS (segments {number_list}):\n{to_wire_format(chunk.translate_segments)}"
    )

    first, second = _example_numbers(numbers)
    parts.append(
        f"\nOutput EXACTLY {count} segments ({number_list}).\n\n"
        "EXAMPLE OUTPUT FORMAT:\n"
        f"{first}\n[translated text for segment {first}]\n\n"
        f"{second}\n[translated text for segment {second}]"
    )
    return "\n".join(parts)
