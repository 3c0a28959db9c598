"""File-level translation pipeline.

Imports are lazy so `subtranslate.pipeline` can be imported without pulling in the
provider SDKs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from subtranslate.pipeline.translate_file import (
        default_output_path,
        translate_srt_content,
        translate_subtitle_file,
    )

__all__ = ["default_output_path", "translate_srt_content", "translate_subtitle_file"]


def __getattr__(name: str) -> Any:
    if name in __all__:
        from subtranslate.pipeline import translate_file

        return getattr(translate_file, name)
    raise AttributeError(name)
