"""Prompt loading and rendering helpers for the enhancement call."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from ..core.types import Reference


_PROMPT_DIR = Path(__file__).resolve().parent.parent / "prompts"


@lru_cache(maxsize=None)
def _load_template(name: str) -> str:
    path = _PROMPT_DIR / f"{name}.md"
    return path.read_text(encoding="utf-8").strip()


def _render_template(name: str, **values: str) -> str:
    template = _load_template(name)
    return template.format(**values)


def system_prompt() -> str:
    return _load_template("system")


def format_reference(index: int, ref: Reference, excerpt_chars: int = 800) -> str:
    return f"Reference {index}: {ref.title}\nURL: {ref.url}\nExcerpt: {ref.content[:excerpt_chars]}..."


def build_enhancement_prompt(
    original_text: str,
    references: list[Reference],
    excerpt_chars: int = 800,
) -> str:
    """Render the user prompt: instructions, the original text, then each reference excerpt."""
    blocks = [format_reference(idx, ref, excerpt_chars) for idx, ref in enumerate(references, start=1)]
    return _render_template(
        "enhance",
        original_text=original_text,
        references="\n\n".join(blocks),
    )
