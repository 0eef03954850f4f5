"""
Standalone HTML preview of an enhancement result.

The enhanced content is already styled HTML from the formatter and is
inserted unescaped; titles and URLs are escaped by the template.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..core.types import EnhancementResult


def render_preview(result: EnhancementResult, output_path: Path) -> None:
    """Write ``result`` as a single HTML page to ``output_path``."""
    env = Environment(
        loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
        autoescape=select_autoescape(["html"]),
    )
    template = env.get_template("article.html")
    html = template.render(
        title=result.enhanced.title,
        original=result.original,
        enhanced=result.enhanced,
        content=result.enhanced.content,
        references=result.references,
        generated_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC"),
    )
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding="utf-8")
