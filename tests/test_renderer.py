from pathlib import Path

from blog_enhancer.core.types import ArticleRef, EnhancedArticle, EnhancementResult, ReferenceCandidate
from blog_enhancer.output.renderer import render_preview


def _result(title: str = "Chatbots 101 (Enhanced)") -> EnhancementResult:
    return EnhancementResult(
        success=True,
        original=ArticleRef(id=7, title="Chatbots 101"),
        references=[ReferenceCandidate("https://ex.com/a", "Guide A")],
        enhanced=EnhancedArticle(
            id=7,
            title=title,
            content='<h2 style="color: #222;">Section</h2>\n<p>Body</p>',
            source_url="https://ex.com/chatbots#enhanced",
            author="Jane",
        ),
    )


def test_render_preview_writes_content_unescaped(tmp_path: Path) -> None:
    output_path = tmp_path / "out" / "preview.html"

    render_preview(_result(), output_path)
    text = output_path.read_text(encoding="utf-8")

    assert '<h2 style="color: #222;">Section</h2>' in text
    assert "<title>Chatbots 101 (Enhanced)</title>" in text
    assert "Enhanced from: Chatbots 101 (#7)" in text
    assert "Author: Jane" in text
    assert "1 reference &middot;" in text


def test_render_preview_escapes_titles(tmp_path: Path) -> None:
    output_path = tmp_path / "preview.html"

    render_preview(_result(title="<script>alert(1)</script>"), output_path)
    text = output_path.read_text(encoding="utf-8")

    assert "<script>" not in text
    assert "&lt;script&gt;" in text
