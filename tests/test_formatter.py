"""Tests for LLM output to HTML formatting."""

from blog_enhancer.core.types import Reference, ReferenceCandidate
from blog_enhancer.output.formatter import (
    EM_STYLE,
    H1_STYLE,
    H2_STYLE,
    H3_STYLE,
    LI_STYLE,
    P_STYLE,
    REFERENCES_H2_STYLE,
    STRONG_STYLE,
    UL_STYLE,
    format_enhanced_content,
)


def test_empty_input_yields_empty_string():
    assert format_enhanced_content("") == ""
    assert format_enhanced_content(None, [ReferenceCandidate("https://ex.com", "Ex")]) == ""


def test_headings_are_styled_and_not_wrapped_in_paragraphs():
    html = format_enhanced_content("# Title\n\n## Section\n\n### Detail")

    assert f'<h1 style="{H1_STYLE}">Title</h1>' in html
    assert f'<h2 style="{H2_STYLE}">Section</h2>' in html
    assert f'<h3 style="{H3_STYLE}">Detail</h3>' in html
    assert "<p" not in html


def test_heading_levels_do_not_collide():
    html = format_enhanced_content("### Deep")
    assert html == f'<h3 style="{H3_STYLE}">Deep</h3>'


def test_bold_and_italic():
    html = format_enhanced_content("Some **bold** and *soft* and __strong__ and _light_ words.")

    assert html.startswith(f'<p style="{P_STYLE}">')
    assert ">bold</strong>" in html
    assert ">strong</strong>" in html
    assert ">soft</em>" in html
    assert ">light</em>" in html
    assert "*" not in html


def test_plain_blocks_become_paragraphs():
    html = format_enhanced_content("First paragraph.\n\n\n\nSecond paragraph.")
    assert html == f'<p style="{P_STYLE}">First paragraph.</p>\n<p style="{P_STYLE}">Second paragraph.</p>'


def test_bullets_and_numbers_become_one_list():
    html = format_enhanced_content("Intro.\n\n- one\n* two\n3. three\n\nOutro.")

    assert html.count("<ul") == 1
    assert html.count(f'<li style="{LI_STYLE}">') == 3
    assert f'<ul style="{UL_STYLE}"><li style="{LI_STYLE}">one</li>' in html
    assert "three</li></ul>" in html
    assert not html.split("\n")[1].startswith("<p")
    assert html.endswith(f'<p style="{P_STYLE}">Outro.</p>')


def test_only_first_list_run_is_wrapped():
    html = format_enhanced_content("- a\n- b\n\nBetween.\n\n- c\n- d")

    assert html.count("<ul") == 1
    assert "<li" in html.split("Between.")[1]
    assert "</ul>" not in html.split("Between.")[1]


def test_references_section_appended():
    refs = [Reference("https://ex.com/a", "Guide A", "body"), {"url": "https://ex.com/b", "title": "Guide B"}]

    html = format_enhanced_content("Body.", refs)

    assert ">References</h2>" in html
    assert html.count('target="_blank" rel="noopener noreferrer"') == 2
    assert 'href="https://ex.com/a"' in html
    assert ">Guide B</a></li>" in html
    assert html.endswith("</ul>")


def test_reference_defaults_and_escaping():
    html = format_enhanced_content("Body.", [{}, {"url": 'https://ex.com/?q="x"', "title": "A & B <i>"}])

    assert 'href="#"' in html
    assert ">Reference</a>" in html
    assert "A &amp; B &lt;i&gt;" in html
    assert "q=&quot;x&quot;" in html


def test_no_references_section_without_references():
    assert "References" not in format_enhanced_content("Body.", [])


def test_stacked_headings_keep_their_levels():
    html = format_enhanced_content("### Sub\n## Main\n# Top")

    assert html == (
        f'<h3 style="{H3_STYLE}">Sub</h3>\n'
        f'<h2 style="{H2_STYLE}">Main</h2>\n'
        f'<h1 style="{H1_STYLE}">Top</h1>'
    )


def test_bold_and_italic_stay_separate():
    html = format_enhanced_content("**bold** and *italic*")

    assert html == (
        f'<p style="{P_STYLE}"><strong style="{STRONG_STYLE}">bold</strong> and '
        f'<em style="{EM_STYLE}">italic</em></p>'
    )


def test_formatting_is_deterministic():
    text = "# Title\n\nSome **bold** text.\n\n- one\n- two\n\n1. first"
    refs = [{"title": "A", "url": "http://x"}, ReferenceCandidate("https://ex.com/b", "B")]

    assert format_enhanced_content(text, refs) == format_enhanced_content(text, refs)


def test_single_reference_appendix():
    html = format_enhanced_content("text", [{"title": "A", "url": "http://x"}])

    heading = f'<h2 style="{REFERENCES_H2_STYLE}">References</h2>'
    assert heading in html
    appendix = html.split(heading)[1]
    assert appendix.count("<li") == 1
    assert '<a href="http://x" target="_blank" rel="noopener noreferrer"' in appendix
    assert ">A</a></li>" in appendix
