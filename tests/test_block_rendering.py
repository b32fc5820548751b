from __future__ import annotations

from docgen.blocks import render_block
from docgen.body import DocumentBody
from dump_docx_runs import describe_runs


def _rendered(body: DocumentBody, start: int, end: int):
    return [body.paragraph_at(idx) for idx in range(start, end)]


def _num_id(paragraph) -> int | None:
    p_pr = paragraph._p.pPr
    if p_pr is None or p_pr.numPr is None or p_pr.numPr.numId is None:
        return None
    return p_pr.numPr.numId.val


def test_empty_text_yields_one_empty_paragraph(body: DocumentBody) -> None:
    for value in ("", None):
        start = len(body)
        cursor = render_block(body, start, value)
        assert cursor == start + 1
        assert len(body) == start + 1
        assert body.paragraph_at(start).text == ""


def test_heading_then_bullets(body: DocumentBody) -> None:
    start = len(body)
    cursor = render_block(body, start, "# Title\n- item one\n- item two")
    assert cursor == start + 3

    paragraphs = _rendered(body, start, cursor)
    assert [p.text for p in paragraphs] == ["Title", "item one", "item two"]
    assert [p.style.name for p in paragraphs] == ["Heading 1", "List Bullet", "List Bullet"]


def test_numbered_items_drop_literal_digits(body: DocumentBody) -> None:
    start = len(body)
    cursor = render_block(body, start, "7. alpha\n9. beta")
    paragraphs = _rendered(body, start, cursor)
    assert [p.text for p in paragraphs] == ["alpha", "beta"]
    assert {p.style.name for p in paragraphs} == {"List Number"}


def test_heading_levels_and_plain_fallthrough(body: DocumentBody) -> None:
    start = len(body)
    cursor = render_block(body, start, "## Two\n### Three\n#### Four")
    paragraphs = _rendered(body, start, cursor)
    assert [p.style.name for p in paragraphs[:2]] == ["Heading 2", "Heading 3"]
    assert paragraphs[2].text == "#### Four"
    assert paragraphs[2].style.name == "Normal"


def test_crlf_and_blank_lines_keep_one_paragraph_per_line(body: DocumentBody) -> None:
    start = len(body)
    cursor = render_block(body, start, "first\r\n\r\nthird")
    assert cursor == start + 3
    assert [p.text for p in _rendered(body, start, cursor)] == ["first", "", "third"]


def test_inserts_before_existing_content(template_body: DocumentBody) -> None:
    outro_index = template_body.locate("Outro")
    cursor = render_block(template_body, outro_index, "one\ntwo")
    assert cursor == outro_index + 2
    assert template_body.paragraph_at(cursor).text == "Outro"


def test_inline_styles_inside_list_item(body: DocumentBody) -> None:
    start = len(body)
    render_block(body, start, "- **Risk:** supplier `delay` in [Q3](https://example.com/q3)")
    runs = describe_runs(body.paragraph_at(start))
    assert [run["text"] for run in runs] == ["Risk:", " supplier ", "delay", " in ", "Q3"]
    assert runs[0]["bold"]
    assert runs[2]["code"]
    assert runs[4]["url"] == "https://example.com/q3"


def test_numbered_runs_restart_after_plain_line(body: DocumentBody) -> None:
    start = len(body)
    cursor = render_block(body, start, "1. a\n2. b\nbreak\n1. c\n# Heading\n2. d")
    paragraphs = _rendered(body, start, cursor)
    ids = [_num_id(p) for p in paragraphs]
    assert ids[0] is not None
    assert ids[0] == ids[1]
    assert ids[3] != ids[0]
    assert ids[5] == ids[3]
