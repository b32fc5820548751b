from __future__ import annotations

import pytest
from docx.oxml.ns import qn

from docgen.body import CellText, DocumentBody
from docgen.errors import StyleApplicationError
from docgen.substitute import (
    ItemList,
    Scalar,
    Table,
    coerce_field,
    render_field,
    render_fields,
    token_for,
)
from dump_docx_runs import describe_runs


def _texts(body: DocumentBody) -> list[str]:
    texts = []
    for idx, element in enumerate(body.blocks()):
        if element.tag == qn("w:p"):
            texts.append(body.paragraph_at(idx).text)
        else:
            texts.append("<table>")
    return texts


def test_token_format() -> None:
    assert token_for("summary") == "{{summary}}"


def test_coerce_field_shapes() -> None:
    assert coerce_field("text") == Scalar("text")
    assert coerce_field(None) == Scalar("")
    assert coerce_field(True) == Scalar("true")
    assert coerce_field(12) == Scalar("12")
    assert coerce_field(["a", "", None, 0, "b"]) == ItemList(("a", "b"))
    assert coerce_field([["h1", "h2"], ["x", None]]) == Table((("h1", "h2"), ("x", "")))
    assert coerce_field([["h"], "loose", 5]) == Table((("h",), ("loose",), ("5",)))


def test_scalar_replaces_placeholder_paragraph(template_body: DocumentBody) -> None:
    assert render_field(template_body, "{{summary}}", "# Title\n- one\n- two")
    assert _texts(template_body)[-5:] == ["Intro", "Title", "one", "two", "Outro"]
    assert template_body.locate("{{summary}}") is None


def test_missing_token_is_a_no_op(template_body: DocumentBody) -> None:
    before = _texts(template_body)
    assert not render_field(template_body, "{{nowhere}}", "text")
    assert _texts(template_body) == before


def test_second_substitution_of_same_token_is_a_no_op(template_body: DocumentBody) -> None:
    assert render_field(template_body, "{{summary}}", "done")
    after_first = _texts(template_body)
    assert not render_field(template_body, "{{summary}}", "again")
    assert _texts(template_body) == after_first


def test_only_first_occurrence_is_replaced(template_body: DocumentBody) -> None:
    template_body.doc.add_paragraph("{{summary}} again")
    render_field(template_body, "{{summary}}", "first")
    texts = _texts(template_body)
    assert "first" in texts
    assert "{{summary}} again" in texts


def test_item_list_drops_empty_entries(template_body: DocumentBody) -> None:
    index = template_body.locate("{{summary}}")
    render_field(template_body, "{{summary}}", ["Risk A", "", "Risk B"])
    items = [template_body.paragraph_at(index), template_body.paragraph_at(index + 1)]
    assert [p.text for p in items] == ["Risk A", "Risk B"]
    assert {p.style.name for p in items} == {"List Bullet"}
    assert template_body.paragraph_at(index + 2).text == "Outro"


def test_item_list_does_not_parse_block_markdown(template_body: DocumentBody) -> None:
    index = template_body.locate("{{summary}}")
    render_field(template_body, "{{summary}}", ["# not a heading", "1. not numbered", "**bold**"])
    items = [template_body.paragraph_at(index + offset) for offset in range(3)]
    assert [p.text for p in items] == ["# not a heading", "1. not numbered", "bold"]
    assert {p.style.name for p in items} == {"List Bullet"}
    assert describe_runs(items[2])[0]["bold"]


def test_empty_item_list_leaves_one_empty_paragraph(template_body: DocumentBody) -> None:
    index = template_body.locate("{{summary}}")
    count = len(template_body)
    render_field(template_body, "{{summary}}", ["", None])
    assert len(template_body) == count
    assert template_body.paragraph_at(index).text == ""


def test_table_header_styling(template_body: DocumentBody) -> None:
    index = template_body.locate("{{summary}}")
    render_field(template_body, "{{summary}}", [["Item", "Cost"], ["Widget", "$5"]])
    assert template_body.blocks()[index].tag == qn("w:tbl")
    assert template_body.paragraph_at(index + 1).text == "Outro"

    table = template_body.doc.tables[0]
    assert len(table.rows) == 2
    assert len(table.columns) == 2
    assert [cell.text for cell in table.rows[1].cells] == ["Widget", "$5"]
    for cell in table.rows[0].cells:
        shd = cell._tc.tcPr.find(qn("w:shd"))
        assert shd is not None and shd.get(qn("w:fill")) == "D9E2F3"
        assert all(run["bold"] for run in describe_runs(cell.paragraphs[0]))
    for cell in table.rows[1].cells:
        assert not any(run["bold"] for run in describe_runs(cell.paragraphs[0]))


def test_table_ragged_and_malformed_rows(template_body: DocumentBody) -> None:
    render_field(template_body, "{{summary}}", [["A", "B", "C"], ["x"], "loose"])
    table = template_body.doc.tables[0]
    assert len(table.columns) == 3
    assert [cell.text for cell in table.rows[1].cells] == ["x", "", ""]
    assert table.cell(2, 0).text == "loose"


def test_table_cells_parse_inline_markdown(template_body: DocumentBody) -> None:
    render_field(
        template_body,
        "{{summary}}",
        [["**Name**", "Notes"], ["`sku-1`", "*fragile*, see [spec](https://example.com)"]],
    )
    table = template_body.doc.tables[0]
    assert table.cell(0, 0).text == "Name"
    code_runs = describe_runs(table.cell(1, 0).paragraphs[0])
    assert code_runs == [
        {"text": "sku-1", "bold": False, "italic": False, "code": True, "url": None}
    ]
    notes = describe_runs(table.cell(1, 1).paragraphs[0])
    assert [run["text"] for run in notes] == ["fragile", ", see ", "spec"]
    assert notes[0]["italic"]
    assert notes[2]["url"] == "https://example.com"


def test_paragraph_and_cell_styling_match(template_body: DocumentBody) -> None:
    text = "Plain **bold** _it_ `code` [link](https://example.com) end"
    template_body.doc.add_paragraph("{{cell}}")
    render_field(template_body, "{{summary}}", text)
    render_field(template_body, "{{cell}}", [["header"], [text]])

    paragraph = template_body.paragraph_at(template_body.locate("Plain"))
    cell = template_body.doc.tables[0].cell(1, 0)
    assert describe_runs(paragraph) == describe_runs(cell.paragraphs[0])


def test_style_failure_propagates(template_body: DocumentBody, monkeypatch) -> None:
    monkeypatch.setattr(CellText, "append_text", lambda self, text: len(self.text))
    with pytest.raises(StyleApplicationError) as excinfo:
        render_field(template_body, "{{summary}}", [["**bold**"]])
    assert excinfo.value.start == 0
    assert excinfo.value.end == 4
    assert excinfo.value.length == 0


def test_cell_style_range_validation(template_body: DocumentBody) -> None:
    render_field(template_body, "{{summary}}", [["abc"]])
    cell = template_body.get_cell(template_body.doc.tables[0], 0, 0)
    cell.set_text("abcdef")
    cell.set_style_range(0, 3, "bold")
    with pytest.raises(StyleApplicationError):
        cell.set_style_range(2, 4, "italic")
    with pytest.raises(StyleApplicationError):
        cell.set_style_range(4, 10, "italic")
    with pytest.raises(StyleApplicationError):
        cell.set_style_range(5, 5, "italic")


def test_render_fields_in_declared_order_with_fallback(template_body: DocumentBody) -> None:
    template_body.doc.add_paragraph("{{owner}}")
    template_body.doc.add_paragraph("{{absent}}")
    report = render_fields(
        template_body,
        {"summary": "Summary text", "unused": "x"},
        names=["summary", "owner", "unused"],
        fallback="[{name}]",
    )
    assert report.rendered == ["summary", "owner"]
    assert report.skipped == ["unused"]
    texts = _texts(template_body)
    assert "Summary text" in texts
    assert "[owner]" in texts
    assert "{{absent}}" in texts


def test_render_fields_can_fill_template_tokens(template_body: DocumentBody) -> None:
    template_body.doc.add_paragraph("Owner: {{owner}}")
    report = render_fields(
        template_body, {"summary": "ok"}, include_template_tokens=True
    )
    assert report.rendered == ["summary", "owner"]
    assert "Owner: {{owner}}" not in _texts(template_body)
    assert template_body.find_tokens() == []


def test_fallback_replaces_only_name_placeholder(template_body: DocumentBody) -> None:
    render_fields(template_body, {}, names=["summary"], fallback="{other} [{name}] {}")
    assert "{other} [summary] {}" in _texts(template_body)
