from __future__ import annotations

import re
from typing import Any

from docx.document import Document
from docx.opc.constants import RELATIONSHIP_TYPE
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Pt
from docx.table import Table, _Cell
from docx.text.paragraph import Paragraph

from docgen.errors import StyleApplicationError
from docgen.inline import BOLD, CODE, ITALIC, LINK, PLAIN, InlineSpan

BULLET = "bullet"
NUMBER = "number"

CODE_FONT = "Consolas"
LINK_COLOR = "0563C1"
_HEADING_STYLES = {1: "Heading 1", 2: "Heading 2", 3: "Heading 3"}
_GLYPH_STYLES = {BULLET: "List Bullet", NUMBER: "List Number"}
_TOKEN_RE = re.compile(r"\{\{\s*([A-Za-z0-9_.\-]+)\s*\}\}")


class DocumentBody:
    # Positions index the block elements under w:body, excluding w:sectPr.

    def __init__(self, doc: Document) -> None:
        self.doc = doc
        self._body = doc.element.body
        self._active_num_id: int | None = None

    def blocks(self) -> list[Any]:
        return [child for child in self._body.iterchildren() if child.tag != qn("w:sectPr")]

    def __len__(self) -> int:
        return len(self.blocks())

    def locate(self, text: str) -> int | None:
        for idx, element in enumerate(self.blocks()):
            if element.tag != qn("w:p"):
                continue
            if text in Paragraph(element, self.doc._body).text:
                return idx
        return None

    def find_tokens(self) -> list[str]:
        names: list[str] = []
        for element in self.blocks():
            if element.tag != qn("w:p"):
                continue
            for name in token_names(Paragraph(element, self.doc._body).text):
                if name not in names:
                    names.append(name)
        return names

    def paragraph_at(self, index: int) -> Paragraph:
        element = self.blocks()[index]
        if element.tag != qn("w:p"):
            raise TypeError(f"Block {index} is not a paragraph: {element.tag}")
        return Paragraph(element, self.doc._body)

    def delete_element(self, handle: Paragraph | Table) -> None:
        element = handle._element
        parent = element.getparent()
        if parent is not None:
            parent.remove(element)

    def insert_paragraph(self, index: int, text: str = "") -> Paragraph:
        new_p = OxmlElement("w:p")
        self._insert_block(index, new_p)
        paragraph = Paragraph(new_p, self.doc._body)
        if text:
            paragraph.add_run(text)
        return paragraph

    def set_heading_level(self, paragraph: Paragraph, level: int) -> None:
        if level not in _HEADING_STYLES:
            raise ValueError(f"Unsupported heading level: {level}")
        _set_style(paragraph, _HEADING_STYLES[level])

    def insert_list_item(self, index: int, text: str = "") -> Paragraph:
        return self.insert_paragraph(index, text)

    def set_glyph(self, item: Paragraph, glyph: str, *, restart: bool = False) -> None:
        # Numbered items share one numbering instance until a run restarts it.
        if glyph not in _GLYPH_STYLES:
            raise ValueError(f"Unknown list glyph: {glyph}")
        if not _set_style(item, _GLYPH_STYLES[glyph]):
            _apply_list_indent(item)
            return
        if glyph != NUMBER:
            return
        if restart or self._active_num_id is None:
            self._active_num_id = self._new_numbering_instance()
        if self._active_num_id is not None:
            num_pr = item._p.get_or_add_pPr().get_or_add_numPr()
            num_pr.get_or_add_ilvl().val = 0
            num_pr.get_or_add_numId().val = self._active_num_id

    def insert_table(self, index: int, rows: list[list[str]]) -> Table:
        if not rows:
            raise ValueError("A table needs at least one row.")
        cols = max(1, max(len(row) for row in rows))
        table = self.doc.add_table(rows=len(rows), cols=cols)
        try:
            table.style = "Table Grid"
        except KeyError:
            pass
        self._insert_block(index, table._tbl)
        for r_idx, row in enumerate(rows):
            for c_idx in range(cols):
                table.cell(r_idx, c_idx).text = row[c_idx] if c_idx < len(row) else ""
        _apply_table_profile(table, self.doc)
        return table

    def get_cell(self, table: Table, row: int, col: int) -> CellText:
        return CellText(table.cell(row, col))

    def set_cell_background(self, cell: CellText, fill: str) -> None:
        tc_pr = cell.cell._tc.get_or_add_tcPr()
        shd = tc_pr.find(qn("w:shd"))
        if shd is None:
            shd = OxmlElement("w:shd")
            tc_pr.append(shd)
        shd.set(qn("w:val"), "clear")
        shd.set(qn("w:color"), "auto")
        shd.set(qn("w:fill"), fill)

    def set_cell_bold(self, cell: CellText) -> None:
        cell.set_bold()

    def _insert_block(self, index: int, element: Any) -> None:
        blocks = self.blocks()
        if index < 0 or index > len(blocks):
            raise IndexError(f"Insert position {index} outside body of {len(blocks)} blocks")
        if index < len(blocks):
            blocks[index].addprevious(element)
            return
        sect_pr = self._body.find(qn("w:sectPr"))
        if sect_pr is not None:
            sect_pr.addprevious(element)
        else:
            self._body.append(element)

    def _new_numbering_instance(self) -> int | None:
        num_id = _style_num_id(self.doc, _GLYPH_STYLES[NUMBER])
        if num_id is None:
            return None
        try:
            numbering = self.doc.part.numbering_part.element
            num = numbering.num_having_numId(num_id)
        except (KeyError, NotImplementedError):
            return None
        new_num = numbering.add_num(num.abstractNumId.val)
        new_num.add_lvlOverride(ilvl=0).add_startOverride(1)
        return new_num.numId


class CellText:
    """Cell text buffer; styles are offset ranges applied on ``commit``."""

    def __init__(self, cell: _Cell) -> None:
        self.cell = cell
        self.text = cell.text
        self.bold = False
        self._ranges: list[tuple[int, int, str, str | None]] = []

    @property
    def ranges(self) -> list[tuple[int, int, str, str | None]]:
        return list(self._ranges)

    def set_text(self, text: str) -> None:
        self.text = text
        self._ranges = []

    def append_text(self, text: str) -> int:
        start = len(self.text)
        self.text += text
        return start

    def set_style_range(
        self, start: int, end: int, style: str, url: str | None = None
    ) -> None:
        if start < 0 or end > len(self.text) or start >= end:
            raise StyleApplicationError(
                f"Style range {start}:{end} is outside cell text of length {len(self.text)}",
                start=start,
                end=end,
                length=len(self.text),
            )
        for other_start, other_end, _style, _url in self._ranges:
            if start < other_end and other_start < end:
                raise StyleApplicationError(
                    f"Style range {start}:{end} overlaps {other_start}:{other_end}",
                    start=start,
                    end=end,
                    length=len(self.text),
                )
        self._ranges.append((start, end, style, url))

    def set_bold(self) -> None:
        self.bold = True

    def commit(self) -> Paragraph:
        while len(self.cell.paragraphs) > 1:
            _remove_element(self.cell.paragraphs[-1]._p)
        paragraph = self.cell.paragraphs[0]
        for child in list(paragraph._p):
            if child.tag != qn("w:pPr"):
                paragraph._p.remove(child)

        boundaries = {0, len(self.text)}
        for start, end, _style, _url in self._ranges:
            boundaries.update((start, end))
        points = sorted(boundaries)
        for seg_start, seg_end in zip(points, points[1:]):
            style, url = PLAIN, None
            for start, end, range_style, range_url in self._ranges:
                if start <= seg_start and seg_end <= end:
                    style, url = range_style, range_url
                    break
            append_styled_text(
                paragraph, self.text[seg_start:seg_end], style, url, bold=self.bold
            )
        return paragraph


class ParagraphSink:
    def __init__(self, paragraph: Paragraph) -> None:
        self.paragraph = paragraph

    def append(self, span: InlineSpan) -> None:
        append_styled_text(self.paragraph, span.text, span.style, span.url)


class RangeSink:
    def __init__(self, cell: CellText) -> None:
        self.cell = cell
        self.cell.set_text("")

    def append(self, span: InlineSpan) -> None:
        if not span.text:
            return
        start = self.cell.append_text(span.text)
        if span.style != PLAIN:
            self.cell.set_style_range(start, start + len(span.text), span.style, span.url)


def append_styled_text(
    paragraph: Paragraph,
    text: str,
    style: str,
    url: str | None = None,
    *,
    bold: bool = False,
) -> None:
    if not text:
        return
    run_spec = _run_spec(style, bold)
    if style == LINK and url:
        _add_hyperlink_run(paragraph, text, url, run_spec)
        return
    run = paragraph.add_run(text)
    if run_spec["bold"]:
        run.bold = True
    if run_spec["italic"]:
        run.italic = True
    if run_spec["code"]:
        run.font.name = CODE_FONT


def token_names(text: str) -> list[str]:
    return _TOKEN_RE.findall(text or "")


def _run_spec(style: str, bold: bool) -> dict[str, bool]:
    return {
        "bold": bold or style == BOLD,
        "italic": style == ITALIC,
        "code": style == CODE,
        "link": style == LINK,
    }


def _add_hyperlink_run(
    paragraph: Paragraph, text: str, url: str, run_spec: dict[str, bool]
) -> None:
    rel_id = paragraph.part.relate_to(url, RELATIONSHIP_TYPE.HYPERLINK, is_external=True)
    hyperlink = OxmlElement("w:hyperlink")
    hyperlink.set(qn("r:id"), rel_id)
    run = OxmlElement("w:r")
    run.append(_build_run_properties(run_spec))
    text_el = OxmlElement("w:t")
    text_el.text = text
    if text != text.strip():
        text_el.set(qn("xml:space"), "preserve")
    run.append(text_el)
    hyperlink.append(run)
    paragraph._p.append(hyperlink)


def _build_run_properties(run_spec: dict[str, bool]) -> Any:
    r_pr = OxmlElement("w:rPr")
    if run_spec.get("code"):
        r_fonts = OxmlElement("w:rFonts")
        r_fonts.set(qn("w:ascii"), CODE_FONT)
        r_fonts.set(qn("w:hAnsi"), CODE_FONT)
        r_pr.append(r_fonts)
    if run_spec.get("bold"):
        r_pr.append(OxmlElement("w:b"))
    if run_spec.get("italic"):
        r_pr.append(OxmlElement("w:i"))
    if run_spec.get("link"):
        color = OxmlElement("w:color")
        color.set(qn("w:val"), LINK_COLOR)
        r_pr.append(color)
        underline = OxmlElement("w:u")
        underline.set(qn("w:val"), "single")
        r_pr.append(underline)
    return r_pr


def _set_style(paragraph: Paragraph, style: str) -> bool:
    try:
        paragraph.style = style
    except KeyError:
        return False
    return True


def _style_num_id(doc: Document, style_name: str) -> int | None:
    try:
        style = doc.styles[style_name]
    except KeyError:
        return None
    p_pr = style.element.pPr
    if p_pr is None or p_pr.numPr is None or p_pr.numPr.numId is None:
        return None
    return p_pr.numPr.numId.val


def _apply_list_indent(paragraph: Paragraph) -> None:
    fmt = paragraph.paragraph_format
    if fmt.left_indent is None:
        fmt.left_indent = Pt(18.0)
    if fmt.first_line_indent is None:
        fmt.first_line_indent = Pt(-9.0)


def _remove_element(element: Any) -> None:
    parent = element.getparent()
    if parent is not None:
        parent.remove(element)


def _apply_table_profile(table: Table, doc: Document) -> None:
    tbl_pr = table._tbl.tblPr
    if tbl_pr is None:
        tbl_pr = OxmlElement("w:tblPr")
        table._tbl.insert(0, tbl_pr)

    tbl_layout = tbl_pr.find(qn("w:tblLayout"))
    if tbl_layout is None:
        tbl_layout = OxmlElement("w:tblLayout")
        tbl_pr.append(tbl_layout)
    tbl_layout.set(qn("w:type"), "fixed")

    tbl_w = tbl_pr.find(qn("w:tblW"))
    if tbl_w is None:
        tbl_w = OxmlElement("w:tblW")
        tbl_pr.append(tbl_w)
    tbl_w.set(qn("w:type"), "pct")
    tbl_w.set(qn("w:w"), "5000")

    col_count = len(table.columns)
    section = doc.sections[0]
    total_width_emu = int(section.page_width - section.left_margin - section.right_margin)
    total_twips = max(1, int(round(total_width_emu / 635.0)))
    base = total_twips // col_count
    widths_twips = [base] * col_count
    widths_twips[-1] += total_twips - base * col_count

    tbl_grid = table._tbl.tblGrid
    for child in list(tbl_grid):
        tbl_grid.remove(child)
    for width in widths_twips:
        grid_col = OxmlElement("w:gridCol")
        grid_col.set(qn("w:w"), str(max(1, width)))
        tbl_grid.append(grid_col)

    for row in table.rows:
        for idx, cell in enumerate(row.cells):
            cell.width = max(1, widths_twips[idx] * 635)
            for paragraph in cell.paragraphs:
                paragraph.paragraph_format.space_before = Pt(0)
                paragraph.paragraph_format.space_after = Pt(0)

    tr_pr = table.rows[0]._tr.get_or_add_trPr()
    if tr_pr.find(qn("w:tblHeader")) is None:
        header = OxmlElement("w:tblHeader")
        header.set(qn("w:val"), "true")
        tr_pr.append(header)
