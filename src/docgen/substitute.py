from __future__ import annotations

from typing import Any, Iterable, Mapping, NamedTuple, Union

from docgen.blocks import render_block
from docgen.body import BULLET, DocumentBody, ParagraphSink, RangeSink
from docgen.config import DEFAULT_HEADER_FILL
from docgen.inline import render_inline


class Scalar(NamedTuple):
    text: str


class ItemList(NamedTuple):
    items: tuple[str, ...]


class Table(NamedTuple):
    rows: tuple[tuple[str, ...], ...]


RawField = Union[Scalar, ItemList, Table]


class RenderReport(NamedTuple):
    rendered: list[str]
    skipped: list[str]


def token_for(name: str) -> str:
    return f"{{{{{name}}}}}"


def coerce_field(value: Any) -> RawField:
    if isinstance(value, (Scalar, ItemList, Table)):
        return value
    if isinstance(value, (list, tuple)):
        if any(isinstance(row, (list, tuple)) for row in value):
            return Table(tuple(_table_row(row) for row in value))
        return ItemList(tuple(_stringify(item) for item in value if item))
    return Scalar(_stringify(value))


def render_field(
    body: DocumentBody,
    token: str,
    value: Any,
    *,
    header_fill: str = DEFAULT_HEADER_FILL,
) -> bool:
    """Returns False, leaving the body untouched, when the token is not found."""
    index = body.locate(token)
    if index is None:
        return False
    body.delete_element(body.paragraph_at(index))

    field = coerce_field(value)
    if isinstance(field, Table):
        _render_table(body, index, field, header_fill)
    elif isinstance(field, ItemList):
        _render_item_list(body, index, field)
    else:
        render_block(body, index, field.text)
    return True


def render_fields(
    body: DocumentBody,
    fields: Mapping[str, Any],
    *,
    names: Iterable[str] | None = None,
    fallback: str = "",
    include_template_tokens: bool = False,
    header_fill: str = DEFAULT_HEADER_FILL,
) -> RenderReport:
    order = list(names) if names is not None else list(fields)
    if include_template_tokens:
        for name in body.find_tokens():
            if name not in order:
                order.append(name)

    report = RenderReport(rendered=[], skipped=[])
    for name in order:
        if name in fields:
            value = fields[name]
        else:
            value = Scalar(fallback.replace("{name}", name))
        if render_field(body, token_for(name), value, header_fill=header_fill):
            report.rendered.append(name)
        else:
            report.skipped.append(name)
    return report


def _render_item_list(body: DocumentBody, cursor: int, field: ItemList) -> int:
    if not field.items:
        body.insert_paragraph(cursor, "")
        return cursor + 1
    for idx, text in enumerate(field.items):
        item = body.insert_list_item(cursor)
        body.set_glyph(item, BULLET, restart=idx == 0)
        render_inline(text, ParagraphSink(item))
        cursor += 1
    return cursor


def _render_table(body: DocumentBody, cursor: int, field: Table, header_fill: str) -> int:
    rows = [list(row) for row in field.rows]
    table = body.insert_table(cursor, rows)
    col_count = len(table.columns)
    for r_idx, row in enumerate(rows):
        for c_idx in range(col_count):
            cell = body.get_cell(table, r_idx, c_idx)
            render_inline(row[c_idx] if c_idx < len(row) else "", RangeSink(cell))
            if r_idx == 0:
                body.set_cell_background(cell, header_fill)
                body.set_cell_bold(cell)
            cell.commit()
    return cursor + 1


def _table_row(row: Any) -> tuple[str, ...]:
    if isinstance(row, (list, tuple)):
        return tuple(_stringify(cell) for cell in row)
    return (_stringify(row),)


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    return str(value)
