from __future__ import annotations

import re
from enum import Enum
from typing import NamedTuple

from docgen.body import BULLET, NUMBER, DocumentBody, ParagraphSink
from docgen.inline import render_inline

_BULLET_RE = re.compile(r"^\s*[-*•]\s+(.+)$")
_NUMBERED_RE = re.compile(r"^\s*(\d+)\.\s+(.+)$")
_HEADING_RE = re.compile(r"^(#{1,3})\s+(.+)$")
_LINE_SPLIT_RE = re.compile(r"\r?\n")


class LineKind(Enum):
    HEADING = "heading"
    BULLET = "bullet"
    NUMBERED = "numbered"
    PLAIN = "plain"


class Line(NamedTuple):
    kind: LineKind
    text: str
    level: int = 0


_GLYPHS = {LineKind.BULLET: BULLET, LineKind.NUMBERED: NUMBER}


def split_lines(text: str) -> list[str]:
    return _LINE_SPLIT_RE.split(text)


def classify_line(line: str) -> Line:
    match = _BULLET_RE.match(line)
    if match:
        return Line(LineKind.BULLET, match.group(1))
    # The literal ordinal is dropped; list numbering is assigned by the document.
    match = _NUMBERED_RE.match(line)
    if match:
        return Line(LineKind.NUMBERED, match.group(2))
    match = _HEADING_RE.match(line)
    if match:
        return Line(LineKind.HEADING, match.group(2), len(match.group(1)))
    return Line(LineKind.PLAIN, line)


def render_block(body: DocumentBody, cursor: int, text: str | None) -> int:
    # One block per source line; empty input still yields one paragraph.
    if not text:
        body.insert_paragraph(cursor, "")
        return cursor + 1

    list_kind: LineKind | None = None
    for line in map(classify_line, split_lines(text)):
        if line.kind in _GLYPHS:
            item = body.insert_list_item(cursor)
            body.set_glyph(item, _GLYPHS[line.kind], restart=line.kind is not list_kind)
            list_kind = line.kind
            render_inline(line.text, ParagraphSink(item))
        else:
            paragraph = body.insert_paragraph(cursor)
            if line.kind is LineKind.HEADING:
                body.set_heading_level(paragraph, line.level)
            else:
                list_kind = None
            render_inline(line.text, ParagraphSink(paragraph))
        cursor += 1
    return cursor
