from __future__ import annotations

import re
from typing import NamedTuple, Protocol

PLAIN = "plain"
BOLD = "bold"
ITALIC = "italic"
CODE = "code"
LINK = "link"

_BOLD_RE = re.compile(r"\*\*([^*]+)\*\*")
_ITALIC_RE = re.compile(r"\*([^*_]+)\*|_([^*_]+)_")
_CODE_RE = re.compile(r"`([^`]+)`")
_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_TRIGGERS = "*_`["


class InlineSpan(NamedTuple):
    style: str
    text: str
    url: str | None = None


class StyledTextSink(Protocol):
    def append(self, span: InlineSpan) -> None: ...


def parse_inline(text: str) -> list[InlineSpan]:
    # Matched spans are opaque; a trigger that opens nothing stays plain text.
    text = text or ""
    spans: list[InlineSpan] = []
    i = 0
    while i < len(text):
        matched = _match_styled(text, i)
        if matched is not None:
            span, i = matched
            spans.append(span)
            continue

        start = i
        i += 1
        while i < len(text) and text[i] not in _TRIGGERS:
            i += 1
        _append_plain(spans, text[start:i])

    if not spans:
        spans.append(InlineSpan(PLAIN, ""))
    return spans


def render_inline(text: str, sink: StyledTextSink) -> list[InlineSpan]:
    spans = parse_inline(text)
    for span in spans:
        sink.append(span)
    return spans


def plain_text(spans: list[InlineSpan]) -> str:
    return "".join(span.text for span in spans)


def _match_styled(text: str, pos: int) -> tuple[InlineSpan, int] | None:
    match = _BOLD_RE.match(text, pos)
    if match:
        return InlineSpan(BOLD, match.group(1)), match.end()
    match = _ITALIC_RE.match(text, pos)
    if match:
        inner = match.group(1) if match.group(1) is not None else match.group(2)
        return InlineSpan(ITALIC, inner), match.end()
    match = _CODE_RE.match(text, pos)
    if match:
        return InlineSpan(CODE, match.group(1)), match.end()
    match = _LINK_RE.match(text, pos)
    if match:
        return InlineSpan(LINK, match.group(1), match.group(2)), match.end()
    return None


def _append_plain(spans: list[InlineSpan], text: str) -> None:
    if spans and spans[-1].style == PLAIN:
        spans[-1] = InlineSpan(PLAIN, spans[-1].text + text)
        return
    spans.append(InlineSpan(PLAIN, text))
