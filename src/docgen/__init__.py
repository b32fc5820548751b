from __future__ import annotations

from docgen.body import DocumentBody
from docgen.errors import DocgenError, StyleApplicationError
from docgen.inline import InlineSpan, parse_inline
from docgen.substitute import ItemList, Scalar, Table, render_field, render_fields

__all__ = [
    "DocgenError",
    "DocumentBody",
    "InlineSpan",
    "ItemList",
    "Scalar",
    "StyleApplicationError",
    "Table",
    "parse_inline",
    "render_field",
    "render_fields",
]
