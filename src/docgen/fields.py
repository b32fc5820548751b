from __future__ import annotations

import json
from pathlib import Path
from typing import Any
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from pydantic import BaseModel, Field, ValidationError

from docgen.errors import FieldInputError

FIELDS_SHEET = "fields"
_WORKBOOK_SUFFIXES = {".xlsx", ".xlsm"}


class RenderRequest(BaseModel):
    fields: dict[str, Any] = Field(default_factory=dict)
    order: list[str] | None = None
    fallback: str | None = None


def load_request(path: str | Path) -> RenderRequest:
    source = Path(path)
    if not source.exists():
        raise FieldInputError(f"Fields file not found: {source}")
    if source.suffix.lower() in _WORKBOOK_SUFFIXES:
        return RenderRequest(fields=load_workbook_fields(source))
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, ValueError) as err:
        raise FieldInputError(f"Could not read fields JSON {source}: {err}") from err
    return parse_request(payload)


def parse_request(payload: Any) -> RenderRequest:
    """Accept either ``{"fields": {...}, "order": [...]}`` or a flat mapping."""
    if not isinstance(payload, dict):
        raise FieldInputError("Fields payload must be a JSON object.")
    if not isinstance(payload.get("fields"), dict):
        payload = {"fields": payload}
    try:
        return RenderRequest.model_validate(payload)
    except ValidationError as err:
        raise FieldInputError(f"Invalid fields payload:\n{err}") from err


def load_workbook_fields(path: str | Path) -> dict[str, Any]:
    # "Fields" sheet: name/value pairs, repeated names collect into a list.
    # Any other sheet is a table field named after the sheet.
    try:
        workbook = load_workbook(str(path), data_only=True)
    except (OSError, ValueError, KeyError, BadZipFile, InvalidFileException) as err:
        raise FieldInputError(f"Could not open workbook {path}: {err}") from err

    fields: dict[str, Any] = {}
    for ws in workbook.worksheets:
        if _normalize(ws.title) == FIELDS_SHEET:
            _read_field_pairs(ws, fields)
            continue
        rows = _sheet_rows(ws)
        if rows:
            fields[ws.title] = rows
    return fields


def _normalize(text: str) -> str:
    return " ".join(text.strip().split()).lower()


def _read_field_pairs(ws, fields: dict[str, Any]) -> None:
    for idx, row in enumerate(ws.iter_rows(values_only=True)):
        name = row[0] if row else None
        value = row[1] if len(row) > 1 else None
        if name is None or not str(name).strip():
            continue
        name = str(name).strip()
        if idx == 0 and _normalize(name) == "name" and _normalize(str(value or "")) == "value":
            continue
        if name not in fields:
            fields[name] = value
        elif isinstance(fields[name], list):
            fields[name].append(value)
        else:
            fields[name] = [fields[name], value]


def _sheet_rows(ws) -> list[list[Any]]:
    rows: list[list[Any]] = []
    for row in ws.iter_rows(values_only=True):
        cells = ["" if value is None else value for value in row]
        while cells and cells[-1] == "":
            cells.pop()
        rows.append(cells)
    while rows and not rows[-1]:
        rows.pop()
    return rows
