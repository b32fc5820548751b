from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping
from zipfile import BadZipFile

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from docx.shared import Pt

from docgen.body import DocumentBody
from docgen.config import DEFAULT_HEADER_FILL
from docgen.errors import TemplateError
from docgen.substitute import RenderReport, render_fields


def render_document(
    template_path: str | Path,
    fields: Mapping[str, Any],
    out_docx_path: str | Path,
    *,
    names: Iterable[str] | None = None,
    fallback: str = "",
    include_template_tokens: bool = False,
    header_fill: str = DEFAULT_HEADER_FILL,
) -> RenderReport:
    template_file = Path(template_path)
    out_file = Path(out_docx_path)
    if out_file.resolve() == template_file.resolve():
        raise TemplateError(f"Output would overwrite the template: {out_file}")

    doc = load_template(template_file)
    print(f"Template: {template_file}")
    _apply_style_profile(doc)
    report = render_fields(
        DocumentBody(doc),
        fields,
        names=names,
        fallback=fallback,
        include_template_tokens=include_template_tokens,
        header_fill=header_fill,
    )
    print(f"Fields rendered: {len(report.rendered)} (skipped: {len(report.skipped)})")

    out_file.parent.mkdir(parents=True, exist_ok=True)
    _save_docx_atomic(doc, out_file)
    return report


def load_template(template_path: Path) -> Any:
    if not template_path.exists():
        raise TemplateError(f"Template not found: {template_path}")
    if template_path.is_dir():
        raise TemplateError(f"Template path is a directory: {template_path}")
    try:
        return Document(str(template_path))
    except (PackageNotFoundError, BadZipFile, ValueError) as err:
        raise TemplateError(f"Template is not a readable .docx: {template_path} ({err})") from err


def list_template_tokens(template_path: str | Path) -> list[str]:
    doc = load_template(Path(template_path))
    return DocumentBody(doc).find_tokens()


def _save_docx_atomic(doc: Any, path: Path) -> None:
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    doc.save(str(tmp_path))
    tmp_path.replace(path)


def _apply_style_profile(doc: Any) -> None:
    # Only fills values the template leaves unset.
    profiles = {
        "Heading 1": {
            "font_size_pt": 16.0,
            "bold": True,
            "spacing_before_pt": 18.0,
            "spacing_after_pt": 6.0,
            "keep_with_next": True,
        },
        "Heading 2": {
            "font_size_pt": 14.0,
            "bold": True,
            "spacing_before_pt": 12.0,
            "spacing_after_pt": 4.0,
            "keep_with_next": True,
        },
        "Heading 3": {
            "font_size_pt": 12.0,
            "bold": True,
            "spacing_before_pt": 10.0,
            "spacing_after_pt": 2.0,
            "keep_with_next": True,
        },
        "List Bullet": {
            "spacing_after_pt": 2.0,
        },
        "List Number": {
            "spacing_after_pt": 2.0,
        },
    }

    for style_name, profile in profiles.items():
        try:
            style = doc.styles[style_name]
        except KeyError:
            continue
        font = style.font
        if profile.get("font_size_pt") is not None and font.size is None:
            font.size = Pt(profile["font_size_pt"])
        if profile.get("bold") is not None and font.bold is None:
            font.bold = profile["bold"]
        fmt = style.paragraph_format
        if profile.get("spacing_before_pt") is not None and fmt.space_before is None:
            fmt.space_before = Pt(profile["spacing_before_pt"])
        if profile.get("spacing_after_pt") is not None and fmt.space_after is None:
            fmt.space_after = Pt(profile["spacing_after_pt"])
        if profile.get("keep_with_next") is not None and fmt.keep_with_next is None:
            fmt.keep_with_next = profile["keep_with_next"]
