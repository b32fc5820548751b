from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from docx import Document
from docx.text.hyperlink import Hyperlink


def describe_runs(paragraph) -> list[dict[str, Any]]:
    """Return one entry per run, hyperlink runs included, in document order."""
    described: list[dict[str, Any]] = []
    for item in paragraph.iter_inner_content():
        if isinstance(item, Hyperlink):
            for run in item.runs:
                described.append(_describe_run(run, item.url))
            continue
        described.append(_describe_run(item, None))
    return described


def summarize_docx_runs(docx_path: str | Path) -> dict[str, Any]:
    path = Path(docx_path)
    doc = Document(str(path))
    summary: dict[str, Any] = {
        "docx_path": str(path),
        "total_runs": 0,
        "bold_runs": 0,
        "italic_runs": 0,
        "code_runs": 0,
        "link_runs": 0,
        "paragraph_text": [],
        "paragraph_styles": [],
        "table_cell_text": [],
    }

    for paragraph in doc.paragraphs:
        summary["paragraph_text"].append(paragraph.text)
        summary["paragraph_styles"].append(paragraph.style.name)
        _accumulate_run_counts(summary, describe_runs(paragraph))

    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                summary["table_cell_text"].append(cell.text)
                for paragraph in cell.paragraphs:
                    _accumulate_run_counts(summary, describe_runs(paragraph))

    return summary


def assert_run_thresholds(
    summary: dict[str, Any],
    *,
    min_bold: int = 0,
    min_italic: int = 0,
    min_code: int = 0,
    min_link: int = 0,
) -> None:
    failures: list[str] = []
    for key, minimum in (
        ("bold_runs", min_bold),
        ("italic_runs", min_italic),
        ("code_runs", min_code),
        ("link_runs", min_link),
    ):
        if summary.get(key, 0) < minimum:
            failures.append(f"{key}={summary.get(key, 0)} is below required minimum {minimum}")
    if failures:
        raise AssertionError("; ".join(failures))


def _describe_run(run, url: str | None) -> dict[str, Any]:
    return {
        "text": run.text,
        "bold": bool(run.bold),
        "italic": bool(run.italic),
        "code": (run.font.name or "").strip().lower() == "consolas",
        "url": url,
    }


def _accumulate_run_counts(summary: dict[str, Any], runs: list[dict[str, Any]]) -> None:
    for run in runs:
        summary["total_runs"] += 1
        if run["bold"]:
            summary["bold_runs"] += 1
        if run["italic"]:
            summary["italic_runs"] += 1
        if run["code"]:
            summary["code_runs"] += 1
        if run["url"]:
            summary["link_runs"] += 1


def main() -> int:
    parser = argparse.ArgumentParser(description="Dump and assert DOCX run styling counts.")
    parser.add_argument("docx_path", help="Path to .docx file")
    parser.add_argument("--min-bold", type=int, default=0, help="Minimum bold runs required")
    parser.add_argument(
        "--min-italic", type=int, default=0, help="Minimum italic runs required"
    )
    parser.add_argument("--min-code", type=int, default=0, help="Minimum code runs required")
    parser.add_argument("--min-link", type=int, default=0, help="Minimum link runs required")
    args = parser.parse_args()

    summary = summarize_docx_runs(args.docx_path)
    print(json.dumps(summary, indent=2, ensure_ascii=True))

    try:
        assert_run_thresholds(
            summary,
            min_bold=args.min_bold,
            min_italic=args.min_italic,
            min_code=args.min_code,
            min_link=args.min_link,
        )
    except AssertionError as exc:
        print(f"ASSERTION FAILED: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
