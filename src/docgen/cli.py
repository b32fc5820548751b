from __future__ import annotations

import argparse
import time
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from docgen.config import (
    get_fallback,
    get_header_fill,
    get_include_template_tokens,
    get_output_dir,
    get_template_path,
)
from docgen.errors import DocgenError
from docgen.fields import load_request
from docgen.render import list_template_tokens, render_document


def format_seconds(seconds: float) -> str:
    if seconds < 60:
        return f"{seconds:.1f}s"
    mins = int(seconds // 60)
    secs = seconds - mins * 60
    return f"{mins}m {secs:.0f}s"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="docgen")
    subparsers = parser.add_subparsers(dest="command", required=True)

    render_parser = subparsers.add_parser(
        "render", help="Fill a .docx template from a fields file"
    )
    render_parser.add_argument(
        "--template",
        default=None,
        help="Path to the .docx template (default: DOCGEN_TEMPLATE_PATH env)",
    )
    render_parser.add_argument(
        "--fields",
        required=True,
        help="Fields as JSON ({name: value} or {\"fields\": ...}) or an .xlsx workbook",
    )
    render_parser.add_argument(
        "--output",
        default=None,
        help="Output .docx path (default: <DOCGEN_OUTPUT_DIR>/<template stem>_filled.docx)",
    )
    render_parser.add_argument(
        "--fallback",
        default=None,
        help="Text for tokens without a value; {name} expands to the field name",
    )
    render_parser.add_argument(
        "--include-template-tokens",
        default=None,
        action=argparse.BooleanOptionalAction,
        help="Also fill {{tokens}} found in the template but missing from the fields.",
    )

    tokens_parser = subparsers.add_parser(
        "tokens", help="List the {{tokens}} found in a template"
    )
    tokens_parser.add_argument("--template", default=None, help="Path to the .docx template")

    args = parser.parse_args(argv)

    env_path = find_dotenv(usecwd=True)
    load_dotenv(env_path, override=False)

    try:
        if args.command == "render":
            return _run_render(args)
        if args.command == "tokens":
            for name in list_template_tokens(_resolve_template(args.template)):
                print(name)
            return 0
    except DocgenError as err:
        raise SystemExit(f"ERROR: {err}") from err

    parser.print_help()
    return 2


def _run_render(args: argparse.Namespace) -> int:
    started = time.time()
    template = _resolve_template(args.template)
    request = load_request(args.fields)

    fallback = args.fallback
    if fallback is None:
        fallback = request.fallback if request.fallback is not None else get_fallback()
    include_template_tokens = args.include_template_tokens
    if include_template_tokens is None:
        include_template_tokens = get_include_template_tokens()

    output = _resolve_output(args.output, template)
    report = render_document(
        template,
        request.fields,
        output,
        names=request.order,
        fallback=fallback,
        include_template_tokens=include_template_tokens,
        header_fill=get_header_fill(),
    )
    if report.skipped:
        print(f"Tokens not in template: {', '.join(report.skipped)}")
    print(f"Saved: {output}")
    print(f"Done in {format_seconds(time.time() - started)}", flush=True)
    return 0


def _resolve_template(value: str | None) -> Path:
    if value:
        return Path(value)
    template = get_template_path()
    if template is None:
        raise SystemExit(
            "ERROR: no template given. Pass --template or set DOCGEN_TEMPLATE_PATH."
        )
    return template


def _resolve_output(value: str | None, template: Path) -> Path:
    if value:
        return Path(value)
    output_dir = get_output_dir()
    if output_dir is None:
        raise SystemExit("ERROR: no output given. Pass --output or set DOCGEN_OUTPUT_DIR.")
    return output_dir / f"{template.stem}_filled{template.suffix}"


if __name__ == "__main__":
    raise SystemExit(main())
