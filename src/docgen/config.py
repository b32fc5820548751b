from __future__ import annotations

import os
from pathlib import Path

TEMPLATE_PATH_ENV = "DOCGEN_TEMPLATE_PATH"
OUTPUT_DIR_ENV = "DOCGEN_OUTPUT_DIR"
FALLBACK_ENV = "DOCGEN_FALLBACK"
HEADER_FILL_ENV = "DOCGEN_HEADER_FILL"
INCLUDE_TEMPLATE_TOKENS_ENV = "DOCGEN_INCLUDE_TEMPLATE_TOKENS"

DEFAULT_HEADER_FILL = "D9E2F3"
_HEX_CHARS = set("0123456789ABCDEF")


def _get_env_path(name: str) -> Path | None:
    value = os.getenv(name, "").strip()
    if not value:
        return None
    return Path(value)


def get_template_path() -> Path | None:
    return _get_env_path(TEMPLATE_PATH_ENV)


def get_output_dir() -> Path | None:
    return _get_env_path(OUTPUT_DIR_ENV)


def get_fallback(default: str = "") -> str:
    value = os.getenv(FALLBACK_ENV)
    if value is None:
        return default
    return value


def get_header_fill(default: str = DEFAULT_HEADER_FILL) -> str:
    value = os.getenv(HEADER_FILL_ENV, "").strip().lstrip("#").upper()
    if len(value) != 6 or not set(value) <= _HEX_CHARS:
        return default
    return value


def get_include_template_tokens(default: bool = False) -> bool:
    value = os.getenv(INCLUDE_TEMPLATE_TOKENS_ENV, "").strip()
    if not value:
        return default
    return value.lower() in {"1", "true", "yes", "y", "on"}
