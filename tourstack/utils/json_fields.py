"""Helpers for the JSON-encoded TEXT columns.

Multilingual strings, content blocks, positioning configs and similar
structures are stored as JSON text in SQLite.  Rows written by older
builds may hold plain strings where JSON is expected, so decoding is
tolerant and falls back to a caller-supplied default.
"""

from __future__ import annotations

import json
from typing import Any


def dump_json(value: Any) -> str | None:
    """Encode *value* for storage; ``None`` stays ``None``."""
    if value is None:
        return None
    return json.dumps(value, ensure_ascii=False)


def load_json(text: str | None, default: Any = None) -> Any:
    """Decode a stored JSON column, returning *default* when empty or invalid."""
    if text is None or text == "":
        return default
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return default


def load_localized(text: str | None) -> dict[str, str]:
    """Decode a multilingual column; a bare string is treated as English."""
    if not text:
        return {"en": ""}
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        return {"en": text}
    if isinstance(value, dict):
        return value
    return {"en": str(value)}
