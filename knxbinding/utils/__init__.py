"""Shared utility helpers for knxbinding."""

from enum import Enum
from pathlib import Path
from typing import Any

# Datapoint type catalogue shipped with the package
DPT_DEFINITIONS_PATH = Path(__file__).resolve().parent.parent / "dpt" / "dpt_definitions.yml"


def enum_value(v: Any) -> str:
    """Extract the string value from an Enum member or return str(v)."""
    return v.value if isinstance(v, Enum) else str(v)


def filter_none(data: dict) -> dict:
    """Remove keys with None values from a dictionary.

    Required for Pydantic v2 compatibility: passing None explicitly
    to fields with defaults causes validation errors. Filtering None
    values lets Pydantic use its own defaults.
    """
    return {k: v for k, v in data.items() if v is not None}


def split_keep_positions(text: str, separator: str) -> list:
    """Split ``text`` on ``separator`` and strip each part.

    Empty parts are kept so callers can tell positions apart, e.g.
    ``"+1/1/10"`` yields ``["", "1/1/10"]``.
    """
    return [part.strip() for part in text.split(separator)]


def drop_trailing_empty(parts: list) -> list:
    """Drop empty strings from the end of ``parts`` (``"a,b,"`` style input)."""
    parts = list(parts)
    while parts and not parts[-1]:
        parts.pop()
    return parts
