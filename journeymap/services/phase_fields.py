"""Parsers for the structured text stored in Phase fields."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

from journeymap.models.entities import PriorityLevel

# Legacy plain-text lists were separated by newlines, semicolons or bullets
_LIST_SPLIT = re.compile(r"\n|;|•")

_TAGS = {p.value for p in PriorityLevel}


def _reject_constant(name: str):
    # NaN, Infinity and -Infinity are not JSON
    raise ValueError(f"Invalid JSON constant {name}")


@dataclass(frozen=True)
class StruggleItem:
    text: str
    tag: str


def parse_list(value: Any) -> list[str]:
    """Split legacy list text into trimmed, non-blank items."""
    if isinstance(value, (list, tuple)):
        return [v.strip() for v in value if isinstance(v, str) and v.strip()]
    if not isinstance(value, str) or not value.strip():
        return []
    return [s.strip() for s in _LIST_SPLIT.split(value) if s.strip()]


def parse_struggles(value: Any) -> list[StruggleItem]:
    """Parse a struggles field.

    Current format is a JSON array of ``{"text", "tag"}`` objects; entries
    with a non-string text or an unknown tag are dropped. Anything that is
    not JSON is legacy list text and every item counts as a Medium struggle.
    """
    if isinstance(value, (list, tuple)):
        return [StruggleItem(text=t, tag=PriorityLevel.MEDIUM.value) for t in parse_list(value)]
    if not isinstance(value, str) or not value.strip():
        return []
    try:
        parsed = json.loads(value, parse_constant=_reject_constant)
    except (ValueError, RecursionError):
        return [StruggleItem(text=t, tag=PriorityLevel.MEDIUM.value) for t in parse_list(value)]
    if not isinstance(parsed, list):
        return []
    return [
        StruggleItem(text=item["text"], tag=item["tag"])
        for item in parsed
        if isinstance(item, dict)
        and isinstance(item.get("text"), str)
        and isinstance(item.get("tag"), str)
        and item["tag"] in _TAGS
    ]
