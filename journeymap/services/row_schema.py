"""
Row schema of a journey map.

A journey map is a table of phases (columns) × rows. Rows are the fixed
built-in set below plus any custom rows the user added to the journey, in
the order the user arranged them (``Journey.row_order``). The stored order
is client-written state and may be partial or stale, so resolution is
self-healing:

    1. start from ``row_order`` (or the canonical order when absent)
    2. drop ids that are neither a built-in key nor a custom row of the journey
    3. drop repeated ids (first occurrence wins)
    4. append missing built-ins in canonical order

Cell comments are keyed per (phase, row) with ``comment_key``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

from journeymap.models.entities import Journey

logger = logging.getLogger(__name__)


class RowKey(str, Enum):
    """Built-in rows, in canonical order."""

    DESCRIPTION = "description"
    PHASE_HEALTH = "phaseHealth"
    CUSTOMER_JOBS = "customerJobs"
    FRONT_STAGE_ACTIONS = "frontStageActions"
    CHANNELS = "channels"
    STRUGGLES = "struggles"
    INTERNAL_STRUGGLES = "internalStruggles"
    BACK_STAGE_ACTIONS = "backStageActions"
    SYSTEMS = "systems"
    RELATED_PROCESSES = "relatedProcesses"
    OPPORTUNITIES = "opportunities"
    RELATED_DOCUMENTS = "relatedDocuments"


BUILTIN_ROW_KEYS: tuple[str, ...] = tuple(k.value for k in RowKey)

CUSTOM_ROW_FALLBACK_LABEL = "Row"

COMMENT_KEY_SEP = "::"

_UPPER = re.compile(r"([A-Z])")


@dataclass(frozen=True)
class RowDescriptor:
    id: str
    key: str
    label: str
    is_custom: bool

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "key": self.key,
            "label": self.label,
            "isCustom": self.is_custom,
        }


def row_label(key: str) -> str:
    """Title for a built-in row: ``frontStageActions`` -> ``Front Stage Actions``."""
    spaced = _UPPER.sub(r" \1", key)
    return (spaced[:1].upper() + spaced[1:]).strip()


def _builtin(key: str) -> RowDescriptor:
    return RowDescriptor(id=key, key=key, label=row_label(key), is_custom=False)


def resolve_row_order(journey: Journey | None) -> list[RowDescriptor]:
    """Return the definitive ordered rows of a journey map.

    Never raises: a missing journey, missing or non-list ``row_order`` and
    empty custom rows all degrade to the canonical built-in list.
    """
    if journey is None:
        return [_builtin(key) for key in BUILTIN_ROW_KEYS]

    custom_labels = {row.id: row.label for row in journey.custom_rows}
    raw_order = journey.row_order
    base_order = raw_order if isinstance(raw_order, (list, tuple)) else BUILTIN_ROW_KEYS

    order: list[str] = []
    seen: set[str] = set()
    dropped: list = []
    for row_id in base_order:
        if not isinstance(row_id, str) or (
            row_id not in BUILTIN_ROW_KEYS and row_id not in custom_labels
        ):
            dropped.append(row_id)
            continue
        if row_id in seen:
            continue
        seen.add(row_id)
        order.append(row_id)

    missing = [key for key in BUILTIN_ROW_KEYS if key not in seen]
    order.extend(missing)

    if dropped or (missing and raw_order is not None):
        logger.warning(
            "Healed row order of journey %s: dropped=%s appended=%s",
            journey.id, dropped, missing,
            extra={"journey_id": journey.id},
        )

    rows = []
    for row_id in order:
        if row_id in BUILTIN_ROW_KEYS:
            rows.append(_builtin(row_id))
        else:
            label = custom_labels.get(row_id)
            rows.append(
                RowDescriptor(
                    id=row_id,
                    key=row_id,
                    label=label if label is not None else CUSTOM_ROW_FALLBACK_LABEL,
                    is_custom=True,
                )
            )
    return rows


def comment_key(phase_id: str, row_key: str) -> str:
    """Key of a cell comment in ``AppState.cell_comments``.

    ``::`` is used because phase ids are UUIDs and already contain dashes.
    """
    return f"{phase_id}{COMMENT_KEY_SEP}{row_key}"


def parse_comment_key(key: str) -> tuple[str, str] | None:
    """Split a comment key into (phase_id, row_key); None when malformed."""
    phase_id, sep, row_key = key.partition(COMMENT_KEY_SEP)
    if not sep:
        return None
    return phase_id, row_key
