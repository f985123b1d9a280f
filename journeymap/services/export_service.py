"""
Journey map export: the phase × row table as CSV or Excel.

Layout (both formats):

    Phase            | <phase 1 title> | <phase 2 title> | ...
    <row label>      | <cell>          | <cell>          | ...
    ...one line per resolved row (see row_schema.resolve_row_order)

Phases are written in the order given; callers sort by ``Phase.order``.

CSV follows RFC 4180 as spreadsheet tools read it: a field is quoted only
when it contains a comma, a double quote, CR or LF; quotes are doubled;
records end with CRLF and the last record has no terminator. Newlines inside
a cell stay bare LF.

The opportunities cell holds one line per opportunity, ``<name> [<priority>]``;
``parse_opportunity_cell`` reads it back.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from pathlib import Path
from typing import Any, Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from journeymap.models.entities import Job, Journey, Opportunity, Phase, PriorityLevel
from journeymap.services.health import health_category, phase_health_score
from journeymap.services.row_schema import RowDescriptor, RowKey, resolve_row_order

logger = logging.getLogger(__name__)

CSV_MIMETYPE = "text/csv;charset=utf-8"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADER_LABEL = "Phase"
UNTITLED_PHASE = "Untitled"
UNTITLED_OPPORTUNITY = "Untitled"

HEALTH_FILLS = {
    "good": PatternFill(start_color="27AE60", end_color="27AE60", fill_type="solid"),
    "mid": PatternFill(start_color="F39C12", end_color="F39C12", fill_type="solid"),
    "bad": PatternFill(start_color="E74C3C", end_color="E74C3C", fill_type="solid"),
}
WHITE_FONT = Font(color="FFFFFF", bold=True)
HEADER_FILL = PatternFill(start_color="354A5F", end_color="354A5F", fill_type="solid")
HEADER_FONT = Font(color="FFFFFF", bold=True, size=11)
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)

_LINE_BREAKS = re.compile(r"[\r\n]+")
_OPPORTUNITY_LINE = re.compile(
    r"^(?P<name>.*) \[(?P<priority>%s)\]$" % "|".join(p.value for p in PriorityLevel)
)


# ── Opportunity mini-format ──────────────────────────────────────────────────


def serialize_opportunity_cell(opportunities: Sequence[Opportunity]) -> str:
    """One ``<name> [<priority>]`` line per opportunity, in input order.

    Line breaks inside a name become single spaces so every opportunity
    stays on its own line.
    """
    lines = []
    for o in opportunities:
        name = _LINE_BREAKS.sub(" ", o.name).strip() or UNTITLED_OPPORTUNITY
        lines.append(f"{name} [{o.priority}]")
    return "\n".join(lines)


def parse_opportunity_cell(text: str) -> list[tuple[str, str]]:
    """Inverse of ``serialize_opportunity_cell``: ``[(name, priority), ...]``.

    A non-blank line without a recognised ``[High|Medium|Low]`` suffix is
    read as a Medium opportunity named after the whole line.
    """
    result = []
    for line in (text or "").split("\n"):
        if not line.strip():
            continue
        m = _OPPORTUNITY_LINE.match(line)
        if m:
            result.append((m.group("name"), m.group("priority")))
        else:
            result.append((line.strip(), PriorityLevel.MEDIUM.value))
    return result


# ── Cell resolution ──────────────────────────────────────────────────────────


def _stringify(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (list, tuple)):
        return "\n".join(str(item) for item in raw)
    return str(raw)


def _cell_text(
    phase: Phase,
    row: RowDescriptor,
    phase_opportunities: list[Opportunity],
    phase_jobs: list[Job],
) -> str:
    if row.is_custom:
        return (phase.custom_row_values.get(row.id) or "").strip()

    match RowKey(row.key):
        case RowKey.PHASE_HEALTH:
            return str(phase_health_score(phase, phase_opportunities, phase_jobs))
        case RowKey.OPPORTUNITIES:
            return serialize_opportunity_cell(phase_opportunities)
        case RowKey.CUSTOMER_JOBS:
            return "\n".join(j.name for j in phase_jobs)
        case RowKey.DESCRIPTION:
            raw = phase.description
        case RowKey.FRONT_STAGE_ACTIONS:
            raw = phase.front_stage_actions
        case RowKey.CHANNELS:
            raw = phase.channels
        case RowKey.STRUGGLES:
            raw = phase.struggles
        case RowKey.INTERNAL_STRUGGLES:
            raw = phase.internal_struggles
        case RowKey.BACK_STAGE_ACTIONS:
            raw = phase.back_stage_actions
        case RowKey.SYSTEMS:
            raw = phase.systems
        case RowKey.RELATED_PROCESSES:
            raw = phase.related_processes
        case RowKey.RELATED_DOCUMENTS:
            raw = phase.related_documents
    return _stringify(raw)


def build_grid(
    phases: Sequence[Phase],
    journey: Journey | None,
    opportunities: Sequence[Opportunity],
    jobs: Sequence[Job],
) -> tuple[list[RowDescriptor], list[str], list[list[str]]]:
    """Resolve rows and cell text shared by the CSV and Excel writers.

    Returns:
        (rows, header, body) where ``header`` is the first line and
        ``body[i]`` holds ``[label, cell_1 .. cell_n]`` for ``rows[i]``.
    """
    rows = resolve_row_order(journey)
    header = [HEADER_LABEL] + [p.title or UNTITLED_PHASE for p in phases]

    jobs_by_id = {j.id: j for j in jobs}
    per_phase = []
    for p in phases:
        phase_opportunities = [o for o in opportunities if o.phase_id == p.id]
        phase_jobs = [jobs_by_id[jid] for jid in p.job_ids if jid in jobs_by_id]
        per_phase.append((p, phase_opportunities, phase_jobs))

    body = []
    for row in rows:
        body.append(
            [row.label]
            + [_cell_text(p, row, opps, pjobs) for p, opps, pjobs in per_phase]
        )
    return rows, header, body


def build_csv(
    phases: Sequence[Phase],
    journey: Journey | None,
    opportunities: Sequence[Opportunity],
    jobs: Sequence[Job],
) -> str:
    """Serialize the journey map table to CSV text (CRLF between records)."""
    rows, header, body = build_grid(phases, journey, opportunities, jobs)

    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\r\n")
    lines = []
    for record in [header] + body:
        # csv writes a lone empty field as "" to keep the record; a bare
        # empty line is the same record
        if record == [""]:
            lines.append("")
            continue
        buf.seek(0)
        buf.truncate()
        writer.writerow(record)
        lines.append(buf.getvalue().removesuffix("\r\n"))

    logger.debug(
        "Built journey map CSV: %d phases x %d rows",
        len(phases), len(rows),
        extra={"journey_id": journey.id if journey else None},
    )
    return "\r\n".join(lines)


def _auto_width(ws) -> None:
    """Auto-size column widths based on the longest line (capped at 60 chars)."""
    for col in ws.columns:
        max_len = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            if cell.value is not None:
                longest = max(len(line) for line in str(cell.value).split("\n"))
                max_len = max(max_len, min(longest, 60))
        ws.column_dimensions[col_letter].width = max(max_len + 4, 12)


def build_xlsx(
    phases: Sequence[Phase],
    journey: Journey | None,
    opportunities: Sequence[Opportunity],
    jobs: Sequence[Job],
) -> bytes:
    """Excel version of ``build_csv``.

    Same grid on a "Journey Map" sheet; the phase health row holds numbers
    and each score cell is filled with its health band colour.
    """
    rows, header, body = build_grid(phases, journey, opportunities, jobs)

    wb = Workbook()
    ws = wb.active
    ws.title = "Journey Map"

    for col, value in enumerate(header, start=1):
        cell = ws.cell(row=1, column=col, value=value)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.border = THIN_BORDER
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    for row_i, (row, values) in enumerate(zip(rows, body), start=2):
        label_cell = ws.cell(row=row_i, column=1, value=values[0])
        label_cell.font = Font(bold=True)
        label_cell.border = THIN_BORDER
        for col, text in enumerate(values[1:], start=2):
            if row.key == RowKey.PHASE_HEALTH.value and not row.is_custom:
                score = int(text)
                cell = ws.cell(row=row_i, column=col, value=score)
                cell.fill = HEALTH_FILLS[health_category(score)]
                cell.font = WHITE_FONT
                cell.alignment = Alignment(horizontal="center")
            else:
                cell = ws.cell(row=row_i, column=col, value=text)
                cell.alignment = Alignment(vertical="top", wrap_text=True)
            cell.border = THIN_BORDER

    _auto_width(ws)
    ws.freeze_panes = "B2"

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf.getvalue()


# ── Files ────────────────────────────────────────────────────────────────────


def export_filename(journey: Journey | None, ext: str = "csv") -> str:
    """``<slugified journey name>.<ext>``, ``journey-map.<ext>`` when unnamed."""
    name = journey.name if journey else ""
    slug = re.sub(r"[^A-Za-z0-9]+", "-", name).strip("-").lower()
    return f"{slug or 'journey-map'}.{ext}"


def download_csv(csv_text: str, filename: str, directory: str | Path | None = None) -> Path:
    """Write CSV text to ``directory/filename`` as UTF-8, line endings untouched."""
    path = Path(directory) / filename if directory else Path(filename)
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(csv_text)
    logger.info("Wrote journey map CSV to %s (%d bytes)", path, len(csv_text.encode("utf-8")))
    return path
