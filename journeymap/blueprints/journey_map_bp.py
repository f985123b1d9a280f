"""
Journey map table endpoints.

    GET /api/v1/journeys/<journey_id>/rows
        Resolved row order (built-in + custom) of the journey map.

    GET /api/v1/journeys/<journey_id>/export
        format: csv | excel (default: csv)
        Phase × row table as a file download. CSV is sent as
        ``text/csv;charset=utf-8`` with CRLF record terminators.
"""

import logging

from flask import Blueprint, Response, jsonify, request

from journeymap.core.exceptions import ValidationError
from journeymap.services.export_service import (
    CSV_MIMETYPE,
    XLSX_MIMETYPE,
    build_csv,
    build_xlsx,
    export_filename,
)
from journeymap.services.journey_service import (
    journey_export_inputs,
    load_state,
    require_journey,
)
from journeymap.services.row_schema import resolve_row_order

logger = logging.getLogger(__name__)

journey_map_bp = Blueprint("journey_map", __name__, url_prefix="/api/v1")

_FORMATS = ("csv", "excel")


@journey_map_bp.route("/journeys/<journey_id>/rows", methods=["GET"])
def journey_rows(journey_id):
    """Return the journey's rows in display / export order."""
    state = load_state()
    journey = require_journey(state, journey_id)
    rows = resolve_row_order(journey)
    return jsonify({"journey_id": journey.id, "rows": [r.to_dict() for r in rows]}), 200


@journey_map_bp.route("/journeys/<journey_id>/export", methods=["GET"])
def export_journey(journey_id):
    """Download the journey map as CSV or Excel."""
    fmt = request.args.get("format", "csv").lower()
    if fmt not in _FORMATS:
        raise ValidationError(
            "Unsupported format. Supported values: csv, excel.",
            details={"format": fmt},
        )

    state = load_state()
    journey, phases, opportunities = journey_export_inputs(state, journey_id)

    logger.info(
        "Exporting journey %s as %s (%d phases)", journey_id, fmt, len(phases),
        extra={"journey_id": journey_id, "export_format": fmt},
    )

    if fmt == "excel":
        content = build_xlsx(phases, journey, opportunities, state.jobs)
        return Response(
            content,
            mimetype=XLSX_MIMETYPE,
            headers={
                "Content-Disposition": f"attachment; filename={export_filename(journey, 'xlsx')}"
            },
        )

    content = build_csv(phases, journey, opportunities, state.jobs)
    return Response(
        content.encode("utf-8"),
        content_type=CSV_MIMETYPE,
        headers={
            "Content-Disposition": f"attachment; filename={export_filename(journey, 'csv')}"
        },
    )
