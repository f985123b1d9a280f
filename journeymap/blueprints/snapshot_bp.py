"""
Snapshot endpoints: the storage port over HTTP.

    GET /api/v1/snapshot   — current AppState (empty state when nothing stored)
    PUT /api/v1/snapshot   — replace the stored AppState with the request body
"""

import logging

from flask import Blueprint, jsonify, request

from journeymap.core.exceptions import ValidationError
from journeymap.models.entities import AppState
from journeymap.services.journey_service import load_state, save_state

logger = logging.getLogger(__name__)

snapshot_bp = Blueprint("snapshot", __name__, url_prefix="/api/v1")


@snapshot_bp.route("/snapshot", methods=["GET"])
def get_snapshot():
    return jsonify(load_state().to_dict()), 200


@snapshot_bp.route("/snapshot", methods=["PUT"])
def put_snapshot():
    """Replace the stored snapshot; malformed entries are dropped on parse."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Snapshot body must be a JSON object")

    state = AppState.from_dict(data)
    save_state(state)
    logger.info(
        "Snapshot replaced: %d clients, %d journeys, %d phases",
        len(state.clients), len(state.journeys), len(state.phases),
    )
    return jsonify(state.to_dict()), 200
