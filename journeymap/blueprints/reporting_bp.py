"""
Health report endpoints.

    GET /api/v1/reports/journeys/<journey_id>/health   — per-phase scores + average
    GET /api/v1/reports/projects/<project_id>/health   — Meta-Journey breakdown
    GET /api/v1/reports/clients/<client_id>/health     — client breakdown

``health`` is null when there is nothing to score; clients render no health
bar in that case.
"""

from flask import Blueprint, jsonify

from journeymap.services.health import (
    compute_client_health,
    compute_journey_health,
    compute_project_health,
)
from journeymap.services.journey_service import load_state

reporting_bp = Blueprint("reporting", __name__, url_prefix="/api/v1/reports")


@reporting_bp.route("/journeys/<journey_id>/health", methods=["GET"])
def journey_health_report(journey_id):
    return jsonify(compute_journey_health(journey_id, load_state())), 200


@reporting_bp.route("/projects/<project_id>/health", methods=["GET"])
def project_health_report(project_id):
    return jsonify(compute_project_health(project_id, load_state())), 200


@reporting_bp.route("/clients/<client_id>/health", methods=["GET"])
def client_health_report(client_id):
    """
    GET /api/v1/reports/clients/<client_id>/health
    Client health averaged over every journey of every Meta-Journey.
    """
    return jsonify(compute_client_health(client_id, load_state())), 200
