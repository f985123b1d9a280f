"""
Snapshot lookups for the HTTP layer.

Blueprints stay HTTP-only: they call these helpers to load the current
snapshot from the configured store and to pick the entities a core
operation needs. Unknown ids raise ``NotFoundError``.
"""

import logging

from flask import current_app

from journeymap.core.exceptions import NotFoundError
from journeymap.models.entities import AppState, Journey, Opportunity, Phase
from journeymap.services.snapshot_store import get_snapshot_store

logger = logging.getLogger(__name__)


def load_state() -> AppState:
    return get_snapshot_store(current_app).load()


def save_state(state: AppState) -> None:
    get_snapshot_store(current_app).save(state)


def require_journey(state: AppState, journey_id: str) -> Journey:
    journey = state.get_journey(journey_id)
    if journey is None:
        raise NotFoundError(resource="Journey", resource_id=journey_id)
    return journey


def journey_export_inputs(
    state: AppState, journey_id: str
) -> tuple[Journey, list[Phase], list[Opportunity]]:
    """Journey, its phases in column order and the opportunities on those phases."""
    journey = require_journey(state, journey_id)
    phases = state.phases_for_journey(journey_id)
    phase_ids = {p.id for p in phases}
    opportunities = [o for o in state.opportunities if o.phase_id in phase_ids]
    return journey, phases, opportunities
