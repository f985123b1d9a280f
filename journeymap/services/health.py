"""
Journey health scoring.

A phase scores 0–100 from its struggles, its opportunities and the mix of
jobs assigned to it. Journeys, Meta-Journeys (projects) and clients are
rounded means of the level below, skipping children that have no score:

    phase   = phase_health_score(phase, opportunities, jobs)
    journey = mean(phase scores)
    project = mean(journey scores of the project)
    client  = mean(journey scores of every project of the client)

The client figure averages journeys, not phases, so a journey with many
phases weighs the same as a journey with one.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Sequence

from journeymap.core.exceptions import NotFoundError
from journeymap.models.entities import AppState, JobTag, Job, Opportunity, Phase, PriorityLevel
from journeymap.services.phase_fields import parse_struggles

logger = logging.getLogger(__name__)

BASE_SCORE = 50

# Per item, keyed by tag / priority; anything else uses the "other" weight.
STRUGGLE_PENALTY = {PriorityLevel.HIGH.value: 12, PriorityLevel.MEDIUM.value: 6}
STRUGGLE_PENALTY_OTHER = 2
INTERNAL_STRUGGLE_PENALTY = {PriorityLevel.HIGH.value: 10, PriorityLevel.MEDIUM.value: 5}
INTERNAL_STRUGGLE_PENALTY_OTHER = 2
OPPORTUNITY_BONUS = {PriorityLevel.HIGH.value: 10, PriorityLevel.MEDIUM.value: 5}
OPPORTUNITY_BONUS_OTHER = 2

# Full bonus when every assigned job is Social or Emotional
DIFFERENTIATION_BONUS = 25

GOOD_THRESHOLD = 60
MID_THRESHOLD = 40


class HealthCategory(str, Enum):
    GOOD = "good"
    MID = "mid"
    BAD = "bad"


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (UI parity, not banker's)."""
    return math.floor(value + 0.5)


def phase_health_score(
    phase: Phase,
    opportunities: Iterable[Opportunity],
    jobs: Sequence[Job],
) -> int:
    """Score one phase.

    Args:
        phase: The phase; its ``struggles`` and ``internal_struggles`` fields
            are parsed with ``parse_struggles``.
        opportunities: Opportunities attached to this phase.
        jobs: Jobs assigned to this phase (already resolved from job_ids).

    Returns:
        int in [0, 100]. The result does not depend on the order of
        ``opportunities`` or ``jobs``.
    """
    score: float = BASE_SCORE

    for s in parse_struggles(phase.struggles):
        score -= STRUGGLE_PENALTY.get(s.tag, STRUGGLE_PENALTY_OTHER)

    for s in parse_struggles(phase.internal_struggles):
        score -= INTERNAL_STRUGGLE_PENALTY.get(s.tag, INTERNAL_STRUGGLE_PENALTY_OTHER)

    for o in opportunities:
        score += OPPORTUNITY_BONUS.get(o.priority, OPPORTUNITY_BONUS_OTHER)

    jobs = list(jobs)
    differentiating = sum(
        1 for j in jobs if j.tag in (JobTag.SOCIAL.value, JobTag.EMOTIONAL.value)
    )
    score += differentiating / (len(jobs) or 1) * DIFFERENTIATION_BONUS

    return max(0, min(100, round_half_up(score)))


def average_health(scores: Iterable[int]) -> int | None:
    """Rounded mean of scores; None for an empty input (nothing to display)."""
    scores = list(scores)
    if not scores:
        return None
    return round_half_up(sum(scores) / len(scores))


def health_category(score: int | None) -> str | None:
    """Display band: good (>= 60), mid (40–59), bad (< 40)."""
    if score is None:
        return None
    if score >= GOOD_THRESHOLD:
        return HealthCategory.GOOD.value
    if score >= MID_THRESHOLD:
        return HealthCategory.MID.value
    return HealthCategory.BAD.value


# ── Aggregation over a snapshot ──────────────────────────────────────────────


def score_phase(phase: Phase, state: AppState) -> int:
    """Score a phase with its opportunities and jobs looked up in the snapshot."""
    return phase_health_score(
        phase,
        state.opportunities_for_phase(phase.id),
        state.jobs_for_phase(phase),
    )


def journey_health(journey_id: str, state: AppState) -> int | None:
    return average_health(
        score_phase(p, state) for p in state.phases_for_journey(journey_id)
    )


def _journey_scores(journey_ids: Iterable[str], state: AppState) -> list[int]:
    scores = (journey_health(jid, state) for jid in journey_ids)
    return [s for s in scores if s is not None]


def project_health(project_id: str, state: AppState) -> int | None:
    """Meta-Journey health: mean of its journeys' health."""
    return average_health(
        _journey_scores((j.id for j in state.journeys_for_project(project_id)), state)
    )


def client_health(client_id: str, state: AppState) -> int | None:
    """Mean of the journey health of every journey under the client."""
    journey_ids = [
        j.id
        for p in state.projects_for_client(client_id)
        for j in state.journeys_for_project(p.id)
    ]
    return average_health(_journey_scores(journey_ids, state))


# ── Report payloads ──────────────────────────────────────────────────────────


def compute_journey_health(journey_id: str, state: AppState) -> dict:
    """Per-phase scores in column order plus the journey average."""
    journey = state.get_journey(journey_id)
    if journey is None:
        raise NotFoundError(resource="Journey", resource_id=journey_id)

    phases = []
    for p in state.phases_for_journey(journey_id):
        score = score_phase(p, state)
        phases.append({
            "phase_id": p.id,
            "title": p.title or "Untitled",
            "order": p.order,
            "health": score,
            "category": health_category(score),
        })

    overall = average_health(p["health"] for p in phases)
    return {
        "journey_id": journey.id,
        "journey_name": journey.name,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "health": overall,
        "category": health_category(overall),
        "phases": phases,
    }


def _project_summary(project, state: AppState) -> dict:
    journeys = []
    for j in state.journeys_for_project(project.id):
        score = journey_health(j.id, state)
        journeys.append({
            "journey_id": j.id,
            "name": j.name,
            "phase_count": len(state.phases_for_journey(j.id)),
            "health": score,
            "category": health_category(score),
        })
    score = average_health(j["health"] for j in journeys if j["health"] is not None)
    return {
        "project_id": project.id,
        "name": project.name,
        "health": score,
        "category": health_category(score),
        "journeys": journeys,
    }


def compute_project_health(project_id: str, state: AppState) -> dict:
    project = state.get_project(project_id)
    if project is None:
        raise NotFoundError(resource="Project", resource_id=project_id)
    summary = _project_summary(project, state)
    summary["generated_at"] = datetime.now(timezone.utc).isoformat()
    return summary


def compute_client_health(client_id: str, state: AppState) -> dict:
    """Client health snapshot with the project → journey breakdown.

    ``health`` is None (and the UI hides the bar) when no journey of the
    client has a phase.
    """
    client = state.get_client(client_id)
    if client is None:
        raise NotFoundError(resource="Client", resource_id=client_id)

    projects = [_project_summary(p, state) for p in state.projects_for_client(client_id)]
    journey_scores = [
        j["health"]
        for p in projects
        for j in p["journeys"]
        if j["health"] is not None
    ]
    overall = average_health(journey_scores)
    logger.debug(
        "Client %s health=%s over %d scored journeys",
        client_id, overall, len(journey_scores),
        extra={"client_id": client_id},
    )
    return {
        "client_id": client.id,
        "client_name": client.name,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "health": overall,
        "category": health_category(overall),
        "projects": projects,
    }
