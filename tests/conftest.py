"""
Shared pytest fixtures for the Journey Map Platform test suite.

Provides:
    - app: Flask application (session-scoped, memory snapshot store)
    - session: Per-test app context + store/DB cleanup (autouse)
    - client: Flask test client (function-scoped)
    - sample_snapshot: raw camelCase AppState document
    - state: sample_snapshot parsed into an AppState
    - seeded: state saved into the app's snapshot store

Sample data (health in brackets):

    Acme (c1) [80]
      Onboarding (p1) [60]
        Sign up (j1) [60]      ph1 "Discover" [80], ph2 "Apply" [40]
      Support (p2) [100]
        Get help (j2) [100]    ph3 "Ask" [100, clamped from 105]
        Empty journey (j3)     no phases → no score
    Empty Co (c2)              no projects → no score
"""

import json

import pytest

from journeymap import create_app
from journeymap.models import db as _db
from journeymap.models.entities import AppState
from journeymap.models.snapshot import StoredSnapshot

TS = "2026-01-15T09:30:00.000Z"


# ── App & storage fixtures ───────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    return create_app("testing")


@pytest.fixture(autouse=True)
def session(app):
    """Per-test: open app context, empty the snapshot store and table."""
    with app.app_context():
        store = app.extensions["snapshot_store"]
        store.clear()
        yield
        store.clear()
        _db.session.rollback()
        StoredSnapshot.query.delete()
        _db.session.commit()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Sample data ──────────────────────────────────────────────────────────


def _make_phase(pid, journey_id, order, title, **fields):
    phase = {
        "id": pid,
        "journeyId": journey_id,
        "order": order,
        "title": title,
        "description": "",
        "struggles": "",
        "internalStruggles": "",
        "opportunities": "",
        "frontStageActions": "",
        "backStageActions": "",
        "systems": "",
        "relatedProcesses": "",
        "channels": "",
        "relatedDocuments": "",
        "jobIds": [],
        "customRowValues": {},
        "createdAt": TS,
        "updatedAt": TS,
    }
    phase.update(fields)
    return phase


def _make_opportunity(oid, phase_id, journey_id, project_id, name, priority="High"):
    return {
        "id": oid,
        "clientId": "c1",
        "projectId": project_id,
        "journeyId": journey_id,
        "phaseId": phase_id,
        "stage": "Backlog",
        "stageOrder": 0,
        "name": name,
        "priority": priority,
        "description": "",
        "pointOfDifferentiation": "",
        "criticalAssumptions": "",
        "createdAt": TS,
        "updatedAt": TS,
    }


def _make_job(jid, name, tag="Functional"):
    return {"id": jid, "clientId": "c1", "name": name, "tag": tag, "createdAt": TS, "updatedAt": TS}


@pytest.fixture()
def sample_snapshot():
    """Raw snapshot document as the web client stores it."""
    return {
        "clients": [
            {"id": "c1", "name": "Acme", "website": "https://acme.example", "createdAt": TS, "updatedAt": TS},
            {"id": "c2", "name": "Empty Co", "createdAt": TS, "updatedAt": TS},
        ],
        "projects": [
            {"id": "p1", "clientId": "c1", "name": "Onboarding", "createdAt": TS, "updatedAt": TS},
            {"id": "p2", "clientId": "c1", "name": "Support", "createdAt": TS, "updatedAt": TS},
        ],
        "journeys": [
            {
                "id": "j1",
                "projectId": "p1",
                "name": "Sign up",
                "rowOrder": ["cr-1", "description", "ghost-row", "phaseHealth"],
                "customRows": [{"id": "cr-1", "label": "Emotions"}],
                "createdAt": TS,
                "updatedAt": TS,
            },
            {"id": "j2", "projectId": "p2", "name": "Get help", "createdAt": TS, "updatedAt": TS},
            {"id": "j3", "projectId": "p2", "name": "Empty journey", "createdAt": TS, "updatedAt": TS},
        ],
        "phases": [
            # Listed out of column order on purpose
            _make_phase(
                "ph2", "j1", 2, "Apply",
                internalStruggles=json.dumps([{"text": "Manual review", "tag": "High"}]),
            ),
            _make_phase(
                "ph1", "j1", 1, "Discover",
                description="Browsing, comparing",
                jobIds=["job-1", "missing-job", "job-2"],
                customRowValues={"cr-1": "  Curious  "},
            ),
            _make_phase("ph3", "j2", 1, "Ask", jobIds=["job-3"]),
        ],
        "jobs": [
            _make_job("job-1", "Find a home"),
            _make_job("job-2", "Compare prices"),
            _make_job("job-3", "Feel reassured", tag="Emotional"),
        ],
        "insights": [
            {"id": "in-1", "clientId": "c1", "title": "Users skim", "priority": "High", "order": 1},
        ],
        "opportunities": [
            _make_opportunity("o1", "ph1", "j1", "p1", "Opp A"),
            _make_opportunity("o2", "ph1", "j1", "p1", "Opp B"),
            _make_opportunity("o3", "ph1", "j1", "p1", "Opp C"),
            _make_opportunity("o4", "ph3", "j2", "p2", "Chat bot"),
            _make_opportunity("o5", "ph3", "j2", "p2", "FAQ"),
            _make_opportunity("o6", "ph3", "j2", "p2", "Callback"),
        ],
        "cellComments": {
            "ph1::struggles": {"text": "Check with research", "replies": ["Done"]},
        },
    }


@pytest.fixture()
def state(sample_snapshot):
    return AppState.from_dict(sample_snapshot)


@pytest.fixture()
def seeded(app, state):
    """Save the sample state into the app's snapshot store."""
    app.extensions["snapshot_store"].save(state)
    return state
