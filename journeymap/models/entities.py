"""
Journey Map Platform
Snapshot entity types.

Everything the core reads is an immutable snapshot of the application state
as the client saves it: camelCase JSON with the shape

    {"clients": [...], "projects": [...], "journeys": [...], "phases": [...],
     "jobs": [...], "insights": [...], "opportunities": [...],
     "cellComments": {"<phaseId>::<rowKey>": {...}}}

Types:
    - Client, Project (Meta-Journey), Journey, JourneyRow, Phase
    - Job, Insight, Opportunity, CellComment
    - AppState: the whole snapshot plus hierarchy lookups

``from_dict`` is lenient (missing keys default, unknown keys are ignored,
malformed list entries are skipped) because snapshots come from older
clients; ``to_dict`` always writes the current camelCase shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class JobTag(str, Enum):
    FUNCTIONAL = "Functional"
    SOCIAL = "Social"
    EMOTIONAL = "Emotional"


class PriorityLevel(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class OpportunityStage(str, Enum):
    BACKLOG = "Backlog"
    IN_DISCOVERY = "In discovery"
    HORIZON_1 = "Horizon 1"
    HORIZON_2 = "Horizon 2"
    HORIZON_3 = "Horizon 3"


_PRIORITIES = {p.value for p in PriorityLevel}
_STAGES = {s.value for s in OpportunityStage}


# ── Coercion helpers ─────────────────────────────────────────────────────────


def _str(data: dict, key: str, default: str = "") -> str:
    value = data.get(key)
    return value if isinstance(value, str) else default


def _opt_str(data: dict, key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) else None


def _str_tuple(data: dict, key: str) -> tuple[str, ...]:
    value = data.get(key)
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(v for v in value if isinstance(v, str))


def _dicts(value: Any) -> list[dict]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, dict) and isinstance(item.get("id"), str)]


def _priority(value: Any, default: str | None = None) -> str | None:
    return value if value in _PRIORITIES else default


def _job_tag(value: Any) -> str:
    # "Social Emotional" was a single tag before the split
    if value == "Social Emotional":
        return JobTag.SOCIAL.value
    if value in (JobTag.SOCIAL.value, JobTag.EMOTIONAL.value):
        return value
    return JobTag.FUNCTIONAL.value


# ── Hierarchy ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Client:
    id: str
    name: str
    description: str | None = None
    website: str | None = None
    logo_url: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Client:
        return cls(
            id=data["id"],
            name=_str(data, "name"),
            description=_opt_str(data, "description"),
            website=_opt_str(data, "website"),
            logo_url=_opt_str(data, "logoUrl"),
            created_at=_str(data, "createdAt"),
            updated_at=_str(data, "updatedAt"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "website": self.website,
            "logoUrl": self.logo_url,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class Project:
    """A Meta-Journey: groups the journeys of one client."""

    id: str
    client_id: str
    name: str
    description: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Project:
        return cls(
            id=data["id"],
            client_id=_str(data, "clientId"),
            name=_str(data, "name"),
            description=_opt_str(data, "description"),
            created_at=_str(data, "createdAt"),
            updated_at=_str(data, "updatedAt"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "clientId": self.client_id,
            "name": self.name,
            "description": self.description,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class JourneyRow:
    """User-defined row of a journey map. ``label`` is None when never set."""

    id: str
    label: str | None = None

    def to_dict(self) -> dict:
        return {"id": self.id, "label": self.label}


@dataclass(frozen=True)
class Journey:
    id: str
    project_id: str
    name: str
    description: str | None = None
    # None when the journey has never been reordered
    row_order: tuple | None = None
    custom_rows: tuple[JourneyRow, ...] = ()
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Journey:
        raw_order = data.get("rowOrder")
        return cls(
            id=data["id"],
            project_id=_str(data, "projectId"),
            name=_str(data, "name"),
            description=_opt_str(data, "description"),
            row_order=tuple(raw_order) if isinstance(raw_order, (list, tuple)) else None,
            custom_rows=tuple(
                JourneyRow(id=r["id"], label=_opt_str(r, "label"))
                for r in _dicts(data.get("customRows"))
            ),
            created_at=_str(data, "createdAt"),
            updated_at=_str(data, "updatedAt"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "projectId": self.project_id,
            "name": self.name,
            "description": self.description,
            "rowOrder": list(self.row_order) if self.row_order is not None else None,
            "customRows": [r.to_dict() for r in self.custom_rows],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


# Phase text fields as (attribute, wire key). Values are kept as stored so
# CSV cell resolution can coerce lists and other legacy shapes.
PHASE_TEXT_FIELDS = (
    ("struggles", "struggles"),
    ("internal_struggles", "internalStruggles"),
    ("opportunities", "opportunities"),
    ("front_stage_actions", "frontStageActions"),
    ("back_stage_actions", "backStageActions"),
    ("systems", "systems"),
    ("related_processes", "relatedProcesses"),
    ("channels", "channels"),
    ("related_documents", "relatedDocuments"),
)


@dataclass(frozen=True)
class Phase:
    id: str
    journey_id: str
    order: int = 0
    title: str = ""
    description: Any = ""
    struggles: Any = ""
    internal_struggles: Any = ""
    opportunities: Any = ""
    front_stage_actions: Any = ""
    back_stage_actions: Any = ""
    systems: Any = ""
    related_processes: Any = ""
    channels: Any = ""
    related_documents: Any = ""
    image_url: str | None = None
    job_ids: tuple[str, ...] = ()
    custom_row_values: dict[str, str] = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Phase:
        raw_order = data.get("order")
        custom_values = data.get("customRowValues")
        return cls(
            id=data["id"],
            journey_id=_str(data, "journeyId"),
            order=raw_order if isinstance(raw_order, int) and not isinstance(raw_order, bool) else 0,
            title=_str(data, "title"),
            description=data.get("description", ""),
            image_url=_opt_str(data, "imageUrl"),
            job_ids=_str_tuple(data, "jobIds"),
            custom_row_values=(
                {k: v for k, v in custom_values.items() if isinstance(v, str)}
                if isinstance(custom_values, dict)
                else {}
            ),
            created_at=_str(data, "createdAt"),
            updated_at=_str(data, "updatedAt"),
            **{attr: data.get(key, "") for attr, key in PHASE_TEXT_FIELDS},
        )

    def to_dict(self) -> dict:
        result = {
            "id": self.id,
            "journeyId": self.journey_id,
            "order": self.order,
            "title": self.title,
            "description": self.description,
            "imageUrl": self.image_url,
            "jobIds": list(self.job_ids),
            "customRowValues": dict(self.custom_row_values),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        for attr, key in PHASE_TEXT_FIELDS:
            result[key] = getattr(self, attr)
        return result


# ── Auxiliary entities ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class Job:
    """Customer job-to-be-done, assigned to phases through ``Phase.job_ids``."""

    id: str
    client_id: str
    name: str
    tag: str = JobTag.FUNCTIONAL.value
    description: str | None = None
    priority: str | None = None
    struggles: tuple[str, ...] = ()
    functional_dimensions: tuple[str, ...] = ()
    social_dimensions: tuple[str, ...] = ()
    emotional_dimensions: tuple[str, ...] = ()
    solutions_and_workarounds: str | None = None
    is_priority: bool = False
    insight_ids: tuple[str, ...] = ()
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Job:
        return cls(
            id=data["id"],
            client_id=_str(data, "clientId"),
            name=_str(data, "name"),
            tag=_job_tag(data.get("tag")),
            description=_opt_str(data, "description"),
            priority=_priority(data.get("priority")),
            struggles=_str_tuple(data, "struggles"),
            functional_dimensions=_str_tuple(data, "functionalDimensions"),
            social_dimensions=_str_tuple(data, "socialDimensions"),
            emotional_dimensions=_str_tuple(data, "emotionalDimensions"),
            solutions_and_workarounds=_opt_str(data, "solutionsAndWorkarounds"),
            is_priority=bool(data.get("isPriority")),
            insight_ids=_str_tuple(data, "insightIds"),
            created_at=_str(data, "createdAt"),
            updated_at=_str(data, "updatedAt"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "clientId": self.client_id,
            "name": self.name,
            "tag": self.tag,
            "description": self.description,
            "priority": self.priority,
            "struggles": list(self.struggles),
            "functionalDimensions": list(self.functional_dimensions),
            "socialDimensions": list(self.social_dimensions),
            "emotionalDimensions": list(self.emotional_dimensions),
            "solutionsAndWorkarounds": self.solutions_and_workarounds,
            "isPriority": self.is_priority,
            "insightIds": list(self.insight_ids),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class Insight:
    id: str
    client_id: str
    title: str
    description: str | None = None
    priority: str | None = None
    order: int | None = None
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Insight:
        raw_order = data.get("order")
        return cls(
            id=data["id"],
            client_id=_str(data, "clientId"),
            title=_str(data, "title"),
            description=_opt_str(data, "description"),
            priority=_priority(data.get("priority")),
            order=raw_order if isinstance(raw_order, int) and not isinstance(raw_order, bool) else None,
            created_at=_str(data, "createdAt"),
            updated_at=_str(data, "updatedAt"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "clientId": self.client_id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "order": self.order,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class Opportunity:
    id: str
    client_id: str
    project_id: str
    journey_id: str
    phase_id: str
    name: str
    priority: str = PriorityLevel.MEDIUM.value
    stage: str = OpportunityStage.BACKLOG.value
    stage_order: float = 0
    description: str = ""
    point_of_differentiation: str = ""
    critical_assumptions: str = ""
    linked_job_ids: tuple[str, ...] = ()
    is_priority: bool = False
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> Opportunity:
        stage = data.get("stage")
        stage_order = data.get("stageOrder")
        return cls(
            id=data["id"],
            client_id=_str(data, "clientId"),
            project_id=_str(data, "projectId"),
            journey_id=_str(data, "journeyId"),
            phase_id=_str(data, "phaseId"),
            name=_str(data, "name"),
            priority=_priority(data.get("priority"), PriorityLevel.MEDIUM.value),
            stage=stage if stage in _STAGES else OpportunityStage.BACKLOG.value,
            stage_order=(
                stage_order
                if isinstance(stage_order, (int, float)) and not isinstance(stage_order, bool)
                else 0
            ),
            description=_str(data, "description"),
            point_of_differentiation=_str(data, "pointOfDifferentiation"),
            critical_assumptions=_str(data, "criticalAssumptions"),
            linked_job_ids=_str_tuple(data, "linkedJobIds"),
            is_priority=bool(data.get("isPriority")),
            created_at=_str(data, "createdAt"),
            updated_at=_str(data, "updatedAt"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "clientId": self.client_id,
            "projectId": self.project_id,
            "journeyId": self.journey_id,
            "phaseId": self.phase_id,
            "name": self.name,
            "priority": self.priority,
            "stage": self.stage,
            "stageOrder": self.stage_order,
            "description": self.description,
            "pointOfDifferentiation": self.point_of_differentiation,
            "criticalAssumptions": self.critical_assumptions,
            "linkedJobIds": list(self.linked_job_ids),
            "isPriority": self.is_priority,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class CellComment:
    text: str
    replies: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> CellComment:
        return cls(text=_str(data, "text"), replies=_str_tuple(data, "replies"))

    def to_dict(self) -> dict:
        return {"text": self.text, "replies": list(self.replies)}


# ── AppState ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AppState:
    """Whole-application snapshot handed to the core and to the storage port."""

    clients: tuple[Client, ...] = ()
    projects: tuple[Project, ...] = ()
    journeys: tuple[Journey, ...] = ()
    phases: tuple[Phase, ...] = ()
    jobs: tuple[Job, ...] = ()
    insights: tuple[Insight, ...] = ()
    opportunities: tuple[Opportunity, ...] = ()
    cell_comments: dict[str, CellComment] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict | None) -> AppState:
        data = data or {}
        comments = data.get("cellComments")
        return cls(
            clients=tuple(Client.from_dict(d) for d in _dicts(data.get("clients"))),
            projects=tuple(Project.from_dict(d) for d in _dicts(data.get("projects"))),
            journeys=tuple(Journey.from_dict(d) for d in _dicts(data.get("journeys"))),
            phases=tuple(Phase.from_dict(d) for d in _dicts(data.get("phases"))),
            jobs=tuple(Job.from_dict(d) for d in _dicts(data.get("jobs"))),
            insights=tuple(Insight.from_dict(d) for d in _dicts(data.get("insights"))),
            opportunities=tuple(
                Opportunity.from_dict(d) for d in _dicts(data.get("opportunities"))
            ),
            cell_comments=(
                {
                    key: CellComment.from_dict(value)
                    for key, value in comments.items()
                    if isinstance(value, dict)
                }
                if isinstance(comments, dict)
                else {}
            ),
        )

    def to_dict(self) -> dict:
        return {
            "clients": [c.to_dict() for c in self.clients],
            "projects": [p.to_dict() for p in self.projects],
            "journeys": [j.to_dict() for j in self.journeys],
            "phases": [p.to_dict() for p in self.phases],
            "jobs": [j.to_dict() for j in self.jobs],
            "insights": [i.to_dict() for i in self.insights],
            "opportunities": [o.to_dict() for o in self.opportunities],
            "cellComments": {k: v.to_dict() for k, v in self.cell_comments.items()},
        }

    # ── Lookups ──────────────────────────────────────────────────────────

    def get_client(self, client_id: str) -> Client | None:
        return next((c for c in self.clients if c.id == client_id), None)

    def get_project(self, project_id: str) -> Project | None:
        return next((p for p in self.projects if p.id == project_id), None)

    def get_journey(self, journey_id: str) -> Journey | None:
        return next((j for j in self.journeys if j.id == journey_id), None)

    def projects_for_client(self, client_id: str) -> list[Project]:
        return [p for p in self.projects if p.client_id == client_id]

    def journeys_for_project(self, project_id: str) -> list[Journey]:
        return [j for j in self.journeys if j.project_id == project_id]

    def phases_for_journey(self, journey_id: str) -> list[Phase]:
        """Phases of a journey in column order (stable for equal ``order``)."""
        return sorted(
            (p for p in self.phases if p.journey_id == journey_id),
            key=lambda p: p.order,
        )

    def opportunities_for_phase(self, phase_id: str) -> list[Opportunity]:
        return [o for o in self.opportunities if o.phase_id == phase_id]

    def jobs_for_phase(self, phase: Phase) -> list[Job]:
        """Jobs referenced by ``phase.job_ids`` in that order; dangling ids are skipped."""
        by_id = {j.id: j for j in self.jobs}
        return [by_id[jid] for jid in phase.job_ids if jid in by_id]
