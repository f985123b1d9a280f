"""
Snapshot storage port.

The core only ever sees an ``AppState``; where it comes from is decided
here. Each adapter loads and saves the whole snapshot at once:

    MemorySnapshotStore     — in-process dict (tests, demos)
    JsonFileSnapshotStore   — one JSON document on disk
    SqlSnapshotStore        — ``snapshots`` table, one row per key

``build_snapshot_store(app)`` picks the adapter from ``STORAGE_BACKEND``.
Adapter failures surface as ``StorageError``; a store that has never been
saved to loads as an empty state.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError

from journeymap.core.exceptions import StorageError
from journeymap.models import db
from journeymap.models.entities import AppState
from journeymap.models.snapshot import StoredSnapshot

logger = logging.getLogger(__name__)


class SnapshotStore(ABC):
    """Load/save port for the whole application snapshot."""

    @abstractmethod
    def load(self) -> AppState:
        """Return the stored snapshot (empty state when nothing is stored)."""
        ...

    @abstractmethod
    def save(self, state: AppState) -> None:
        """Replace the stored snapshot."""
        ...


class MemorySnapshotStore(SnapshotStore):
    def __init__(self, initial: dict | None = None):
        self._data = dict(initial) if initial else None

    def load(self) -> AppState:
        return AppState.from_dict(self._data)

    def save(self, state: AppState) -> None:
        self._data = state.to_dict()

    def clear(self) -> None:
        self._data = None


class JsonFileSnapshotStore(SnapshotStore):
    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> AppState:
        if not self.path.exists():
            return AppState()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StorageError(f"Cannot read snapshot file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Snapshot file {self.path} does not hold a JSON object")
        return AppState.from_dict(data)

    def save(self, state: AppState) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(json.dumps(state.to_dict(), ensure_ascii=False), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as exc:
            raise StorageError(f"Cannot write snapshot file {self.path}: {exc}") from exc
        logger.info("Saved snapshot to %s", self.path)


class SqlSnapshotStore(SnapshotStore):
    """Snapshot row keyed by ``key``; requires an active app context."""

    def __init__(self, key: str):
        self.key = key

    def load(self) -> AppState:
        try:
            row = StoredSnapshot.query.filter_by(key=self.key).first()
        except SQLAlchemyError as exc:
            raise StorageError(f"Cannot load snapshot {self.key!r}") from exc
        if row is None:
            return AppState()
        try:
            data = json.loads(row.payload)
        except ValueError as exc:
            raise StorageError(f"Snapshot {self.key!r} holds invalid JSON") from exc
        return AppState.from_dict(data if isinstance(data, dict) else None)

    def save(self, state: AppState) -> None:
        payload = json.dumps(state.to_dict(), ensure_ascii=False)
        try:
            row = StoredSnapshot.query.filter_by(key=self.key).first()
            if row is None:
                row = StoredSnapshot(key=self.key, payload=payload)
                db.session.add(row)
            else:
                row.payload = payload
            db.session.commit()
        except SQLAlchemyError as exc:
            db.session.rollback()
            raise StorageError(f"Cannot save snapshot {self.key!r}") from exc
        logger.info("Saved snapshot %s (%d bytes)", self.key, len(payload))


def build_snapshot_store(app) -> SnapshotStore:
    """Create the adapter named by ``STORAGE_BACKEND`` (sql | json | memory)."""
    backend = app.config.get("STORAGE_BACKEND", "sql")
    if backend == "memory":
        return MemorySnapshotStore()
    if backend == "json":
        return JsonFileSnapshotStore(app.config["SNAPSHOT_PATH"])
    if backend == "sql":
        return SqlSnapshotStore(app.config.get("SNAPSHOT_KEY", "journeymap-state"))
    raise RuntimeError(f"Unknown STORAGE_BACKEND {backend!r} (expected sql, json or memory)")


def get_snapshot_store(app) -> SnapshotStore:
    return app.extensions["snapshot_store"]
