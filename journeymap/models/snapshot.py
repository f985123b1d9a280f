"""
Journey Map Platform
Snapshot storage model.

    - StoredSnapshot: one serialized AppState document per storage key
"""

from datetime import datetime, timezone

from journeymap.models import db


class StoredSnapshot(db.Model):
    """Whole-application snapshot persisted as a JSON document."""

    __tablename__ = "snapshots"

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(100), nullable=False, unique=True, index=True)
    payload = db.Column(db.Text, nullable=False, default="{}")
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self):
        return f"<StoredSnapshot {self.key}>"
