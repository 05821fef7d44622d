from __future__ import annotations

import json

from ..extensions import db
from mrchooks.time_utils import to_utc_z, utcnow


class Setting(db.Model):
    """Key/value store; values are JSON-encoded so clients get back what they stored."""
    __tablename__ = "settings"

    key = db.Column(db.String(128), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def decoded_value(self):
        try:
            return json.loads(self.value)
        except (TypeError, ValueError):
            # Rows written by hand may hold bare strings
            return self.value

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "value": self.decoded_value,
            "updated_at": to_utc_z(self.updated_at),
        }
