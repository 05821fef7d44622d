# Overview: Key/value settings with JSON-encoded values.

from __future__ import annotations

import json
from typing import Any

from ..extensions import db
from ..models import Setting
from ..validation import NotFoundError, ValidationError
from mrchooks.time_utils import utcnow
from .transactions import commit


def _encode(value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        raise ValidationError("value must be JSON-serializable")


def get_all_settings() -> dict:
    return {row.key: row.decoded_value for row in db.session.query(Setting).order_by(Setting.key).all()}


def get_setting(key: str) -> Setting:
    row = db.session.get(Setting, key)
    if row is None:
        raise NotFoundError("Setting not found")
    return row


def put_setting(key: str, value: Any) -> dict:
    if not key or len(key) > 128:
        raise ValidationError("key must be 1-128 characters")
    if value is None:
        raise ValidationError("Missing value")

    row = db.session.get(Setting, key)
    if row is None:
        row = Setting(key=key)
        db.session.add(row)
    row.value = _encode(value)
    row.updated_at = utcnow()
    commit("save setting")
    return row.to_dict()


def seed_defaults(defaults: dict) -> list[str]:
    """Insert missing default settings; existing values are never overwritten."""
    created = []
    for key, value in defaults.items():
        if db.session.get(Setting, key) is None:
            db.session.add(Setting(key=key, value=_encode(value)))
            created.append(key)
    commit("seed settings")
    return created
