# backend/mrchooks/routes/settings.py
"""Key/value settings; values are any JSON document."""

from flask import Blueprint, request

from ..responses import ok, error_response
from ..services import settings_service
from ..validation import ValidationError, NotFoundError


settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("")
def list_settings_route():
    return ok(settings_service.get_all_settings())


@settings_bp.get("/<key>")
def get_setting_route(key: str):
    try:
        return ok(settings_service.get_setting(key).to_dict())
    except NotFoundError as e:
        return error_response(e)


@settings_bp.put("/<key>")
def put_setting_route(key: str):
    # Body: {"value": <any JSON>}
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict) or "value" not in payload:
        return error_response(ValidationError("Missing value"))

    try:
        return ok(settings_service.put_setting(key, payload["value"]))
    except ValidationError as e:
        return error_response(e)
