# Overview: Flask API routes for losses; each loss also decrements stock.

from flask import Blueprint, request

from ..models import Loss
from ..responses import ok, error_response
from ..services import loss_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_positive_quantity,
    parse_range_args,
    ValidationError,
)


losses_bp = Blueprint("losses", __name__, url_prefix="/api/losses")

LOSS_POLICY = ModelValidationPolicy(
    writable_fields={"product_id", "product_name", "quantity", "reason", "remarks", "cost", "date"},
    required_on_create={"product_id", "product_name", "quantity", "reason", "cost"},
    money_fields={"cost": "cost_cents"},
)


@losses_bp.get("")
def list_losses_route():
    try:
        date_range = parse_range_args(request.args.get("startDate"), request.args.get("endDate"))
    except ValidationError as e:
        return error_response(e)
    return ok(loss_service.list_losses(date_range))


@losses_bp.post("")
def record_loss_route():
    """
    Record a loss and decrement the product's stock (clamped at 0) atomically.

    cost is the total cost of the lost units.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Loss, payload=payload, policy=LOSS_POLICY, partial=False)
        enforce_positive_quantity(patch)
        loss_id = loss_service.record_loss(**patch)
    except ValidationError as e:
        return error_response(e)

    return ok({"id": loss_id}, 201)
