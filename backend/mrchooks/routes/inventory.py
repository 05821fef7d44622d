# backend/mrchooks/routes/inventory.py
"""
Inventory routes.

Stock is a stored count per product. Manual adjustments set absolute
values; sales and losses decrement it through their own endpoints.
"""
from flask import Blueprint, request

from ..models import InventoryRecord
from ..responses import ok, error_response
from ..services import inventory_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_inventory,
    ValidationError,
    NotFoundError,
)


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")

INVENTORY_ADJUST_POLICY = ModelValidationPolicy(
    writable_fields={"beginning", "stock"},
    required_on_create={"beginning", "stock"},
)


@inventory_bp.get("")
def list_inventory_route():
    return ok(inventory_service.list_inventory())


@inventory_bp.get("/<product_id>")
def get_inventory_route(product_id: str):
    try:
        return ok(inventory_service.get_inventory(product_id))
    except NotFoundError as e:
        return error_response(e)


@inventory_bp.put("/<product_id>")
def set_inventory_route(product_id: str):
    """
    Manual stock adjustment: body {beginning, stock}, both non-negative integers.

    Creates the inventory row if the product has none yet.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(
            model=InventoryRecord,
            payload=payload,
            policy=INVENTORY_ADJUST_POLICY,
            partial=False,
        )
        enforce_rules_inventory(patch)
        record, created = inventory_service.set_inventory(
            product_id=product_id,
            beginning=patch["beginning"],
            stock=patch["stock"],
        )
    except (ValidationError, NotFoundError) as e:
        return error_response(e)

    return ok(record, 201 if created else 200)
