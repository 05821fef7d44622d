# Overview: Flask API routes for purchase orders; header and items are written together.

from flask import Blueprint, request

from ..models import PurchaseOrder
from ..responses import ok, error_response
from ..services import purchase_order_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    ValidationError,
    NotFoundError,
    ConflictError,
)


purchase_orders_bp = Blueprint("purchase_orders", __name__, url_prefix="/api/purchase-orders")

PO_POLICY = ModelValidationPolicy(
    writable_fields={"po_number", "supplier", "status", "date", "total"},
    required_on_create={"po_number", "supplier"},
    money_fields={"total": "total_cents"},
)


def _split_items(payload: dict):
    """Pull the items list off the header payload; None means 'not provided'."""
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    header = dict(payload)
    raw_items = header.pop("items", None)
    items = purchase_order_service.parse_items(raw_items) if raw_items is not None else None
    return header, items


@purchase_orders_bp.get("")
def list_purchase_orders_route():
    try:
        return ok(purchase_order_service.list_purchase_orders(request.args.get("status")))
    except ValidationError as e:
        return error_response(e)


@purchase_orders_bp.get("/<po_id>")
def get_purchase_order_route(po_id: str):
    try:
        order = purchase_order_service.get_purchase_order(po_id)
    except NotFoundError as e:
        return error_response(e)
    return ok(order.to_dict(include_items=True))


@purchase_orders_bp.post("")
def create_purchase_order_route():
    """
    Create a purchase order.

    Body: po_number (unique), supplier, optional status, date, total and
    items[{product_id?, product_name, quantity, unit_cost}]. When items are
    given the order total is their sum. Purchase orders never change stock.
    """
    payload = request.get_json(silent=True) or {}

    try:
        header, items = _split_items(payload)
        patch = validate_payload(model=PurchaseOrder, payload=header, policy=PO_POLICY, partial=False)
        created = purchase_order_service.create_purchase_order(patch=patch, items=items)
    except (ValidationError, ConflictError) as e:
        return error_response(e)

    return ok(created, 201)


@purchase_orders_bp.put("/<po_id>")
def update_purchase_order_route(po_id: str):
    payload = request.get_json(silent=True) or {}

    try:
        header, items = _split_items(payload)
        patch = validate_payload(model=PurchaseOrder, payload=header, policy=PO_POLICY, partial=True)
        updated = purchase_order_service.update_purchase_order(po_id=po_id, patch=patch, items=items)
    except (ValidationError, NotFoundError, ConflictError) as e:
        return error_response(e)

    return ok(updated)


@purchase_orders_bp.delete("/<po_id>")
def delete_purchase_order_route(po_id: str):
    try:
        purchase_order_service.delete_purchase_order(po_id)
    except NotFoundError as e:
        return error_response(e)
    return ok({"id": po_id, "deleted": True})
