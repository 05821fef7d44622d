# Overview: Purchase orders with their items; header and items are always written together.

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import PurchaseOrder, PurchaseOrderItem
from ..validation import (
    ConflictError,
    NotFoundError,
    ValidationError,
    coerce_money,
    coerce_quantity,
    coerce_text,
    enforce_amount_limit,
)
from mrchooks.time_utils import utcnow
from .transactions import TransactionError, atomic

PO_STATUSES = ("Pending", "Ordered", "Received", "Cancelled")


def normalize_status(value: str) -> str:
    for status in PO_STATUSES:
        if status.lower() == value.strip().lower():
            return status
    raise ValidationError(f"status must be one of: {', '.join(PO_STATUSES)}")


def parse_items(raw_items: Any) -> list[dict]:
    """Validate PO items; item totals are always quantity x unit_cost."""
    if not isinstance(raw_items, list):
        raise ValidationError("items must be a list")

    items = []
    for index, raw in enumerate(raw_items):
        where = f"items[{index}]"
        if not isinstance(raw, dict):
            raise ValidationError(f"{where} must be an object")
        quantity = coerce_quantity(f"{where}.quantity", raw.get("quantity"))
        if raw.get("unit_cost") is None:
            raise ValidationError(f"{where}.unit_cost is required")
        unit_cost_cents = coerce_money(f"{where}.unit_cost", raw["unit_cost"])
        enforce_amount_limit(f"{where} total", quantity * unit_cost_cents)
        items.append({
            "product_id": coerce_text(f"{where}.product_id", raw.get("product_id"), max_length=64),
            "product_name": coerce_text(f"{where}.product_name", raw.get("product_name"), required=True, max_length=255),
            "quantity": quantity,
            "unit_cost_cents": unit_cost_cents,
            "total_cents": quantity * unit_cost_cents,
        })
    enforce_amount_limit("order total", sum(item["total_cents"] for item in items))
    return items


def _replace_items(order: PurchaseOrder, items: list[dict]) -> None:
    db.session.query(PurchaseOrderItem).filter_by(po_id=order.id).delete(synchronize_session=False)
    for position, item in enumerate(items):
        db.session.add(PurchaseOrderItem(po_id=order.id, position=position, **item))
    order.total_cents = sum(item["total_cents"] for item in items)


def _ensure_unique_number(po_number: str, exclude_id: str | None = None) -> None:
    query = db.session.query(PurchaseOrder.id).filter(PurchaseOrder.po_number == po_number)
    if exclude_id is not None:
        query = query.filter(PurchaseOrder.id != exclude_id)
    if query.first() is not None:
        raise ConflictError(f"PO number already exists: {po_number}")


def list_purchase_orders(status: str | None = None) -> list[dict]:
    query = db.session.query(PurchaseOrder)
    if status:
        query = query.filter(PurchaseOrder.status == normalize_status(status))
    return [po.to_dict() for po in query.order_by(PurchaseOrder.date.desc()).all()]


def get_purchase_order(po_id: str) -> PurchaseOrder:
    order = db.session.get(PurchaseOrder, po_id)
    if order is None:
        raise NotFoundError("Purchase order not found")
    return order


def create_purchase_order(*, patch: dict, items: list[dict] | None = None) -> dict:
    """
    Create a PO and its items atomically.

    With items, the order total is the sum of item totals; without, the
    client-supplied total (default 0) is kept.
    """
    _ensure_unique_number(patch["po_number"])
    if patch.get("status"):
        patch["status"] = normalize_status(patch["status"])

    try:
        with atomic("create purchase order"):
            order = PurchaseOrder(**patch)
            if order.date is None:
                order.date = utcnow()
            db.session.add(order)
            db.session.flush()
            if items:
                _replace_items(order, items)
    except TransactionError as exc:
        # Lost a race on po_number between the check and the insert
        if isinstance(exc.__cause__, IntegrityError):
            raise ConflictError(f"PO number already exists: {patch['po_number']}") from exc
        raise

    return get_purchase_order(order.id).to_dict(include_items=True)


def update_purchase_order(*, po_id: str, patch: dict, items: list[dict] | None = None) -> dict:
    """Partial header update; an items list replaces all existing items."""
    order = get_purchase_order(po_id)
    if patch.get("po_number"):
        _ensure_unique_number(patch["po_number"], exclude_id=po_id)
    if patch.get("status"):
        patch["status"] = normalize_status(patch["status"])

    try:
        with atomic("update purchase order"):
            for key, value in patch.items():
                setattr(order, key, value)
            if items is not None:
                _replace_items(order, items)
    except TransactionError as exc:
        if isinstance(exc.__cause__, IntegrityError) and patch.get("po_number"):
            raise ConflictError(f"PO number already exists: {patch['po_number']}") from exc
        raise

    return get_purchase_order(po_id).to_dict(include_items=True)


def delete_purchase_order(po_id: str) -> None:
    order = get_purchase_order(po_id)
    with atomic("delete purchase order"):
        db.session.delete(order)
