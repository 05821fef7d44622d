# Overview: Flask API routes for the expense, delivery and unsold-product ledgers.

# backend/mrchooks/routes/ledgers.py
from flask import Blueprint, request

from ..models import Expense, Delivery, UnsoldProduct
from ..responses import ok, error_response
from ..services import ledger_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_positive_quantity,
    parse_range_args,
    ValidationError,
    NotFoundError,
)


ledgers_bp = Blueprint("ledgers", __name__, url_prefix="/api")

EXPENSE_POLICY = ModelValidationPolicy(
    writable_fields={"date", "category", "description", "amount", "remarks"},
    required_on_create={"category", "description", "amount"},
    money_fields={"amount": "amount_cents"},
)

DELIVERY_POLICY = ModelValidationPolicy(
    writable_fields={"date", "description", "amount", "driver", "remarks"},
    required_on_create={"description", "amount", "driver"},
    money_fields={"amount": "amount_cents"},
)

UNSOLD_POLICY = ModelValidationPolicy(
    writable_fields={"product_id", "product_name", "quantity", "price", "reason", "date", "recorded_by"},
    required_on_create={"product_id", "product_name", "quantity", "price", "reason"},
    money_fields={"price": "price_cents"},
)


def _date_range():
    return parse_range_args(request.args.get("startDate"), request.args.get("endDate"))


# --- Expenses ---

@ledgers_bp.get("/expenses")
def list_expenses_route():
    try:
        date_range = _date_range()
    except ValidationError as e:
        return error_response(e)
    return ok(ledger_service.list_entries(
        "expense",
        date_range=date_range,
        category=request.args.get("category"),
    ))


@ledgers_bp.post("/expenses")
def create_expense_route():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Expense, payload=payload, policy=EXPENSE_POLICY, partial=False)
    except ValidationError as e:
        return error_response(e)
    return ok(ledger_service.create_entry("expense", patch), 201)


@ledgers_bp.delete("/expenses/<entry_id>")
def delete_expense_route(entry_id: str):
    try:
        ledger_service.delete_entry("expense", entry_id)
    except NotFoundError as e:
        return error_response(e)
    return ok({"id": entry_id, "deleted": True})


# --- Deliveries ---

@ledgers_bp.get("/deliveries")
def list_deliveries_route():
    try:
        date_range = _date_range()
    except ValidationError as e:
        return error_response(e)
    return ok(ledger_service.list_entries(
        "delivery",
        date_range=date_range,
        driver=request.args.get("driver"),
    ))


@ledgers_bp.post("/deliveries")
def create_delivery_route():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=Delivery, payload=payload, policy=DELIVERY_POLICY, partial=False)
    except ValidationError as e:
        return error_response(e)
    return ok(ledger_service.create_entry("delivery", patch), 201)


@ledgers_bp.delete("/deliveries/<entry_id>")
def delete_delivery_route(entry_id: str):
    try:
        ledger_service.delete_entry("delivery", entry_id)
    except NotFoundError as e:
        return error_response(e)
    return ok({"id": entry_id, "deleted": True})


# --- Unsold products (end-of-day log; stock is not touched) ---

@ledgers_bp.get("/unsold")
def list_unsold_route():
    try:
        date_range = _date_range()
    except ValidationError as e:
        return error_response(e)
    return ok(ledger_service.list_entries("unsold", date_range=date_range))


@ledgers_bp.post("/unsold")
def create_unsold_route():
    payload = request.get_json(silent=True) or {}
    try:
        patch = validate_payload(model=UnsoldProduct, payload=payload, policy=UNSOLD_POLICY, partial=False)
        enforce_positive_quantity(patch)
    except ValidationError as e:
        return error_response(e)
    return ok(ledger_service.create_entry("unsold", patch), 201)
