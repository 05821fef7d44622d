# Overview: Flask API routes for sales; parses input and returns JSON responses.

# backend/mrchooks/routes/sales.py
"""Sales API routes: checkout recording and sale history."""

from flask import Blueprint, request

from ..responses import ok, error_response
from ..schemas import parse_sale_request
from ..services import sales_service
from ..time_utils import utcnow
from ..validation import (
    ValidationError,
    NotFoundError,
    coerce_text,
    parse_day_arg,
    parse_range_args,
)


sales_bp = Blueprint("sales", __name__, url_prefix="/api")


@sales_bp.post("/sales")
def record_sale_route():
    """
    Record a completed sale.

    Body: payment_method, items[], optional payment_reference (required for
    GCash), discount, employee_id, date. Header, items, discount and stock
    decrements commit together; a storage failure returns 500 with nothing
    saved.
    """
    payload = request.get_json(silent=True)

    try:
        sale_request = parse_sale_request(payload)
        result = sales_service.record_sale(sale_request)
    except ValidationError as e:
        return error_response(e)

    return ok(result.to_dict(), 201)


@sales_bp.get("/sales")
def list_sales_route():
    """
    List sales with their items and discounts, newest first.

    Query params: startDate, endDate (ISO dates or datetimes; a date-only
    endDate includes that whole day), paymentMethod.
    """
    try:
        date_range = parse_range_args(request.args.get("startDate"), request.args.get("endDate"))
    except ValidationError as e:
        return error_response(e)

    sales = sales_service.list_sales(
        date_range=date_range,
        payment_method=request.args.get("paymentMethod"),
    )
    return ok([sale.to_dict(include_lines=True) for sale in sales])


@sales_bp.get("/sales/<sale_id>")
def get_sale_route(sale_id: str):
    try:
        sale = sales_service.get_sale(sale_id)
    except NotFoundError as e:
        return error_response(e)
    return ok(sale.to_dict(include_lines=True))


@sales_bp.get("/discounts/usage")
def discount_usage_route():
    """How often a PWD/senior ID was used on a day (defaults to today)."""
    try:
        id_number = coerce_text("idNumber", request.args.get("idNumber"), required=True)
        raw_day = request.args.get("date")
        day = parse_day_arg(raw_day) if raw_day else utcnow().date()
    except ValidationError as e:
        return error_response(e)

    count = sales_service.count_discount_usage(id_number, day)
    return ok({"id_number": id_number, "date": day.isoformat(), "count": count})
