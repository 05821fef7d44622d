# Overview: Flask API routes for reporting; read-only aggregates over sales, expenses and inventory.

# backend/mrchooks/routes/reports.py
from flask import Blueprint, request

from ..responses import ok, error_response
from ..services import reporting_service
from ..validation import ValidationError, parse_day_arg, parse_range_args


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/summary")
def summary_report():
    """
    Sales/expense summary.

    Query params: period (today|week|month|year), or startDate and endDate.
    With neither, the summary covers today.
    """
    period = request.args.get("period")
    start = request.args.get("startDate")
    end = request.args.get("endDate")

    try:
        if period and (start or end):
            raise ValidationError("Use either period or startDate/endDate, not both")
        if start or end:
            report = reporting_service.period_summary(date_range=parse_range_args(start, end))
        else:
            report = reporting_service.period_summary(period=period or "today")
    except ValidationError as e:
        return error_response(e)

    return ok(report)


@reports_bp.get("/daily")
def daily_report():
    """Daily reconciliation for ?date=YYYY-MM-DD."""
    try:
        day = parse_day_arg(request.args.get("date"))
    except ValidationError as e:
        return error_response(e)

    return ok(reporting_service.daily_reconciliation(day))
