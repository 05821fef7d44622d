# Overview: Service-layer operations for reporting; read-only aggregation recomputed on every call.

from __future__ import annotations

from datetime import date, datetime, timedelta

from sqlalchemy import func

from mrchooks.extensions import db
from mrchooks.models import (
    Delivery,
    Discount,
    Expense,
    InventoryRecord,
    Loss,
    Product,
    Sale,
    SaleLineItem,
)
from mrchooks.money import from_cents
from mrchooks.time_utils import DateRange, months_ago, to_utc_z, utcnow
from mrchooks.validation import ValidationError

PERIODS = ("today", "week", "month", "year")


def resolve_period(period: str, now: datetime | None = None) -> DateRange:
    """
    Rolling window ending now.

    today: since midnight; week: since midnight seven days ago;
    month/year: since the same calendar day one month/year ago.
    """
    now = now or utcnow()
    today = now.date()
    if period == "today":
        start = today
    elif period == "week":
        start = today - timedelta(days=7)
    elif period == "month":
        start = months_ago(today, 1)
    elif period == "year":
        start = months_ago(today, 12)
    else:
        raise ValidationError(f"period must be one of: {', '.join(PERIODS)}")
    return DateRange(start=datetime.combine(start, datetime.min.time()), end=now)


def _sales_totals(date_range: DateRange) -> dict:
    line_query = db.session.query(
        func.count(func.distinct(Sale.id)).label("sales_count"),
        func.coalesce(func.sum(SaleLineItem.quantity), 0).label("items_sold"),
        func.coalesce(func.sum(SaleLineItem.total_cents), 0).label("gross_cents"),
    ).select_from(Sale).join(SaleLineItem, SaleLineItem.sale_id == Sale.id)
    row = date_range.apply(line_query, Sale.date).one()

    discount_query = db.session.query(
        func.coalesce(func.sum(Discount.amount_cents), 0)
    ).select_from(Discount).join(Sale, Sale.id == Discount.sale_id)
    discounts = date_range.apply(discount_query, Sale.date).scalar()

    return {
        "sales_count": int(row.sales_count or 0),
        "items_sold": int(row.items_sold or 0),
        "gross_cents": int(row.gross_cents or 0),
        "discounts_cents": int(discounts or 0),
    }


def _sum_amount(model, column, date_range: DateRange) -> int:
    query = db.session.query(func.coalesce(func.sum(column), 0))
    return int(date_range.apply(query, model.date).scalar() or 0)


def _summary(date_range: DateRange) -> tuple[dict, int]:
    """Returns the summary and its net profit in cents."""
    totals = _sales_totals(date_range)
    expenses = _sum_amount(Expense, Expense.amount_cents, date_range)

    gross = totals["gross_cents"]
    net_sales = gross - totals["discounts_cents"]
    net_profit = net_sales - expenses
    summary = {
        "start": to_utc_z(date_range.start),
        "end": to_utc_z(date_range.end),
        "sales_count": totals["sales_count"],
        "items_sold": totals["items_sold"],
        "gross_sales": from_cents(gross),
        "total_discounts": from_cents(totals["discounts_cents"]),
        "net_sales": from_cents(net_sales),
        "total_expenses": from_cents(expenses),
        "net_profit": from_cents(net_profit),
    }
    return summary, net_profit


def period_summary(*, period: str | None = None, date_range: DateRange | None = None) -> dict:
    """
    gross_sales = sum(quantity * price); net_sales = gross - discounts;
    net_profit = net_sales - expenses. Deliveries and losses are left out here.
    """
    if date_range is None:
        date_range = resolve_period(period or "today")
    summary, _ = _summary(date_range)
    summary["period"] = period
    return summary


def _inventory_values() -> tuple[int, int]:
    row = db.session.query(
        func.coalesce(func.sum(InventoryRecord.beginning * Product.cost_cents), 0),
        func.coalesce(func.sum(InventoryRecord.stock * Product.cost_cents), 0),
    ).select_from(InventoryRecord).join(Product, Product.id == InventoryRecord.product_id).one()
    return int(row[0] or 0), int(row[1] or 0)


def _expenses_by_category(date_range: DateRange) -> list[dict]:
    query = db.session.query(
        Expense.category,
        func.coalesce(func.sum(Expense.amount_cents), 0).label("amount"),
        func.count(Expense.id).label("count"),
    )
    rows = date_range.apply(query, Expense.date).group_by(Expense.category).order_by(Expense.category).all()
    return [
        {"category": r.category, "amount": from_cents(int(r.amount)), "count": int(r.count)}
        for r in rows
    ]


def _payments_by_method(date_range: DateRange) -> list[dict]:
    query = db.session.query(Sale.payment_method, Sale.total_cents, Sale.employee_id)
    breakdown: dict[str, dict] = {}
    for method, total, employee in date_range.apply(query, Sale.date).all():
        entry = breakdown.setdefault(method, {"amount_cents": 0, "count": 0, "employees": set()})
        entry["amount_cents"] += total
        entry["count"] += 1
        if employee:
            entry["employees"].add(employee)
    return [
        {
            "payment_method": method,
            "amount": from_cents(entry["amount_cents"]),
            "count": entry["count"],
            "employees": sorted(entry["employees"]),
        }
        for method, entry in sorted(breakdown.items())
    ]


def daily_reconciliation(day: date) -> dict:
    """
    End-of-day reconciliation for one calendar day.

    Inventory values are at current cost: beginning x cost and stock x cost.
    adjusted_net_profit additionally subtracts deliveries and losses.
    """
    date_range = DateRange.for_day(day)
    summary, net_profit = _summary(date_range)

    deliveries = _sum_amount(Delivery, Delivery.amount_cents, date_range)
    losses = _sum_amount(Loss, Loss.cost_cents, date_range)
    beginning_value, ending_value = _inventory_values()

    summary.update({
        "date": day.isoformat(),
        "beginning_inventory_value": from_cents(beginning_value),
        "ending_inventory_value": from_cents(ending_value),
        "total_deliveries": from_cents(deliveries),
        "total_losses": from_cents(losses),
        "adjusted_net_profit": from_cents(net_profit - deliveries - losses),
        "expenses_by_category": _expenses_by_category(date_range),
        "payments_by_method": _payments_by_method(date_range),
    })
    return summary
