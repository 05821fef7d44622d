"""
Sales Service - atomic checkout recording

WHY: A sale is the only write that spans several tables. The header, its
line items, its discount row and every stock decrement must commit
together or not at all, so inventory is never decremented without a
durable sale record.

Invariants for every committed sale:
- sum(item.total_cents) == sale.subtotal_cents
- sale.total_cents == max(0, subtotal_cents - discount_total_cents)
- line discounts are proportional to line totals and sum exactly to
  discount_total_cents (whole cents, largest remainder gets the odd cent)
- each touched inventory row is decremented by the sold quantity once
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app
from sqlalchemy import func
from sqlalchemy.orm import selectinload

from ..extensions import db
from ..models import Discount, Product, Sale, SaleLineItem
from ..money import from_cents
from ..schemas import SaleRequest
from ..validation import NotFoundError, ValidationError
from mrchooks.time_utils import DateRange, day_bounds, utcnow
from .inventory_service import decrement_stock, ensure_tracked
from .transactions import atomic


@dataclass(frozen=True)
class SaleResult:
    sale_id: str
    subtotal_cents: int
    discount_total_cents: int
    total_cents: int

    def to_dict(self) -> dict:
        return {
            "sale_id": self.sale_id,
            "subtotal": from_cents(self.subtotal_cents),
            "discount_total": from_cents(self.discount_total_cents),
            "total": from_cents(self.total_cents),
        }


def allocate_discount(discount_cents: int, line_totals: list[int]) -> list[int]:
    """
    Split a discount across lines in proportion to each line's total.

    A zero subtotal allocates nothing. Shares are floored to whole cents and
    the leftover cents go to the lines with the largest remainders (ties to
    the earlier line), so the shares always sum to discount_cents.
    """
    subtotal = sum(line_totals)
    if subtotal == 0 or discount_cents == 0:
        return [0] * len(line_totals)

    shares = [discount_cents * total // subtotal for total in line_totals]
    leftover = discount_cents - sum(shares)
    by_remainder = sorted(
        range(len(line_totals)),
        key=lambda i: (-(discount_cents * line_totals[i] % subtotal), i),
    )
    for i in by_remainder[:leftover]:
        shares[i] += 1
    return shares


def _resolve_product_names(request: SaleRequest) -> list[str]:
    """Fill missing name snapshots from the catalog."""
    missing = {item.product_id for item in request.items if not item.product_name}
    catalog = {}
    if missing:
        catalog = {
            p.id: p.name
            for p in db.session.query(Product).filter(Product.id.in_(missing)).all()
        }

    names = []
    for index, item in enumerate(request.items):
        name = item.product_name or catalog.get(item.product_id)
        if not name:
            raise ValidationError(
                f"items[{index}].product_name is required (product {item.product_id} not in catalog)"
            )
        names.append(name)
    return names


def record_sale(request: SaleRequest) -> SaleResult:
    """
    Persist one sale as a single unit of work.

    Validation happens before the first write, so bad input never leaves
    partial rows. Storage failures roll everything back and surface as
    TransactionError; nothing is retried here.
    """
    names = _resolve_product_names(request)
    ensure_tracked(item.product_id for item in request.items)

    subtotal = request.subtotal_cents
    discount_total = request.discount_total_cents
    total = max(0, subtotal - discount_total)
    sale_date = request.date or utcnow()
    line_totals = [item.line_total_cents for item in request.items]
    line_discounts = allocate_discount(discount_total, line_totals)

    with atomic("record sale"):
        sale = Sale(
            employee_id=request.employee_id,
            payment_method=request.payment_method,
            payment_reference=request.payment_reference,
            date=sale_date,
            subtotal_cents=subtotal,
            discount_total_cents=discount_total,
            total_cents=total,
        )
        db.session.add(sale)
        db.session.flush()

        for position, (item, name, line_discount) in enumerate(zip(request.items, names, line_discounts)):
            db.session.add(SaleLineItem(
                sale_id=sale.id,
                position=position,
                product_id=item.product_id,
                product_name=name,
                quantity=item.quantity,
                price_cents=item.price_cents,
                cost_cents=item.cost_cents,
                discount_cents=line_discount,
                total_cents=item.line_total_cents,
            ))
        db.session.flush()

        for item in request.items:
            decrement_stock(item.product_id, item.quantity)

        if request.discount is not None and request.discount.amount_cents > 0:
            db.session.add(Discount(
                sale_id=sale.id,
                type=request.discount.type,
                id_number=request.discount.id_number,
                amount_cents=request.discount.amount_cents,
                date=sale_date,
                employee_name=request.discount.employee_name,
            ))
            db.session.flush()

        sale_id = sale.id

    current_app.logger.info(
        "Recorded sale %s: %s item(s), subtotal=%s discount=%s total=%s via %s",
        sale_id, len(request.items), subtotal, discount_total, total, request.payment_method,
    )
    return SaleResult(
        sale_id=sale_id,
        subtotal_cents=subtotal,
        discount_total_cents=discount_total,
        total_cents=total,
    )


def get_sale(sale_id: str) -> Sale:
    sale = db.session.get(Sale, sale_id)
    if sale is None:
        raise NotFoundError("Sale not found")
    return sale


def list_sales(*, date_range: DateRange | None = None, payment_method: str | None = None) -> list[Sale]:
    """Sales newest first, with items and discounts eager-loaded for to_dict."""
    query = db.session.query(Sale).options(selectinload(Sale.items), selectinload(Sale.discounts))
    if date_range is not None:
        query = date_range.apply(query, Sale.date)
    if payment_method:
        query = query.filter(func.lower(Sale.payment_method) == payment_method.lower())
    return query.order_by(Sale.date.desc(), Sale.created_at.desc()).all()


def count_discount_usage(id_number: str, day) -> int:
    """How many discounts were granted to one PWD/senior ID on a given day."""
    start, end = day_bounds(day)
    return int(
        db.session.query(func.count(Discount.id))
        .filter(
            Discount.id_number == id_number,
            Discount.date >= start,
            Discount.date < end,
        )
        .scalar() or 0
    )
