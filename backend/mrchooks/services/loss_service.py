# Overview: Loss recording; a loss row and its stock decrement commit together.

from __future__ import annotations

from datetime import datetime

from flask import current_app

from ..extensions import db
from ..models import Loss, Product
from ..validation import ValidationError
from mrchooks.time_utils import DateRange, utcnow
from .inventory_service import decrement_stock, ensure_tracked
from .transactions import atomic


def record_loss(
    *,
    product_id: str,
    product_name: str,
    quantity: int,
    reason: str,
    cost_cents: int,
    remarks: str | None = None,
    date: datetime | None = None,
) -> str:
    """
    Persist a loss and decrement stock (clamped at zero) as one unit.

    The product must exist in the catalog. cost_cents is the total cost of
    the lost units.
    """
    if quantity is None or quantity <= 0:
        raise ValidationError("quantity must be > 0")
    if db.session.get(Product, product_id) is None:
        raise ValidationError(f"Unknown product: {product_id}")
    ensure_tracked([product_id])

    with atomic("record loss"):
        loss = Loss(
            product_id=product_id,
            product_name=product_name,
            quantity=quantity,
            reason=reason,
            remarks=remarks,
            cost_cents=cost_cents,
            date=date or utcnow(),
        )
        db.session.add(loss)
        db.session.flush()
        decrement_stock(product_id, quantity)
        loss_id = loss.id

    current_app.logger.info("Recorded loss %s: %s x %s (%s)", loss_id, quantity, product_id, reason)
    return loss_id


def list_losses(date_range: DateRange | None = None) -> list[dict]:
    query = db.session.query(Loss)
    if date_range is not None:
        query = date_range.apply(query, Loss.date)
    return [row.to_dict() for row in query.order_by(Loss.date.desc()).all()]
