# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

# backend/mrchooks/services/inventory_service.py
"""
Inventory invariants (authoritative)

- One InventoryRecord per product; stock is a stored count, not ledger-derived.
- stock never goes below zero. Sale and loss decrements clamp at 0 rather
  than rejecting the write.
- Decrements run as a single UPDATE with the clamp computed in SQL, so two
  concurrent writers serialize on the store's write lock without a
  read-modify-write race.
- Purchase orders never change stock.
- What happens when a product has no inventory row is set by
  MISSING_INVENTORY_POLICY: "skip", "reject" or "create".
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import case, update

from ..extensions import db
from ..models import InventoryRecord, Product
from ..validation import NotFoundError, ValidationError
from mrchooks.time_utils import utcnow
from .transactions import commit

POLICY_SKIP = "skip"
POLICY_REJECT = "reject"
POLICY_CREATE = "create"
MISSING_INVENTORY_POLICIES = {POLICY_SKIP, POLICY_REJECT, POLICY_CREATE}


def missing_inventory_policy() -> str:
    policy = str(current_app.config.get("MISSING_INVENTORY_POLICY", POLICY_SKIP)).lower()
    if policy not in MISSING_INVENTORY_POLICIES:
        raise ValueError(f"MISSING_INVENTORY_POLICY must be one of {sorted(MISSING_INVENTORY_POLICIES)}")
    return policy


def list_inventory() -> list[dict]:
    rows = (
        db.session.query(InventoryRecord)
        .join(Product, Product.id == InventoryRecord.product_id)
        .order_by(Product.name.asc())
        .all()
    )
    return [row.to_dict() for row in rows]


def get_inventory(product_id: str) -> dict:
    row = db.session.query(InventoryRecord).filter_by(product_id=product_id).first()
    if row is None:
        raise NotFoundError("Inventory record not found")
    return row.to_dict()


def set_inventory(*, product_id: str, beginning: int, stock: int) -> tuple[dict, bool]:
    """
    Manual adjustment: set absolute beginning and stock counts, creating the row if needed.

    Returns (record, created).
    """
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")

    row = db.session.query(InventoryRecord).filter_by(product_id=product_id).first()
    created = row is None
    if created:
        row = InventoryRecord(product_id=product_id)
        db.session.add(row)

    row.beginning = beginning
    row.stock = stock
    row.updated_at = utcnow()
    commit("adjust inventory")

    current_app.logger.info(
        "Inventory set for %s: beginning=%s stock=%s", product_id, beginning, stock
    )
    return row.to_dict(), created


def products_missing_inventory(product_ids) -> list[str]:
    wanted = set(product_ids)
    if not wanted:
        return []
    present = {
        pid for (pid,) in db.session.query(InventoryRecord.product_id)
        .filter(InventoryRecord.product_id.in_(wanted))
        .all()
    }
    return sorted(wanted - present)


def ensure_tracked(product_ids) -> None:
    """
    Apply MISSING_INVENTORY_POLICY ahead of a decrement.

    Must run before any write of the enclosing unit so a "reject" leaves
    nothing behind.
    """
    policy = missing_inventory_policy()
    if policy != POLICY_REJECT:
        return
    missing = products_missing_inventory(product_ids)
    if missing:
        raise ValidationError(f"No inventory record for product(s): {', '.join(missing)}")


def decrement_stock(product_id: str, quantity: int) -> bool:
    """
    Subtract quantity from a product's stock, clamped at zero.

    Does not commit; the caller's unit of work owns the transaction.
    Returns True if a row was decremented. When no row exists the
    configured policy decides: "create" adds a zeroed row for a catalog
    product (which stays at 0 after clamping), anything else leaves the
    product untracked.
    """
    remaining = InventoryRecord.stock - quantity
    result = db.session.execute(
        update(InventoryRecord)
        .where(InventoryRecord.product_id == product_id)
        .values(stock=case((remaining < 0, 0), else_=remaining), updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        return True

    # Only catalog products can get a row; ad-hoc items stay untracked
    if missing_inventory_policy() == POLICY_CREATE and db.session.get(Product, product_id) is not None:
        db.session.add(InventoryRecord(product_id=product_id, beginning=0, stock=0))
        db.session.flush()
        current_app.logger.info("Created zeroed inventory record for %s", product_id)
        return True

    current_app.logger.warning(
        "No inventory record for product %s; stock decrement of %s skipped", product_id, quantity
    )
    return False
