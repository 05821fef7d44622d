from __future__ import annotations

from ..extensions import db
from ..ids import new_id
from ..money import from_cents
from mrchooks.time_utils import to_utc_z, utcnow


class Expense(db.Model):
    __tablename__ = "expenses"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    category = db.Column(db.String(64), nullable=False, index=True)
    description = db.Column(db.String(255), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    remarks = db.Column(db.Text, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_utc_z(self.date),
            "category": self.category,
            "description": self.description,
            "amount": from_cents(self.amount_cents),
            "remarks": self.remarks,
        }


class Delivery(db.Model):
    __tablename__ = "deliveries"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    description = db.Column(db.String(255), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    driver = db.Column(db.String(128), nullable=False)
    remarks = db.Column(db.Text, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_utc_z(self.date),
            "description": self.description,
            "amount": from_cents(self.amount_cents),
            "driver": self.driver,
            "remarks": self.remarks,
        }


class Loss(db.Model):
    """
    Spoiled, damaged or otherwise lost stock.

    cost_cents is the total cost of the lost units, not a unit cost.
    """
    __tablename__ = "losses"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    product_id = db.Column(db.String(64), nullable=False, index=True)
    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(128), nullable=False)
    remarks = db.Column(db.Text, nullable=True)
    cost_cents = db.Column(db.Integer, nullable=False)
    date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "reason": self.reason,
            "remarks": self.remarks,
            "cost": from_cents(self.cost_cents),
            "date": to_utc_z(self.date),
        }


class UnsoldProduct(db.Model):
    """End-of-day leftovers; informational only, stock is not touched."""
    __tablename__ = "unsold_products"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    product_id = db.Column(db.String(64), nullable=False, index=True)
    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    price_cents = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(128), nullable=False)
    date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    recorded_by = db.Column(db.String(128), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "price": from_cents(self.price_cents),
            "reason": self.reason,
            "date": to_utc_z(self.date),
            "recorded_by": self.recorded_by,
        }


class PurchaseOrder(db.Model):
    """
    Order placed with a supplier.

    Receiving a purchase order does not change stock; counts are adjusted
    manually through the inventory endpoint.
    """
    __tablename__ = "purchase_orders"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    po_number = db.Column(db.String(64), nullable=False, unique=True)
    supplier = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(16), nullable=False, default="Pending", index=True)
    date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    total_cents = db.Column(db.Integer, nullable=False, default=0)

    items = db.relationship(
        "PurchaseOrderItem",
        back_populates="purchase_order",
        order_by="PurchaseOrderItem.position",
        cascade="all, delete-orphan",
    )

    def to_dict(self, *, include_items: bool = False) -> dict:
        data = {
            "id": self.id,
            "po_number": self.po_number,
            "supplier": self.supplier,
            "status": self.status,
            "date": to_utc_z(self.date),
            "total": from_cents(self.total_cents),
        }
        if include_items:
            data["items"] = [item.to_dict() for item in self.items]
        return data


class PurchaseOrderItem(db.Model):
    __tablename__ = "purchase_order_items"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    po_id = db.Column(db.String(64), db.ForeignKey("purchase_orders.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False, default=0)
    product_id = db.Column(db.String(64), nullable=True)
    product_name = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    unit_cost_cents = db.Column(db.Integer, nullable=False)
    total_cents = db.Column(db.Integer, nullable=False)

    purchase_order = db.relationship("PurchaseOrder", back_populates="items")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "po_id": self.po_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_cost": from_cents(self.unit_cost_cents),
            "total": from_cents(self.total_cents),
        }
