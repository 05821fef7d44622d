from __future__ import annotations

from ..extensions import db
from ..ids import new_id
from ..money import from_cents
from mrchooks.time_utils import to_utc_z, utcnow


class Sale(db.Model):
    """
    One completed checkout.

    Immutable once written: subtotal_cents is the sum of its item totals and
    total_cents == max(0, subtotal_cents - discount_total_cents).
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_date", "date"),
        db.Index("ix_sales_method_date", "payment_method", "date"),
    )

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    employee_id = db.Column(db.String(64), nullable=True)

    payment_method = db.Column(db.String(32), nullable=False)
    payment_reference = db.Column(db.String(128), nullable=True)

    date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    subtotal_cents = db.Column(db.Integer, nullable=False)
    discount_total_cents = db.Column(db.Integer, nullable=False, default=0)
    total_cents = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    items = db.relationship(
        "SaleLineItem",
        back_populates="sale",
        order_by="SaleLineItem.position",
        cascade="all, delete-orphan",
    )
    discounts = db.relationship("Discount", back_populates="sale", cascade="all, delete-orphan")

    def to_dict(self, *, include_lines: bool = False) -> dict:
        data = {
            "id": self.id,
            "employee_id": self.employee_id,
            "payment_method": self.payment_method,
            "payment_reference": self.payment_reference,
            "date": to_utc_z(self.date),
            "subtotal": from_cents(self.subtotal_cents),
            "discount_total": from_cents(self.discount_total_cents),
            "total": from_cents(self.total_cents),
            "created_at": to_utc_z(self.created_at),
        }
        if include_lines:
            data["items"] = [item.to_dict() for item in self.items]
            data["discounts"] = [discount.to_dict() for discount in self.discounts]
        return data


class SaleLineItem(db.Model):
    """One product's contribution to a sale; total is pre-discount."""
    __tablename__ = "sale_items"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    sale_id = db.Column(db.String(64), db.ForeignKey("sales.id"), nullable=False, index=True)
    # Order within the basket, as submitted
    position = db.Column(db.Integer, nullable=False, default=0)

    product_id = db.Column(db.String(64), nullable=False, index=True)
    product_name = db.Column(db.String(255), nullable=False)

    quantity = db.Column(db.Integer, nullable=False)
    price_cents = db.Column(db.Integer, nullable=False)
    cost_cents = db.Column(db.Integer, nullable=False, default=0)
    discount_cents = db.Column(db.Integer, nullable=False, default=0)
    total_cents = db.Column(db.Integer, nullable=False)

    sale = db.relationship("Sale", back_populates="items")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "price": from_cents(self.price_cents),
            "cost": from_cents(self.cost_cents),
            "discount": from_cents(self.discount_cents),
            "total": from_cents(self.total_cents),
        }


class Discount(db.Model):
    """
    Fixed-amount reduction applied to a sale.

    At most one per sale (unique sale_id). pwd/senior discounts carry the
    customer's ID number.
    """
    __tablename__ = "discounts"

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    sale_id = db.Column(db.String(64), db.ForeignKey("sales.id"), nullable=False, unique=True)

    type = db.Column(db.String(32), nullable=False)
    id_number = db.Column(db.String(64), nullable=True, index=True)
    amount_cents = db.Column(db.Integer, nullable=False)

    date = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    employee_name = db.Column(db.String(255), nullable=True)

    sale = db.relationship("Sale", back_populates="discounts")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sale_id": self.sale_id,
            "type": self.type,
            "id_number": self.id_number,
            "amount": from_cents(self.amount_cents),
            "date": to_utc_z(self.date),
            "employee_name": self.employee_name,
        }
