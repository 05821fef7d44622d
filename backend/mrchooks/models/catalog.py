from __future__ import annotations

from ..extensions import db
from ..ids import new_id
from ..money import from_cents
from mrchooks.time_utils import to_utc_z, utcnow


class Product(db.Model):
    """
    Product master data.

    Prices are stored in integer cents; the API exposes currency units.
    Historical rows (sale items, losses, PO items) copy product_id and name
    without a foreign key, so renaming or deleting a product never rewrites
    history.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_active_name", "is_active", "name"),
    )

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    # Authoritative storage in cents (frontend may only format for display)
    price_cents = db.Column(db.Integer, nullable=False)
    cost_cents = db.Column(db.Integer, nullable=False, default=0)

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    inventory = db.relationship(
        "InventoryRecord",
        back_populates="product",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id!r} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": from_cents(self.price_cents),
            "cost": from_cents(self.cost_cents),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class InventoryRecord(db.Model):
    """
    Current on-hand count for one product.

    stock never goes below zero: sale and loss decrements clamp at 0
    instead of rejecting the write.
    """
    __tablename__ = "inventory"
    __table_args__ = (
        db.CheckConstraint("stock >= 0", name="ck_inventory_stock_non_negative"),
        db.CheckConstraint("beginning >= 0", name="ck_inventory_beginning_non_negative"),
    )

    id = db.Column(db.String(64), primary_key=True, default=new_id)
    product_id = db.Column(
        db.String(64),
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    beginning = db.Column(db.Integer, nullable=False, default=0)
    stock = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    product = db.relationship("Product", back_populates="inventory")

    def __repr__(self) -> str:
        return f"<InventoryRecord product_id={self.product_id!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_name": self.product.name if self.product else None,
            "beginning": self.beginning,
            "stock": self.stock,
            "updated_at": to_utc_z(self.updated_at),
        }
