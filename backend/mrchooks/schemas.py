# Overview: Typed request schemas for checkout; raw JSON is parsed here before any service sees it.

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from flask import current_app

from .money import parse_money
from .validation import (
    ValidationError,
    coerce_datetime,
    coerce_money,
    coerce_quantity,
    coerce_text,
    enforce_amount_limit,
)


SALE_FIELDS = {
    "employee_id",
    "payment_method",
    "payment_reference",
    "gcash_reference",
    "items",
    "discount",
    "date",
}
ITEM_FIELDS = {"product_id", "product_name", "quantity", "price", "cost"}
DISCOUNT_FIELDS = {"type", "id_number", "amount", "employee_name"}


@dataclass(frozen=True)
class SaleItemInput:
    product_id: str
    product_name: str | None
    quantity: int
    price_cents: int
    cost_cents: int = 0

    @property
    def line_total_cents(self) -> int:
        return self.quantity * self.price_cents


@dataclass(frozen=True)
class DiscountInput:
    type: str
    amount_cents: int
    id_number: str | None = None
    employee_name: str | None = None


@dataclass(frozen=True)
class SaleRequest:
    payment_method: str
    items: tuple[SaleItemInput, ...]
    payment_reference: str | None = None
    discount: DiscountInput | None = None
    date: datetime | None = None
    employee_id: str | None = None

    @property
    def subtotal_cents(self) -> int:
        return sum(item.line_total_cents for item in self.items)

    @property
    def discount_total_cents(self) -> int:
        return self.discount.amount_cents if self.discount else 0


def _reject_unknown(payload: dict, allowed: set[str], where: str) -> None:
    unknown = sorted(k for k in payload if k not in allowed)
    if unknown:
        raise ValidationError(f"Field not allowed in {where}: {', '.join(unknown)}")


def _config_amount(key: str) -> int:
    return parse_money(current_app.config[key])


def _canonical(value: str, choices, label: str) -> str:
    """Case-insensitive match against configured choices; returns the configured spelling."""
    for choice in choices:
        if choice.lower() == value.lower():
            return choice
    raise ValidationError(f"{label} must be one of: {', '.join(choices)}")


def _parse_item(raw: Any, index: int) -> SaleItemInput:
    where = f"items[{index}]"
    if not isinstance(raw, dict):
        raise ValidationError(f"{where} must be an object")
    _reject_unknown(raw, ITEM_FIELDS, where)

    quantity = coerce_quantity(f"{where}.quantity", raw.get("quantity"))

    if raw.get("price") is None:
        raise ValidationError(f"{where}.price is required")
    price_cents = coerce_money(f"{where}.price", raw["price"])
    enforce_amount_limit(f"{where} total", quantity * price_cents)

    return SaleItemInput(
        product_id=coerce_text(f"{where}.product_id", raw.get("product_id"), required=True, max_length=64),
        product_name=coerce_text(f"{where}.product_name", raw.get("product_name"), max_length=255),
        quantity=quantity,
        price_cents=price_cents,
        cost_cents=coerce_money(f"{where}.cost", raw["cost"]) if raw.get("cost") is not None else 0,
    )


def _parse_discount(raw: Any, subtotal_cents: int) -> DiscountInput | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ValidationError("discount must be an object")
    _reject_unknown(raw, DISCOUNT_FIELDS, "discount")

    config = current_app.config
    discount_type = coerce_text("discount.type", raw.get("type"), required=True)
    discount_type = _canonical(discount_type, config["DISCOUNT_TYPES"], "discount.type")

    id_number = coerce_text("discount.id_number", raw.get("id_number"), max_length=64)
    if discount_type in config["DISCOUNT_ID_REQUIRED_TYPES"] and not id_number:
        raise ValidationError(f"discount.id_number is required for {discount_type} discounts")

    if raw.get("amount") is None:
        amount_cents = _config_amount("DISCOUNT_AMOUNT")
    else:
        amount_cents = coerce_money("discount.amount", raw["amount"])

    max_cents = _config_amount("MAX_DISCOUNT")
    if amount_cents > max_cents:
        raise ValidationError(f"discount.amount cannot exceed {max_cents / 100:.2f}")
    if amount_cents > subtotal_cents:
        raise ValidationError("discount.amount cannot exceed the sale subtotal")

    return DiscountInput(
        type=discount_type,
        amount_cents=amount_cents,
        id_number=id_number,
        employee_name=coerce_text("discount.employee_name", raw.get("employee_name"), max_length=255),
    )


def parse_sale_request(payload: Any) -> SaleRequest:
    """
    Validate a checkout payload completely before anything is written.

    Raises ValidationError on the first problem found.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    _reject_unknown(payload, SALE_FIELDS, "sale")

    config = current_app.config
    method = coerce_text("payment_method", payload.get("payment_method"), required=True)
    method = _canonical(method, config["PAYMENT_METHODS"], "payment_method")

    # gcash_reference is the field name older kiosk builds send
    reference = coerce_text(
        "payment_reference",
        payload.get("payment_reference") or payload.get("gcash_reference"),
        max_length=128,
    )
    if method in config["REFERENCE_REQUIRED_METHODS"] and not reference:
        raise ValidationError(f"payment_reference is required for {method} payments")

    raw_items = payload.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("items must be a non-empty list")
    items = tuple(_parse_item(raw, i) for i, raw in enumerate(raw_items))
    subtotal_cents = sum(item.line_total_cents for item in items)
    enforce_amount_limit("sale subtotal", subtotal_cents)

    date_raw = payload.get("date")
    return SaleRequest(
        payment_method=method,
        items=items,
        payment_reference=reference,
        discount=_parse_discount(payload.get("discount"), subtotal_cents),
        date=coerce_datetime("date", date_raw) if date_raw else None,
        employee_id=coerce_text("employee_id", payload.get("employee_id"), max_length=64),
    )
