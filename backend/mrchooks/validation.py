from __future__ import annotations
from datetime import date, datetime
from mrchooks.money import parse_money
from mrchooks.time_utils import DateRange, parse_date_range, parse_iso_date, parse_iso_datetime

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Boolean, Integer, String, Text, DateTime
from sqlalchemy.orm import DeclarativeMeta


# Maximum amount: ₱9,999,999.99 (999,999,999 cents)
# This prevents database overflow issues and nonsensical prices
MAX_AMOUNT_CENTS = 999_999_999

# Per-line quantity cap for sales, losses, purchase orders and stock counts
MAX_QUANTITY = 1_000_000


class ValidationError(ValueError):
    """400-level input problem."""


class NotFoundError(LookupError):
    """404-level missing entity."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate PO number)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - money_fields: wire name (currency units) -> integer cents column
    """
    writable_fields: set[str]
    required_on_create: set[str] = field(default_factory=set)
    money_fields: dict[str, str] = field(default_factory=dict)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def coerce_int(key: str, value: Any) -> int:
    """Strict integer coercion: rejects floats, bools and scientific notation."""
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    # String input - must be plain digits (with optional leading minus)
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
    # Reject floats explicitly, unless they are whole numbers sent by a JS client
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValidationError(f"{key} must be an integer, not a decimal")
    raise ValidationError(f"{key} must be an integer")


def coerce_money(key: str, value: Any) -> int:
    """Currency units in, integer cents out. Negative amounts are rejected."""
    try:
        cents = parse_money(value)
    except ValueError:
        raise ValidationError(f"{key} must be a valid amount")
    if cents < 0:
        raise ValidationError(f"{key} must be >= 0")
    if cents > MAX_AMOUNT_CENTS:
        raise ValidationError(f"{key} cannot exceed ₱{MAX_AMOUNT_CENTS / 100:,.2f}")
    return cents


def coerce_quantity(key: str, value: Any) -> int:
    """Positive integer count, capped at MAX_QUANTITY."""
    if value is None:
        raise ValidationError(f"{key} is required")
    quantity = coerce_int(key, value)
    if quantity <= 0:
        raise ValidationError(f"{key} must be > 0")
    if quantity > MAX_QUANTITY:
        raise ValidationError(f"{key} cannot exceed {MAX_QUANTITY:,}")
    return quantity


def enforce_amount_limit(key: str, cents: int) -> None:
    """Derived totals (quantity x price, sums) must fit the same cap as entered amounts."""
    if cents > MAX_AMOUNT_CENTS:
        raise ValidationError(f"{key} cannot exceed ₱{MAX_AMOUNT_CENTS / 100:,.2f}")


def coerce_datetime(key: str, value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            dt = parse_iso_datetime(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{key} must be an ISO-8601 datetime")
        if dt is None:
            raise ValidationError(f"{key} must be an ISO-8601 datetime")
        return dt
    raise ValidationError(f"{key} must be a datetime")


def coerce_text(key: str, value: Any, *, required: bool = False, max_length: int | None = None) -> str | None:
    if value is None:
        if required:
            raise ValidationError(f"{key} is required")
        return None
    if isinstance(value, (dict, list)):
        raise ValidationError(f"{key} must be a string")
    text = str(value).strip()
    if not text:
        if required:
            raise ValidationError(f"{key} cannot be blank")
        return None
    if max_length and len(text) > max_length:
        raise ValidationError(f"{key} exceeds max length {max_length}")
    return text


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, Integer):
        return coerce_int(col.key, value)

    # Booleans
    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        # fallback: truthiness
        return bool(value)

    # Datetimes (accept ISO-8601 strings; normalize to UTC)
    if isinstance(coltype, DateTime):
        return coerce_datetime(col.key, value)

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    # Default: leave as-is
    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict keyed by column name, with money fields
    converted to their *_cents columns.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if payload.get(f) is None)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if policy.money_fields.get(k, k) not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        column_key = policy.money_fields.get(k, k)
        col = cols[column_key]

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[column_key] = None
            continue

        if k in policy.money_fields:
            patch[column_key] = coerce_money(k, raw)
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[column_key] = val

    return patch


def enforce_positive_quantity(patch: dict, key: str = "quantity") -> None:
    if key in patch:
        if patch[key] is None or patch[key] <= 0:
            raise ValidationError(f"{key} must be > 0")
        if patch[key] > MAX_QUANTITY:
            raise ValidationError(f"{key} cannot exceed {MAX_QUANTITY:,}")


def enforce_rules_inventory(patch: dict) -> None:
    # Manual adjustment sets absolute counts; both must be present and non-negative
    for key in ("beginning", "stock"):
        if patch.get(key) is None:
            raise ValidationError(f"{key} is required")
        if patch[key] < 0:
            raise ValidationError(f"{key} must be >= 0")
        if patch[key] > MAX_QUANTITY:
            raise ValidationError(f"{key} cannot exceed {MAX_QUANTITY:,}")


def parse_range_args(start: str | None, end: str | None) -> DateRange:
    """startDate/endDate query args -> DateRange; a date-only end covers the whole day."""
    try:
        return parse_date_range(start, end)
    except ValueError:
        raise ValidationError("startDate and endDate must be ISO-8601 dates or datetimes")


def parse_day_arg(value: str | None, key: str = "date") -> date:
    if not value:
        raise ValidationError(f"{key} is required")
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{key} must be YYYY-MM-DD")
