"""
Boundary parsing: money, integers, payload policies and date ranges.
"""

from datetime import datetime

import pytest

from mrchooks.models import Expense
from mrchooks.money import parse_money, from_cents
from mrchooks.time_utils import parse_date_range
from mrchooks.validation import (
    ModelValidationPolicy,
    ValidationError,
    MAX_QUANTITY,
    coerce_int,
    coerce_money,
    coerce_quantity,
    enforce_amount_limit,
    validate_payload,
)


@pytest.mark.parametrize(
    "value,cents",
    [
        (50, 5000),
        (49.99, 4999),
        ("49.99", 4999),
        ("₱1,250.00", 125000),
        (0.005, 1),
        ("0.004", 0),
        (-3.5, -350),
    ],
)
def test_parse_money(value, cents):
    assert parse_money(value) == cents


@pytest.mark.parametrize("value", [None, True, "", "abc", "NaN", "inf", [], {}, 1e30, "1e30", "9" * 40])
def test_parse_money_rejects(value):
    with pytest.raises(ValueError):
        parse_money(value)


def test_from_cents():
    assert from_cents(12345) == 123.45
    assert from_cents(None) is None


@pytest.mark.parametrize("value,expected", [(3, 3), ("7", 7), (" 12 ", 12), (4.0, 4), ("-2", -2)])
def test_coerce_int(value, expected):
    assert coerce_int("qty", value) == expected


@pytest.mark.parametrize("value", [1.5, "1.5", "1e3", "", "ten", True, None])
def test_coerce_int_rejects(value):
    with pytest.raises(ValidationError):
        coerce_int("qty", value)


@pytest.mark.parametrize("value", [1e30, "1e30", 10**12, "10000000.00"])
def test_coerce_money_rejects_out_of_range(value):
    with pytest.raises(ValidationError):
        coerce_money("price", value)


def test_coerce_quantity_bounds():
    assert coerce_quantity("qty", MAX_QUANTITY) == MAX_QUANTITY
    for value in (0, -1, MAX_QUANTITY + 1, 10**12, None):
        with pytest.raises(ValidationError):
            coerce_quantity("qty", value)


def test_enforce_amount_limit():
    enforce_amount_limit("total", 999_999_999)
    with pytest.raises(ValidationError):
        enforce_amount_limit("total", 1_000_000_000)


EXPENSE_POLICY = ModelValidationPolicy(
    writable_fields={"category", "description", "amount", "remarks", "date"},
    required_on_create={"category", "description", "amount"},
    money_fields={"amount": "amount_cents"},
)


class TestValidatePayload:

    def test_money_mapped_to_cents_column(self, app):
        patch = validate_payload(
            model=Expense,
            payload={"category": " Supplies ", "description": "Bags", "amount": "12.50"},
            policy=EXPENSE_POLICY,
            partial=False,
        )
        assert patch == {"category": "Supplies", "description": "Bags", "amount_cents": 1250}

    def test_partial_skips_required(self, app):
        patch = validate_payload(model=Expense, payload={"remarks": "late"}, policy=EXPENSE_POLICY, partial=True)
        assert patch == {"remarks": "late"}

    @pytest.mark.parametrize(
        "payload,message",
        [
            ({"category": "x", "description": "y"}, "Missing required fields: amount"),
            ({"category": "x", "description": "y", "amount": 1, "id": "z"}, "Field not allowed: id"),
            ({"category": "x", "description": "y", "amount": 1, "amount_cents": 5}, "Field not allowed: amount_cents"),
            ({"category": "x", "description": None, "amount": 1}, "Missing required fields: description"),
            ({"category": "x" * 65, "description": "y", "amount": 1}, "category exceeds max length 64"),
            ({"category": "x", "description": "y", "amount": 10_000_000}, "amount cannot exceed ₱9,999,999.99"),
        ],
    )
    def test_rejections(self, app, payload, message):
        with pytest.raises(ValidationError) as excinfo:
            validate_payload(model=Expense, payload=payload, policy=EXPENSE_POLICY, partial=False)
        assert str(excinfo.value) == message

    def test_non_dict_payload(self, app):
        with pytest.raises(ValidationError):
            validate_payload(model=Expense, payload=[1, 2], policy=EXPENSE_POLICY, partial=True)


class TestDateRange:

    def test_date_only_end_is_exclusive_next_midnight(self):
        window = parse_date_range("2026-03-01", "2026-03-01")
        assert window.start == datetime(2026, 3, 1)
        assert window.end == datetime(2026, 3, 2)
        assert window.end_exclusive is True

    def test_timestamp_end_is_inclusive(self):
        window = parse_date_range(None, "2026-03-01T12:00:00+08:00")
        assert window.start is None
        assert window.end == datetime(2026, 3, 1, 4, 0, 0)
        assert window.end_exclusive is False

    def test_malformed(self):
        with pytest.raises(ValueError):
            parse_date_range("03/01/2026", None)
