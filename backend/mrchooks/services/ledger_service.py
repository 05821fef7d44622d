# Overview: Append-mostly ledgers (expenses, deliveries, unsold products).

from __future__ import annotations

from ..extensions import db
from ..models import Delivery, Expense, UnsoldProduct
from ..validation import NotFoundError
from mrchooks.time_utils import DateRange, utcnow
from .transactions import commit

LEDGER_MODELS = {
    "expense": Expense,
    "delivery": Delivery,
    "unsold": UnsoldProduct,
}


def _model(kind: str):
    try:
        return LEDGER_MODELS[kind]
    except KeyError:
        raise ValueError(f"unknown ledger: {kind}")


def list_entries(kind: str, *, date_range: DateRange | None = None, **filters) -> list[dict]:
    model = _model(kind)
    query = db.session.query(model)
    if date_range is not None:
        query = date_range.apply(query, model.date)
    for column, value in filters.items():
        if value is not None:
            query = query.filter(getattr(model, column) == value)
    return [row.to_dict() for row in query.order_by(model.date.desc()).all()]


def create_entry(kind: str, patch: dict) -> dict:
    model = _model(kind)
    row = model(**patch)
    if row.date is None:
        row.date = utcnow()
    db.session.add(row)
    commit(f"record {kind}")
    return row.to_dict()


def delete_entry(kind: str, entry_id: str) -> None:
    model = _model(kind)
    row = db.session.get(model, entry_id)
    if row is None:
        raise NotFoundError(f"{kind.capitalize()} not found")
    db.session.delete(row)
    commit(f"delete {kind}")
