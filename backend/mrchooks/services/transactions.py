# Overview: Unit-of-work helpers; every multi-row write commits or rolls back as one.

from __future__ import annotations

from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db


class StorageError(Exception):
    """500-level failure in the underlying store."""


class TransactionError(StorageError):
    """An atomic unit of work failed and was rolled back; nothing was saved."""


@contextmanager
def atomic(action: str):
    """
    Run the enclosed writes as one unit on the request session.

    Commits on normal exit. Any SQLAlchemy failure rolls the whole unit back
    and surfaces as TransactionError; any other exception (e.g. a
    ValidationError raised mid-way) also rolls back and propagates unchanged.
    No retry is attempted; retry policy belongs to the caller.
    """
    try:
        yield db.session
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Rolled back: %s", action)
        raise TransactionError(f"Failed to {action}; no changes were saved") from exc
    except Exception:
        db.session.rollback()
        raise


def commit(action: str) -> None:
    """Commit pending single-entity changes with the same failure semantics as atomic()."""
    with atomic(action):
        pass
