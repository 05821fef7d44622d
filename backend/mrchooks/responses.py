# Overview: JSON envelope helpers and app-wide error handlers.
"""
Every response uses the same envelope:

    {"ok": true, "data": ...}
    {"ok": false, "message": "..."}
"""

from flask import jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from .extensions import db
from .services.transactions import StorageError
from .validation import ValidationError, NotFoundError, ConflictError


def ok(data=None, status: int = 200):
    return jsonify({"ok": True, "data": data}), status


def fail(message: str, status: int = 400):
    return jsonify({"ok": False, "message": message}), status


def error_response(exc: Exception):
    """Map a domain error to its envelope and status code."""
    if isinstance(exc, NotFoundError):
        return fail(str(exc) or "Not found", 404)
    if isinstance(exc, ConflictError):
        return fail(str(exc), 409)
    if isinstance(exc, ValidationError):
        return fail(str(exc), 400)
    if isinstance(exc, StorageError):
        return fail(str(exc), 500)
    raise exc


def register_error_handlers(app) -> None:
    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException):
        return fail(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(StorageError)
    def handle_storage_error(exc: StorageError):
        return fail(str(exc), 500)

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(exc: SQLAlchemyError):
        db.session.rollback()
        current_app.logger.exception("Unhandled database error")
        return fail("Database error", 500)
