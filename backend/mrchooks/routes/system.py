# backend/mrchooks/routes/system.py
"""
System health and version endpoints.

Health reports database connectivity and whether the expected tables
exist; version gives non-sensitive deployment information.
"""

import sys
import time

from flask import Blueprint, current_app
from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..responses import ok, fail
from ..time_utils import utcnow, to_utc_z

API_VERSION = "1.0.0"

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    """
    Check database connectivity and that every mapped table exists.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        existing = set(inspect(db.engine).get_table_names())
        expected = set(db.metadata.tables)
        missing = sorted(expected - existing)

        elapsed_ms = (time.time() - start_time) * 1000

        result = {
            "status": "degraded" if missing else "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {"tables": len(expected & existing)},
        }
        if missing:
            result["warning"] = f"Missing tables: {', '.join(missing)}"
        return result
    except SQLAlchemyError:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: database reachable (degraded when tables are missing)
    - 503: database unreachable
    """
    database_health = check_database_health()
    body = {
        "status": database_health["status"],
        "timestamp": to_utc_z(utcnow()),
        "checks": {"database": database_health},
    }
    if database_health["status"] == "unhealthy":
        return fail("Database unavailable", 503)
    return ok(body)


@system_bp.get("/version")
def version():
    """Version endpoint for deployment debugging; never exposes secrets or paths."""
    env = "production" if not current_app.debug else "development"

    return ok({
        "api_version": API_VERSION,
        "environment": env,
        "python_version": sys.version.split()[0],
        "server_time": to_utc_z(utcnow()),
    })
