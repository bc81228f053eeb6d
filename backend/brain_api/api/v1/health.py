"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from brain_api.api.deps import json_response, timing
from brain_api.core.extensions import db, get_redis

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Report database and denylist backend status."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"
    denylist = "redis" if get_redis() is not None else "memory"
    version = current_app.config.get("APP_VERSION", "dev")
    status = "ok" if db_status == "ok" else "degraded"
    payload = {"status": status, "db": db_status, "denylist": denylist, "version": version}
    return json_response(payload, status=200 if status == "ok" else 503)
