"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from accounts_api.api.deps import json_response, timing
from accounts_api.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/healthcheck")
@timing
def healthcheck():
    """Report process and database status."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"
    return json_response({"status": "ok", "db": db_status}, "Health check passed")
