"""Health check endpoints."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from boxoffice.api.access import install_access_guard
from boxoffice.api.deps import json_response, timing
from boxoffice.core.extensions import db
from boxoffice.schemas import ReadinessSchema
from boxoffice.services.auth.policies import PUBLIC

bp = Blueprint("health", __name__)

install_access_guard(bp, {"healthcheck": PUBLIC, "readiness": PUBLIC})

readiness_schema = ReadinessSchema()


@bp.get("/health")
@timing
def healthcheck():
    """Liveness: the process is up."""

    version = current_app.config.get("APP_VERSION", "dev")
    return json_response({"status": "ok", "version": version})


@bp.get("/health/ready")
@timing
def readiness():
    """Readiness: the database answers a trivial query."""

    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        db.session.rollback()
        return json_response(
            readiness_schema.dump({"status": "unavailable", "database": "fail"}), status=503
        )
    return json_response(readiness_schema.dump({"status": "ok", "database": "ok"}))
