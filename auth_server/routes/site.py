# auth_server/routes/site.py
from http import HTTPStatus
from flask import Blueprint, Response, current_app
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ..managers.mongodb_management import get_mongodb
from ..managers.response_management import ResponseManager


site_bp = Blueprint("site", __name__)


# ---------------- HEALTH ENDPOINTS ---------------- #


@site_bp.route("/healthz")
def healthz():
    return "ok", 200


@site_bp.route("/readyz")
def readyz():
    mongodb = get_mongodb()
    ready = mongodb.is_ready

    return ResponseManager._build(
        success=ready,
        status=HTTPStatus.OK if ready else HTTPStatus.SERVICE_UNAVAILABLE,
        message="ready" if ready else "not ready",
        error=None if ready else mongodb.error,
        data={"database": mongodb.state.value},
    )


@site_bp.route("/metrics")
def metrics():
    return Response(
        generate_latest(current_app.metrics_registry), content_type=CONTENT_TYPE_LATEST
    )
