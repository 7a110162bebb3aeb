"""Health check routes."""

from __future__ import annotations

from flask import Blueprint

from bolao.services.registry import get_services
from bolao.utils.responses import ok

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health_check():
    """Health check endpoint."""

    return ok({"status": "ok", "poller_running": get_services().poller.running})
