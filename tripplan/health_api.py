from __future__ import annotations

from typing import Any

from flask import Blueprint, current_app, jsonify, request

from .auth import require_auth
from .logging_setup import LOG_BUFFER

bp = Blueprint("health_api", __name__)


@bp.get("/healthz")
def healthz() -> tuple[dict[str, Any], int]:
    # Minimal health endpoint for container orchestrators
    return {"status": "ok", "trip_initialized": current_app.trip_store.exists()}, 200  # type: ignore[attr-defined]


@bp.get("/api/support/logs")
def support_logs():
    """Recent WARN+ log records, optionally filtered by ``request_id``."""
    require_auth()
    rid = request.args.get("request_id", "").strip()
    records = list(LOG_BUFFER)
    if rid:
        records = [r for r in records if r.get("request_id") == rid]
    return jsonify({"ok": True, "logs": records[-50:]})
