"""Flask application factory.

Provides:
 - App factory with configuration override
 - Trip / sharing JSON stores attached to the app
 - Unified JSON error envelope {ok:false,error,message}
 - Request id + timing middleware with one structured log line per request
 - Blueprint registration (auth, trip, sharing, health)
"""

from __future__ import annotations

import time
import uuid
from typing import Any

from dotenv import load_dotenv
from flask import Flask, g, request
from werkzeug.wrappers.response import Response

from .auth import bp as auth_bp
from .config import Config
from .errors import register_error_handlers
from .health_api import bp as health_bp
from .json_store import SharingStore, TripStore
from .logging_setup import configure_logging
from .sharing_api import bp as sharing_bp
from .trip_api import bp as trip_bp


def create_app(config_override: dict[str, Any] | None = None) -> Flask:
    load_dotenv()
    app = Flask(__name__)
    # --- Configuration ---
    cfg = Config.from_env()
    if config_override:
        known = {k: v for k, v in config_override.items() if hasattr(cfg, k)}
        if known:
            cfg.override(known)
    app.config.update(cfg.to_flask_dict())
    if config_override:
        for k, v in config_override.items():  # also allow direct Flask config keys
            if k.isupper():
                app.config[k] = v

    log = configure_logging(app)
    if not app.config.get("APP_PASSWORD"):
        log.warning("APP_PASSWORD is not set; login will fail with config_error")
    if app.config.get("SECRET_KEY") == "change-me" and not app.config.get("TESTING"):
        log.warning("SECRET_KEY is the default value; session tokens are forgeable")

    # --- Storage ---
    app.trip_store = TripStore(app.config["DATA_FILE"])  # type: ignore[attr-defined]
    app.sharing_store = SharingStore(app.config["SHARING_FILE"])  # type: ignore[attr-defined]
    log.info("Trip document: %s ; sharing feed: %s", app.config["DATA_FILE"], app.config["SHARING_FILE"])

    # --- Request id / timing middleware ---
    @app.before_request
    def _before_req() -> None:
        g._t0 = time.perf_counter()
        g.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())

    @app.after_request
    def _after_req(resp: Response) -> Response:
        dur_ms = int((time.perf_counter() - getattr(g, "_t0", time.perf_counter())) * 1000)
        rid = getattr(g, "request_id", None) or str(uuid.uuid4())
        resp.headers["X-Request-Id"] = rid
        resp.headers["X-Request-Duration-ms"] = str(dur_ms)
        if "Cache-Control" not in resp.headers:
            resp.headers["Cache-Control"] = "no-store"
        log.info(
            {
                "request_id": rid,
                "method": request.method,
                "path": request.path,
                "status": resp.status_code,
                "duration_ms": dur_ms,
            }
        )
        return resp

    register_error_handlers(app)

    # --- Register blueprints ---
    app.register_blueprint(auth_bp)
    app.register_blueprint(trip_bp)
    app.register_blueprint(sharing_bp)
    app.register_blueprint(health_bp)
    return app


__all__ = ["create_app"]
