"""Shared-password gate: ``/api/auth``.

POST exchanges the household password for a signed, timestamped cookie;
GET reports whether the cookie is still valid; DELETE clears it. A missing or
expired cookie is never an error here, it simply reads as unauthenticated.
"""
from __future__ import annotations

import logging
import secrets
import time

from flask import Blueprint, Response, current_app, jsonify, request

from . import tokens
from .errors import AuthError, ConfigError, RateLimitError

log = logging.getLogger(__name__)

bp = Blueprint("auth", __name__, url_prefix="/api/auth")

SESSION_COOKIE_NAME = "auth-token"

# In-memory login failure store: remote addr -> {failures:int, first:ts, lock_until:ts?}
_RATE_LIMIT_STORE: dict[str, dict[str, float | int]] = {}


def _max_age() -> int:
    return int(current_app.config.get("SESSION_MAX_AGE_SECONDS", tokens.DEFAULT_MAX_AGE))


def _set_session_cookie(resp: Response, token: str) -> None:
    # Secure is dropped only for local debug and test runs
    resp.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=_max_age(),
        path="/",
        httponly=True,
        samesite="Strict",
        secure=not (current_app.debug or current_app.testing),
    )


def _clear_session_cookie(resp: Response) -> None:
    resp.delete_cookie(SESSION_COOKIE_NAME, path="/", httponly=True, samesite="Strict")


def is_authenticated(now: float | None = None) -> bool:
    token = request.cookies.get(SESSION_COOKIE_NAME)
    return tokens.is_valid(token, current_app.config["SECRET_KEY"], max_age=_max_age(), now=now)


def enforce_auth() -> None:
    """Blueprint ``before_request`` hook; active only when AUTH_REQUIRED is set."""
    if not current_app.config.get("AUTH_REQUIRED"):
        return None
    if not is_authenticated():
        raise AuthError("authentication required")
    return None


def require_auth() -> None:
    """Unconditional variant for operator-only endpoints."""
    if not is_authenticated():
        raise AuthError("authentication required")


def _rate_limit_cfg() -> dict[str, int]:
    return current_app.config.get("AUTH_RATE_LIMIT", {"window_sec": 300, "max_failures": 5, "lock_sec": 600})


def _prune_expired(now: float, window: float) -> None:
    """Drop records whose window has passed and that hold no active lock."""
    stale = [
        k for k, rec in _RATE_LIMIT_STORE.items() if rec.get("lock_until", 0) <= now and now - rec["first"] > window
    ]
    for k in stale:
        del _RATE_LIMIT_STORE[k]


def _check_lockout(key: str, now: float) -> dict[str, float | int]:
    _prune_expired(now, _rate_limit_cfg().get("window_sec", 300))
    rec = _RATE_LIMIT_STORE.get(key)
    if rec:
        lock_until = rec.get("lock_until")
        if lock_until and lock_until > now:
            raise RateLimitError("rate_limited", retry_after=int(lock_until - now) or 1)
    else:
        rec = {"failures": 0, "first": now}
        _RATE_LIMIT_STORE[key] = rec
    return rec


def _record_failure(rec: dict[str, float | int], now: float) -> None:
    rl_cfg = _rate_limit_cfg()
    rec["failures"] += 1
    if rec["failures"] >= rl_cfg.get("max_failures", 5):
        lock_sec = rl_cfg.get("lock_sec", 600)
        rec["lock_until"] = now + lock_sec
        log.warning("Login locked for %s seconds after %s failures", lock_sec, rec["failures"])


def reset_rate_limits() -> None:
    _RATE_LIMIT_STORE.clear()


# --- Routes ---
@bp.post("")
def login():
    expected = current_app.config.get("APP_PASSWORD")
    if not expected:
        log.error("APP_PASSWORD is not configured; refusing login")
        raise ConfigError("Password not configured")
    data = request.get_json(silent=True) or {}
    password = data.get("password")
    now = time.time()
    key = request.remote_addr or "na"
    rec = _check_lockout(key, now)
    if not isinstance(password, str) or not secrets.compare_digest(password.encode(), str(expected).encode()):
        _record_failure(rec, now)
        raise AuthError("Invalid password")
    _RATE_LIMIT_STORE.pop(key, None)
    token = tokens.issue(current_app.config["SECRET_KEY"], now=now)
    resp = jsonify({"ok": True, "message": "Authentication successful"})
    _set_session_cookie(resp, token)
    log.info("Login succeeded from %s", key)
    return resp


@bp.get("")
def check_session():
    authenticated = is_authenticated()
    return jsonify({"ok": authenticated, "authenticated": authenticated})


@bp.delete("")
def logout():
    resp = jsonify({"ok": True, "message": "Logged out"})
    _clear_session_cookie(resp)
    return resp


__all__ = ["SESSION_COOKIE_NAME", "bp", "enforce_auth", "is_authenticated", "require_auth", "reset_rate_limits"]
