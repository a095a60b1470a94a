"""Session token for the shared-password gate.

Format: ``<b64url(json payload)>.<b64url(HMAC-SHA256(secret, payload))>`` with
payload ``{"sub": "trip", "iat": <unix seconds>}``. The token is opaque to the
client; the server only trusts it when the signature matches and ``iat`` lies
within ``max_age`` seconds of now.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import time
from typing import Literal, TypedDict

DEFAULT_MAX_AGE = 24 * 60 * 60
FUTURE_LEEWAY = 60
SUBJECT = "trip"


class TokenError(Exception):
    pass


class SessionPayload(TypedDict):
    sub: Literal["trip"]
    iat: int


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(data: str) -> bytes:
    pad = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + pad)


def _sign(msg: bytes, secret: str) -> str:
    sig = hmac.new(secret.encode(), msg, hashlib.sha256).digest()
    return _b64url(sig)


def issue(secret: str, *, now: float | None = None) -> str:
    iat = int(time.time() if now is None else now)
    payload: SessionPayload = {"sub": SUBJECT, "iat": iat}
    body = _b64url(json.dumps(payload, separators=(",", ":")).encode())
    return f"{body}.{_sign(body.encode(), secret)}"


def decode(token: str, secret: str, *, max_age: int = DEFAULT_MAX_AGE, now: float | None = None) -> SessionPayload:
    """Verify signature and age; raises TokenError for any defect."""
    if not token or token.count(".") != 1:
        raise TokenError("malformed")
    body, sig = token.split(".")
    if not hmac.compare_digest(_sign(body.encode(), secret).encode(), sig.encode()):
        raise TokenError("bad signature")
    try:
        payload = json.loads(_b64url_decode(body))
    except (binascii.Error, ValueError) as e:
        raise TokenError("malformed") from e
    if not isinstance(payload, dict) or payload.get("sub") != SUBJECT or not isinstance(payload.get("iat"), int):
        raise TokenError("malformed")
    current = time.time() if now is None else now
    age = current - payload["iat"]
    if age < -FUTURE_LEEWAY:
        raise TokenError("issued in the future")
    if age >= max_age:
        raise TokenError("expired")
    return {"sub": SUBJECT, "iat": payload["iat"]}


def is_valid(token: str | None, secret: str, *, max_age: int = DEFAULT_MAX_AGE, now: float | None = None) -> bool:
    if not token:
        return False
    try:
        decode(token, secret, max_age=max_age, now=now)
    except TokenError:
        return False
    return True


__all__ = ["DEFAULT_MAX_AGE", "SessionPayload", "TokenError", "decode", "is_valid", "issue"]
