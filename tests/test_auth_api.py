import time
from types import SimpleNamespace

from tripplan import auth, tokens
from tripplan.auth import SESSION_COOKIE_NAME


def _set_cookie_header(resp):
    return "; ".join(resp.headers.getlist("Set-Cookie"))


def test_login_success_sets_strict_httponly_cookie(client, password):
    r = client.post("/api/auth", json={"password": password})
    assert r.status_code == 200
    assert r.get_json() == {"ok": True, "message": "Authentication successful"}
    header = _set_cookie_header(r)
    assert f"{SESSION_COOKIE_NAME}=" in header
    assert "HttpOnly" in header
    assert "SameSite=Strict" in header
    assert "Max-Age=86400" in header
    # TESTING disables the Secure flag
    assert "Secure" not in header


def test_login_cookie_is_secure_outside_testing(make_app, password):
    app = make_app(TESTING=False)
    r = app.test_client().post("/api/auth", json={"password": password})
    assert r.status_code == 200
    assert "Secure" in _set_cookie_header(r)


def test_wrong_password_is_401(client):
    r = client.post("/api/auth", json={"password": "nope"})
    assert r.status_code == 401
    body = r.get_json()
    assert body["ok"] is False
    assert body["error"] == "unauthorized"
    assert body["message"] == "Invalid password"
    assert SESSION_COOKIE_NAME not in _set_cookie_header(r)


def test_missing_password_is_401(client):
    assert client.post("/api/auth", json={}).status_code == 401
    assert client.post("/api/auth", data="garbage").status_code == 401


def test_unconfigured_password_is_config_error(make_app):
    client = make_app(app_password=None).test_client()
    r = client.post("/api/auth", json={"password": "anything"})
    assert r.status_code == 500
    assert r.get_json()["error"] == "config_error"


def test_session_check_reflects_cookie(client, password):
    assert client.get("/api/auth").get_json() == {"ok": False, "authenticated": False}
    client.post("/api/auth", json={"password": password})
    assert client.get("/api/auth").get_json() == {"ok": True, "authenticated": True}


def test_expired_cookie_reads_as_unauthenticated(client):
    stale = tokens.issue("test-secret", now=time.time() - 24 * 3600 - 60)
    client.set_cookie(SESSION_COOKIE_NAME, stale)
    r = client.get("/api/auth")
    assert r.status_code == 200
    assert r.get_json()["authenticated"] is False


def test_forged_cookie_reads_as_unauthenticated(client):
    client.set_cookie(SESSION_COOKIE_NAME, tokens.issue("someone-else"))
    assert client.get("/api/auth").get_json()["authenticated"] is False


def test_logout_clears_cookie(auth_client):
    r = auth_client.delete("/api/auth")
    assert r.get_json() == {"ok": True, "message": "Logged out"}
    assert f"{SESSION_COOKIE_NAME}=;" in _set_cookie_header(r)
    assert auth_client.get("/api/auth").get_json()["authenticated"] is False


def test_login_lockout_after_repeated_failures(client, password):
    for _ in range(5):
        assert client.post("/api/auth", json={"password": "bad"}).status_code == 401
    r = client.post("/api/auth", json={"password": password})
    assert r.status_code == 429
    assert r.get_json()["error"] == "rate_limited"
    assert int(r.headers["Retry-After"]) > 0


def test_successful_login_resets_failure_count(client, password):
    for _ in range(4):
        client.post("/api/auth", json={"password": "bad"})
    assert client.post("/api/auth", json={"password": password}).status_code == 200
    for _ in range(4):
        assert client.post("/api/auth", json={"password": "bad"}).status_code == 401
    assert client.post("/api/auth", json={"password": password}).status_code == 200


def test_data_endpoints_open_by_default(client):
    assert client.get("/api/trip").status_code == 404
    assert client.get("/api/sharing").status_code == 200


def test_auth_required_gates_data_endpoints(make_app, password):
    client = make_app(auth_required=True).test_client()
    r = client.get("/api/trip")
    assert r.status_code == 401
    assert r.get_json()["error"] == "unauthorized"
    assert client.get("/api/sharing").status_code == 401
    assert client.get("/healthz").status_code == 200
    client.post("/api/auth", json={"password": password})
    assert client.get("/api/trip").status_code == 404
    assert client.get("/api/sharing").status_code == 200


def _fail_from(client, addr):
    return client.post("/api/auth", json={"password": "bad"}, environ_base={"REMOTE_ADDR": addr})


def test_expired_failure_records_are_pruned(client, monkeypatch):
    clock = [1_000_000.0]
    monkeypatch.setattr(auth, "time", SimpleNamespace(time=lambda: clock[0]))
    _fail_from(client, "10.0.0.1")
    for _ in range(5):
        _fail_from(client, "10.0.0.2")
    assert set(auth._RATE_LIMIT_STORE) == {"10.0.0.1", "10.0.0.2"}

    clock[0] += 301
    _fail_from(client, "10.0.0.3")
    # the locked address outlives its window until the lock ends
    assert set(auth._RATE_LIMIT_STORE) == {"10.0.0.2", "10.0.0.3"}

    clock[0] += 600
    assert _fail_from(client, "10.0.0.2").status_code == 401
    assert set(auth._RATE_LIMIT_STORE) == {"10.0.0.2"}
    assert auth._RATE_LIMIT_STORE["10.0.0.2"]["failures"] == 1
