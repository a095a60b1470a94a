import os
import sys

import pytest

# Path setup before any project imports to satisfy E402
ROOT = os.path.dirname(__file__)
PARENT = os.path.abspath(os.path.join(ROOT, ".."))
if PARENT not in sys.path:  # pragma: no cover - environment dependent
    sys.path.insert(0, PARENT)

PASSWORD = "hunter2"


def _lazy_imports():  # isolate app imports & satisfy lint ordering
    from tripplan.app_factory import create_app  # noqa: E402

    return create_app


@pytest.fixture(autouse=True)
def _reset_login_lockout():
    from tripplan.auth import reset_rate_limits

    reset_rate_limits()
    yield
    reset_rate_limits()


@pytest.fixture
def make_app(tmp_path):
    """Factory building an isolated app whose JSON files live under tmp_path."""
    create_app = _lazy_imports()

    def _make(**overrides):
        cfg = {
            "TESTING": True,
            "secret_key": "test-secret",
            "app_password": PASSWORD,
            "data_file": str(tmp_path / "data" / "trip.json"),
            "sharing_file": str(tmp_path / "data" / "sharing.json"),
        }
        cfg.update(overrides)
        return create_app(cfg)

    return _make


@pytest.fixture
def password():
    return PASSWORD


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    """Client holding a valid session cookie."""
    r = client.post("/api/auth", json={"password": PASSWORD})
    assert r.status_code == 200
    return client


@pytest.fixture
def initialized(client):
    """Client whose trip was created for 2026-02-04..2026-02-06 with Alex and Ben."""
    r = client.post(
        "/api/init",
        json={"start": "2026-02-04", "end": "2026-02-06", "participants": ["Alex", "Ben"]},
    )
    assert r.status_code == 200
    return client
