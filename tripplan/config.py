from __future__ import annotations

import os
from dataclasses import dataclass


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    secret_key: str = "change-me"
    app_password: str | None = None  # shared household password; None -> login is a config error
    data_file: str = os.path.join("data", "trip.json")
    sharing_file: str = os.path.join("data", "sharing.json")
    session_max_age_seconds: int = 86400  # 24h
    auth_required: bool = False
    login_max_failures: int = 5
    login_window_seconds: int = 300
    login_lock_seconds: int = 600
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Config:
        return cls(
            secret_key=os.getenv("SECRET_KEY", "change-me"),
            app_password=os.getenv("APP_PASSWORD") or None,
            data_file=os.getenv("DATA_FILE", os.path.join("data", "trip.json")),
            sharing_file=os.getenv("SHARING_FILE", os.path.join("data", "sharing.json")),
            session_max_age_seconds=int(os.getenv("SESSION_MAX_AGE_SECONDS", "86400")),
            auth_required=_flag("AUTH_REQUIRED"),
            login_max_failures=int(os.getenv("LOGIN_MAX_FAILURES", "5")),
            login_window_seconds=int(os.getenv("LOGIN_WINDOW_SECONDS", "300")),
            login_lock_seconds=int(os.getenv("LOGIN_LOCK_SECONDS", "600")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def override(self, d: dict):
        for k, v in d.items():
            if hasattr(self, k):
                setattr(self, k, v)

    def to_flask_dict(self):
        return {
            "SECRET_KEY": self.secret_key,
            "APP_PASSWORD": self.app_password,
            "DATA_FILE": self.data_file,
            "SHARING_FILE": self.sharing_file,
            "SESSION_MAX_AGE_SECONDS": self.session_max_age_seconds,
            "AUTH_REQUIRED": self.auth_required,
            # Login lockout (in-memory, per remote address)
            "AUTH_RATE_LIMIT": {
                "window_sec": self.login_window_seconds,
                "max_failures": self.login_max_failures,
                "lock_sec": self.login_lock_seconds,
            },
            "LOG_LEVEL": self.log_level,
            "SESSION_COOKIE_HTTPONLY": True,
            "SESSION_COOKIE_SAMESITE": "Strict",
        }
