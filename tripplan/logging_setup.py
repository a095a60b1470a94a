"""Logging configuration and the support log ring buffer.

Records carry the current ``request_id`` (``-`` outside a request). WARN+
records are also captured into an in-memory deque served by
``/api/support/logs`` for quick troubleshooting without log aggregation.
"""

from __future__ import annotations

import collections
import logging
import time

from flask import Flask, g, has_request_context, request

LOG_BUFFER: collections.deque[dict] = collections.deque(maxlen=500)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = getattr(g, "request_id", "-") if has_request_context() else "-"
        return True


class SupportLogHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        if has_request_context():
            rid = getattr(g, "request_id", "-")
            path = request.path
        else:
            rid = "-"
            path = "-"
        LOG_BUFFER.append(
            {
                "ts": time.time(),
                "level": record.levelname,
                "logger": record.name,
                "msg": self.format(record),
                "request_id": rid,
                "path": path,
            }
        )


def install_support_log_handler(logger: logging.Logger) -> None:
    # Avoid duplicate attachment if the app is created more than once
    if any(isinstance(h, SupportLogHandler) for h in logger.handlers):
        return
    h = SupportLogHandler(level=logging.WARNING)
    h.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(h)


def configure_logging(app: Flask) -> logging.Logger:
    """Configure the ``tripplan`` logger tree once per process."""
    log = logging.getLogger("tripplan")
    log.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    if not any(isinstance(h, logging.StreamHandler) for h in log.handlers):
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter(LOG_FORMAT))
        h.addFilter(RequestIdFilter())
        log.addHandler(h)
    install_support_log_handler(log)
    return log


__all__ = ["LOG_BUFFER", "RequestIdFilter", "SupportLogHandler", "configure_logging", "install_support_log_handler"]
