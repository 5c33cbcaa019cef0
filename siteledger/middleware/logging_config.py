"""
Logging setup for SiteLedger.

Every record passing the root handler is stamped by ``SiteContextFilter``
with the project, acting role and request id of the request being served
(when there is one) and with the app's progress source, so a reconciliation
warning can be traced back to the project and role that triggered it.

- Development / testing: readable colored lines tagged ``[proj-001 Site Engineer]``
- Production: one JSON object per line
- Level: LOG_LEVEL env variable
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

from flask import g, has_request_context, request

CONTEXT_FIELDS = ("project_id", "role", "request_id", "progress_source")


class SiteContextFilter(logging.Filter):
    """Fill request and ledger context onto records that do not carry it."""

    def __init__(self, progress_source: str = "schedule"):
        super().__init__()
        self.progress_source = progress_source

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "progress_source", None) is None:
            record.progress_source = self.progress_source
        if has_request_context():
            if getattr(record, "project_id", None) is None:
                record.project_id = (request.view_args or {}).get("project_id")
            if getattr(record, "role", None) is None:
                record.role = g.get("acting_role")
            if getattr(record, "request_id", None) is None:
                record.request_id = g.get("request_id")
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record, for log aggregation."""

    EXTRA_FIELDS = ("method", "path", "status", "duration_ms", "remote_addr") + CONTEXT_FIELDS

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "line": record.lineno,
        }
        for key in self.EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


class ReadableFormatter(logging.Formatter):
    """Colored single-line format with a site tag for development."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, color: bool = True):
        super().__init__()
        self.color = color

    @staticmethod
    def site_tag(record: logging.LogRecord) -> str:
        parts = [getattr(record, "project_id", None), getattr(record, "role", None)]
        parts = [p for p in parts if p]
        return f" [{' '.join(parts)}]" if parts else ""

    def format(self, record: logging.LogRecord) -> str:
        color, reset = (self.COLORS.get(record.levelname, ""), self.RESET) if self.color else ("", "")
        ts = datetime.now().strftime("%H:%M:%S")
        duration = getattr(record, "duration_ms", None)
        dur_str = f" [{duration:.0f}ms]" if duration is not None else ""
        line = (f"{color}{ts} {record.levelname:<8}{reset} {record.name}"
                f"{self.site_tag(record)}: {record.getMessage()}{dur_str}")
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(app):
    """
    Install a single stderr handler on the root logger.

    Production (neither DEBUG nor TESTING) logs JSON; otherwise the readable
    format is used. The handler carries a ``SiteContextFilter`` bound to the
    app's PROGRESS_SOURCE.
    """
    is_testing = app.config.get("TESTING", False)
    is_prod = not app.config.get("DEBUG", False) and not is_testing

    level_name = os.getenv("LOG_LEVEL", "INFO" if is_prod else "DEBUG")
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if is_prod else ReadableFormatter())
    handler.addFilter(SiteContextFilter(str(app.config.get("PROGRESS_SOURCE", "schedule"))))
    handler.setLevel(level)

    # Rebuilt per app so tests creating several apps do not stack handlers
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for noisy in ("urllib3", "werkzeug", "httpx", "google_genai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    app.logger.setLevel(level)

    if not is_testing:
        app.logger.info("Logging configured: level=%s format=%s progress_source=%s",
                        level_name, "JSON" if is_prod else "readable",
                        app.config.get("PROGRESS_SOURCE"))
