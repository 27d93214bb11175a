"""Logging setup.

Development and testing get a readable line format, production gets one JSON
object per line. Level and format come from settings (LOG_LEVEL / LOG_FORMAT).
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

_EXTRA_FIELDS = ("cycle_id", "quarter", "employee_id", "permission_id")


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "line": record.lineno,
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        for key in _EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val
        return json.dumps(entry, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.now().strftime("%H:%M:%S")
        base = f"{ts} {record.levelname:<8} {record.name}: {record.getMessage()}"
        if record.exc_info and record.exc_info[0] is not None:
            base += "\n" + self.formatException(record.exc_info)
        return base


def configure_logging(level: str = "INFO", fmt: Optional[str] = None) -> None:
    """Install a single stderr handler on the root logger."""

    resolved = getattr(logging, str(level).upper(), logging.INFO)
    formatter = JSONFormatter() if (fmt or "").lower() == "json" else ReadableFormatter()

    root = logging.getLogger()
    root.handlers.clear()
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(resolved)

    for noisy in ("werkzeug", "mysql.connector"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
