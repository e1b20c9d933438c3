from __future__ import annotations

import json
import logging
import os
import sys
from typing import Optional


_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """
    Render each record as a single JSON line for log shippers.

    Keys: t (record creation time, epoch ms), lvl, name, msg, and when present
    extra (dict passed as extra={"extra": {...}}) and exc_info (traceback text).
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = dict(
            t=int(record.created * 1000),
            lvl=record.levelname,
            name=record.name,
            msg=record.getMessage(),
        )
        fields = getattr(record, "extra", None)
        if isinstance(fields, dict):
            payload["extra"] = fields
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    lvl = getattr(logging, name, None)
    return lvl if isinstance(lvl, int) else logging.INFO


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None, *, force: bool = False) -> None:
    """
    Configure the root logger once.

    Level precedence:
      - explicit `level` arg
      - env LOG_LEVEL (e.g., DEBUG/INFO/WARNING/ERROR)
      - default INFO
    Format precedence:
      - explicit `fmt` arg ("json" or "text")
      - env LOG_FORMAT
      - default "json"

    Diagnostics go to stderr so stdout stays clean for CLI output.
    Pass force=True to reconfigure (the CLI does this after reading config).
    """
    root = logging.getLogger()
    if getattr(root, "_pyramid_configured", False) and not force:
        return

    fmt_name = (fmt or os.environ.get("LOG_FORMAT") or "json").lower()
    handler = logging.StreamHandler(sys.stderr)
    if fmt_name == "text":
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    else:
        handler.setFormatter(JsonFormatter())

    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(_resolve_level(level))
    root._pyramid_configured = True  # type: ignore[attr-defined]


def get_logger(name: str) -> logging.Logger:
    """Named logger for entry points; configures the root handler on first use."""
    setup_logging()
    return logging.getLogger(name)
