"""
Logging setup.

- Rotating file handlers for runtime and errors
- Request ID aware formatter
- Idempotent: calling configure_logging twice (tests, CLI) adds no duplicates
"""

from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from flask import g, has_request_context

from app.config import Settings

_FMT = "%(asctime)s [%(levelname)s] %(name)s %(request_id)s - %(message)s"
_MARK = "_yelstar_handler"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = g.get("request_id", "-") if has_request_context() else "-"
        return True


def _tag(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _MARK, True)
    handler.addFilter(RequestIdFilter())
    handler.setFormatter(logging.Formatter(_FMT))
    return handler


def _mk_handler(path: Path, level: int) -> RotatingFileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(path, maxBytes=5_000_000, backupCount=3, encoding="utf-8")
    handler.setLevel(level)
    _tag(handler)
    return handler


def configure_logging(settings: Settings, *, to_files: bool = True) -> None:
    root = logging.getLogger()
    level = getattr(logging, settings.LOG_LEVEL, logging.INFO)
    root.setLevel(level)

    for h in [h for h in root.handlers if getattr(h, _MARK, False)]:
        root.removeHandler(h)
        h.close()

    # Console (dev)
    console = logging.StreamHandler()
    console.setLevel(level)
    root.addHandler(_tag(console))

    if not to_files:
        return

    # Files
    logs_dir = Path(settings.LOG_DIR)
    root.addHandler(_mk_handler(logs_dir / "yelstar.log", logging.INFO))
    root.addHandler(_mk_handler(logs_dir / "errors.log", logging.ERROR))
