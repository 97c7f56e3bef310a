"""Logging setup shared by the app and the tools.

Usage note:
    Call `setup_logging()` once at startup, then log through
    `logging.getLogger("educonnect")` with `extra={"ctx": {...}}`.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "educonnect"


class KVFormatter(logging.Formatter):
    """Formatter that appends structured key-value pairs: [k=v] ..."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        ctx = getattr(record, "ctx", None)
        if isinstance(ctx, dict) and ctx:
            # Keep stable key order for readability
            keys = sorted(ctx.keys())
            kv = " ".join([f"[{k}={ctx[k]}]" for k in keys if ctx[k] is not None and ctx[k] != ""])
            if kv:
                return f"{base} {kv}"
        return base


def setup_logging(log_path: str | None = None) -> logging.Logger:
    """
    Configure logging to console + file.
    Console is what Streamlit Cloud keeps; the file is useful locally.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger  # idempotent

    logger.setLevel(logging.INFO)

    fmt = KVFormatter("%(asctime)s %(levelname)s %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    ch = logging.StreamHandler()
    ch.setLevel(logging.INFO)
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    if log_path:
        try:
            fh = RotatingFileHandler(log_path, maxBytes=2_000_000, backupCount=3)
            fh.setLevel(logging.INFO)
            fh.setFormatter(fmt)
            logger.addHandler(fh)
        except OSError:
            logger.warning("File logging not available", extra={"ctx": {"component": "logger", "path": log_path}})

    logger.propagate = False
    logger.info("Logging configured", extra={"ctx": {"component": "startup"}})
    return logger
