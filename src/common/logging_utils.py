"""Centralized logging helpers.

All records go to stderr (or a log file) because stdout carries the stdio
transport. Call sites attach structured fields through ``extra_context`` and
pass URLs through ``safe_url`` before logging them.
"""
from __future__ import annotations

import logging
import os
import sys
import time
import urllib.parse
from typing import Any, Dict, Optional

from constants import Constants

_SENSITIVE_KEYS = ("token", "key", "secret", "password", "auth", "signature")
REDACTED = "[REDACTED]"
_HANDLER_MARK = "_npm_context_handler"


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure the root logger once.

    Args:
        level: Level name; falls back to the NPM_CONTEXT_LOG_LEVEL env var, then INFO.
        log_file: Optional path; when omitted records go to stderr.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)

    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    setattr(handler, _HANDLER_MARK, True)

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, _HANDLER_MARK, False):
            root.removeHandler(existing)
            existing.close()
    root.addHandler(handler)
    root.setLevel(level_value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records would be emitted by ``logger``."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra`` mapping for structured log fields, dropping None values."""
    return {k: v for k, v in fields.items() if v is not None}


def redact(value: str) -> str:
    """Mask all but the first two characters of a secret-looking value."""
    if not value:
        return value
    if len(value) <= 4:
        return REDACTED
    return value[:2] + REDACTED


def safe_url(url: str) -> str:
    """Return ``url`` with credentials and sensitive query values masked."""
    try:
        parts = urllib.parse.urlsplit(url)
    except ValueError:
        return url
    netloc = parts.netloc
    if "@" in netloc:
        netloc = REDACTED + "@" + netloc.rsplit("@", 1)[1]
    query = parts.query
    if query:
        pairs = urllib.parse.parse_qsl(query, keep_blank_values=True)
        masked = [
            (k, redact(v) if any(s in k.lower() for s in _SENSITIVE_KEYS) else v)
            for k, v in pairs
        ]
        query = urllib.parse.urlencode(masked, safe="@/[]")
    return urllib.parse.urlunsplit((parts.scheme, netloc, parts.path, query, parts.fragment))


class Timer:
    """Context manager measuring elapsed wall time."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
