"""
Logging for UniGo.

Every record carries the cart session it was written for (``session``), so
one shopper's add/update/checkout sequence can be followed across requests.

Usage:
    from unigo.logging import get_logger
    logger = get_logger(__name__)
"""

import logging
import sys
from contextvars import ContextVar
from functools import cache
from typing import Optional

from unigo import config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(session)s] %(name)s: %(message)s"
# Vercel adds its own timestamps
LOG_FORMAT_HOSTED = "%(levelname)s [%(session)s] %(name)s: %(message)s"

_NO_SESSION = "-"
_current_session: ContextVar[str] = ContextVar("unigo_session", default=_NO_SESSION)

# CWE-117: keep user-controlled values on one log line
_LOG_ESCAPES = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": None})


def bind_session(session_id: Optional[str]) -> None:
    """Tag records logged by the current request with ``session_id``."""
    _current_session.set(sanitize_id_for_logging(session_id) if session_id else _NO_SESSION)


class SessionFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.session = _current_session.get()
        return True


def _configure_root_logger() -> None:
    root = logging.getLogger()
    if root.handlers:
        return

    level = getattr(logging, config.LOG_LEVEL.upper(), logging.INFO)
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(SessionFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT_HOSTED if config.IS_HOSTED else LOG_FORMAT))
    root.addHandler(handler)

    # One line per Supabase/Upstash HTTP call otherwise
    for noisy in ("httpx", "httpcore", "hpack"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


_configure_root_logger()


@cache
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def sanitize_id_for_logging(id_value: Optional[str]) -> str:
    """First 8 characters of an id (order, user, session), escaped."""
    if not id_value:
        return "N/A"
    return str(id_value).translate(_LOG_ESCAPES)[:8]


def sanitize_string_for_logging(value: Optional[str], max_length: int = 50) -> str:
    """Escaped database or user text, cut to ``max_length``."""
    if not value:
        return "N/A"
    safe_value = str(value).translate(_LOG_ESCAPES)
    if len(safe_value) <= max_length:
        return safe_value
    return safe_value[:max_length] + "..."


__all__ = [
    "bind_session",
    "get_logger",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
