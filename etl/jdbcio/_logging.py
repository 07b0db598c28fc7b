import logging
import os
from threading import Lock
from typing import Any

from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

_SETUP_LOCK = Lock()
_SETUP_DONE = False
_SENSITIVE_KEYS = {"password"}
_URL_KEYS = {"connection_url", "url"}
_JDBC_PREFIX = "jdbc:"


def _resolve_log_level() -> int:
    level_name = os.getenv("JDBCIO_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def _setup_default_logging() -> None:
    global _SETUP_DONE
    if _SETUP_DONE:
        return

    with _SETUP_LOCK:
        if _SETUP_DONE:
            return

        root_logger = logging.getLogger()
        if not root_logger.handlers:
            logging.basicConfig(
                level=_resolve_log_level(),
                format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            )

        _SETUP_DONE = True


def get_logger(name: str) -> logging.Logger:
    _setup_default_logging()
    return logging.getLogger(f"jdbcio.{name}")


def redact_url(url: str | URL) -> str:
    """Render a connection URL with its password masked; unparseable URLs are masked whole."""
    if isinstance(url, URL):
        return url.render_as_string(hide_password=True)

    prefix = ""
    if url.lower().startswith(_JDBC_PREFIX):
        prefix, url = url[: len(_JDBC_PREFIX)], url[len(_JDBC_PREFIX):]
    try:
        return prefix + make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return "***"


def redact_config(values: dict[str, Any]) -> dict[str, Any]:
    redacted: dict[str, Any] = {}
    for key, value in values.items():
        if value is None:
            redacted[key] = value
        elif key.lower() in _SENSITIVE_KEYS:
            redacted[key] = "***"
        elif key.lower() in _URL_KEYS:
            redacted[key] = redact_url(value)
        else:
            redacted[key] = value
    return redacted
