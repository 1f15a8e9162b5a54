"""
Logging setup and per-request correlation.

Each render request gets a correlation id that is attached to every log
record emitted while serving it and to every error message returned.
Structured fields are passed through ``extra=`` and rendered as
``key=value`` pairs after the message.
"""

import logging
import secrets
import string
import sys
import time
from dataclasses import dataclass
from typing import Any, MutableMapping, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(correlation_id)s] %(message)s%(fields)s"

_BASE36 = string.digits + string.ascii_lowercase

# Attributes every LogRecord has; anything else came from ``extra=``.
_RESERVED_ATTRS = set(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "correlation_id", "fields"}


def _random_suffix(length: int = 6) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def unique_token(prefix: str) -> str:
    """Collision-resistant name: ``<prefix>-<epoch ms>-<6 base36 chars>``."""
    return f"{prefix}-{int(time.time() * 1000)}-{_random_suffix()}"


@dataclass(frozen=True)
class CorrelationContext:
    """Identifier threading one render request through logs and errors."""

    id: str

    @classmethod
    def new(cls) -> "CorrelationContext":
        return cls(id=unique_token("render"))


def new_correlation_id() -> str:
    return CorrelationContext.new().id


class CorrelationFilter(logging.Filter):
    """
    Supplies ``correlation_id`` and ``fields`` on every record so that the
    shared format string works for records logged outside a request.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        record.fields = "".join(f" {key}={value}" for key, value in extras.items())
        return True


class CorrelationLogger(logging.LoggerAdapter):
    """LoggerAdapter that stamps the request's correlation id on each record."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]):
        extra = dict(kwargs.get("extra") or {})
        extra["correlation_id"] = self.extra["correlation_id"]
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(name: str, correlation: Optional[CorrelationContext] = None):
    """
    Return a logger for ``name``; bound to ``correlation`` when given.

    Example:
        >>> log = get_logger(__name__, CorrelationContext.new())
        >>> log.info("Downloading TTS audio", extra={"size_bytes": 42})
    """
    logger = logging.getLogger(name)
    if correlation is None:
        return logger
    return CorrelationLogger(logger, {"correlation_id": correlation.id})


def configure_logging(level: str = "INFO") -> None:
    """
    Configure the root logger with the correlation-aware format.

    Safe to call more than once; the handler is only installed once.
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in root.handlers:
        if getattr(handler, "_shortvideo", False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(CorrelationFilter())
    handler._shortvideo = True  # type: ignore[attr-defined]
    root.addHandler(handler)
