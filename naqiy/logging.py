"""
Structured Logging

Every engine record can carry the context it was produced under: the
certifying body being scored, the rule set a resolver is bound to, the
scope of a lookup, the instant a materialization run is evaluated at.
That context is bound once on an EngineLogger and stamped onto every
record it emits, instead of being repeated in each `extra=` dict.

Usage:
    from naqiy.logging import get_logger
    logger = get_logger("materializer")
    run_log = logger.bind(evaluated_at="2025-01-01T00:00:00+00:00")
    run_log.bind(certifier_id="avs").info("Certifier scored", extra={"trust_score": 81})

Output is JSON lines by default, or key=value text with
NAQIY_LOG_FORMAT=text.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, MutableMapping, Optional


LOG_LEVEL = os.getenv("NAQIY_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("NAQIY_LOG_FORMAT", "json")  # "json" or "text"

# Evaluation context an EngineLogger may bind
CONTEXT_FIELDS = (
    "certifier_id", "rule_set_version", "scope", "evaluated_at",
)

# Per-event measurements passed through `extra=`
EVENT_FIELDS = (
    "rule_id", "pattern", "trust_score", "controversy_penalty",
    "processed", "updated", "failed", "attempt", "error", "error_type",
    "duration_ms", "status_code", "method", "path",
)


def _record_fields(record: logging.LogRecord) -> dict[str, Any]:
    out = {}
    for key in CONTEXT_FIELDS + EVENT_FIELDS:
        val = getattr(record, key, None)
        if val is not None:
            out[key] = val
    return out


class JSONFormatter(logging.Formatter):
    """One JSON object per record, context first."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_record_fields(record),
        }
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Readable lines for development, with context as trailing key=value pairs."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)-8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = " ".join(f"{k}={v}" for k, v in _record_fields(record).items())
        if not pairs:
            return line
        # Traceback, if any, stays on the lines after the context
        head, sep, tail = line.partition("\n")
        return f"{head} {pairs}{sep}{tail}"


class EngineLogger(logging.LoggerAdapter):
    """Logger with bound evaluation context. Per-call `extra=` wins on conflict."""

    def __init__(self, logger: logging.Logger, context: Optional[dict] = None):
        super().__init__(logger, dict(context or {}))

    def bind(self, **context: Any) -> "EngineLogger":
        unknown = set(context) - set(CONTEXT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown log context field(s): {', '.join(sorted(unknown))}")
        return EngineLogger(self.logger, {**self.extra, **context})

    @property
    def context(self) -> dict:
        return dict(self.extra)

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]):
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Logger:
    """
    Configure the naqiy logger. Call once at app or CLI startup.

    Arguments override NAQIY_LOG_LEVEL and NAQIY_LOG_FORMAT.
    """
    root = logging.getLogger("naqiy")
    root.setLevel(getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO))

    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if (fmt or LOG_FORMAT) == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(TextFormatter())
    root.addHandler(handler)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return root


def get_logger(name: str, **context: Any) -> EngineLogger:
    """Named logger under the naqiy namespace, optionally with bound context."""
    base = EngineLogger(logging.getLogger(f"naqiy.{name}"))
    return base.bind(**context) if context else base
