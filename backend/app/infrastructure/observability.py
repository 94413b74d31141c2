"""Structured Logging — JSON lines for the sync, chat and autosave paths.

Invariants:
    - Every line has timestamp, level, logger and message
    - Extra fields used by this service (project_id, user_id, message_id,
      candidate_id, error_code, collection, path, counts, attempt) appear when set
    - LOG_FORMAT=text switches to a plain line format for local runs and tests

Design Decisions:
    - setup_logging runs once from the FastAPI lifespan; the client workspace
      only uses module loggers and leaves handler setup to its host
"""

import logging
import json
from datetime import datetime, timezone

_EXTRA_FIELDS = (
    "project_id", "user_id", "message_id", "candidate_id", "error_code",
    "collection", "path", "counts", "attempt",
)


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s — %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
