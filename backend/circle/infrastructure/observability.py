"""Structured Logging — one JSON line per record, tagged with Circle identifiers.

Invariants:
    - Every line carries timestamp (record creation time, UTC), level, logger and message
    - Only CONTEXT_FIELDS are lifted out of `extra`; anything else stays out of the line
    - public_ids lists are emitted as JSON arrays so asset drift can be grepped per id
    - The root logger holds at most one handler named HANDLER_NAME

Design Decisions:
    - Stdlib logging with a small formatter (ADR: no logging dependency)
    - LOG_FORMAT=text switches to a human-readable line for local runs and tests
"""

import logging
import json
from datetime import datetime, timezone

HANDLER_NAME = "circle"

CONTEXT_FIELDS = (
    "user_id", "group_id", "post_id", "error_code", "path", "public_ids",
)

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Render a record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        line = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        line.update(
            (key, record.__dict__[key])
            for key in CONTEXT_FIELDS
            if record.__dict__.get(key) is not None
        )
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install (or replace) the Circle handler on the root logger."""
    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT),
    )

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
