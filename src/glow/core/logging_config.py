"""Central logging configuration.

The composition root (`glow.main`) calls `configure_logging` exactly once.
Adapters and core code never install handlers themselves; they emit through
`LoggingPort` (see `glow.adapters.logging_adapter`) or plain module loggers.

Records at DEBUG/INFO go to stdout, WARNING and above to stderr. Every record
carries the id of the HTTP request it was emitted for, taken from
`correlation_id_var`, which the FastAPI middleware sets per request. Uvicorn is
started with `log_config=None` so it inherits this setup.
"""

from __future__ import annotations

import contextvars
import logging
import sys
from typing import Optional

# Populated per request by the web adapter middleware
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default="-"
)

DEFAULT_FORMAT = (
    "[%(asctime)s] %(levelname)s %(name)s %(correlation_id)s: %(message)s"
)


def coerce_level(level: int | str | None) -> int:
    """Turn 'debug', 'INFO', 10 or None into a numeric logging level."""
    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    key = str(level).upper().strip()
    mapping = logging.getLevelNamesMapping()
    return mapping.get(key, logging.INFO)


class _CorrelationIdFilter(logging.Filter):
    """Inject correlation id from contextvar into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - simple
        record.correlation_id = correlation_id_var.get()
        return True


class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int):
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover
        return record.levelno <= self.max_level


def configure_logging(
    level: int | str | None = None,
    fmt: Optional[str] = None,
    disable_uvicorn_access: bool = False,
) -> None:
    """Configure the root logger with split stdout/stderr sinks."""
    numeric_level = coerce_level(level)
    formatter = logging.Formatter(fmt or DEFAULT_FORMAT)
    cid_filter = _CorrelationIdFilter()

    root = logging.getLogger()
    root.setLevel(numeric_level)

    # Clear existing handlers to avoid duplication on reload
    for handler in list(root.handlers):
        root.removeHandler(handler)

    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(_MaxLevelFilter(logging.INFO))
    stdout_handler.addFilter(cid_filter)
    stdout_handler.setFormatter(formatter)

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.addFilter(cid_filter)
    stderr_handler.setFormatter(formatter)

    root.addHandler(stdout_handler)
    root.addHandler(stderr_handler)

    if disable_uvicorn_access:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.getLogger("glow").debug(
        "Logging configured level=%s disable_uvicorn_access=%s",
        numeric_level,
        disable_uvicorn_access,
    )
