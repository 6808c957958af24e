"""Logging configuration for the chat backend."""

import contextvars
import logging
import sys
from typing import Any

from backend.config import LOG_LEVEL

# Context variable holding the id of the session being operated on
session_id_context: contextvars.ContextVar[str] = contextvars.ContextVar("session_id", default="N/A")

_configured = False


def setup_logging() -> None:
    """Configure root logger with a format that includes the current session_id."""
    global _configured
    if _configured:
        return

    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | [session_id=%(session_id)s] | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    old_factory = logging.getLogRecordFactory()

    def record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
        record = old_factory(*args, **kwargs)
        # Only set if not already provided through extra
        if not hasattr(record, "session_id"):
            record.session_id = session_id_context.get()
        return record

    logging.setLogRecordFactory(record_factory)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name."""
    return logging.getLogger(name)
