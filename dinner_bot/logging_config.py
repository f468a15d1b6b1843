"""
Logging configuration for the dinner bot application.

Every record passing through the configured handler is tagged with the id
of the conversation whose turn is being handled ("-" outside a turn), so a
single order can be followed through interleaved requests.

Usage:
    from dinner_bot.logging_config import setup_logging
    setup_logging()  # Call once at application startup

    with session_log_context(session_id):
        logger.info("...")  # logged as "... - [<session_id>] ..."

Environment variables:
    LOG_LEVEL: Set to DEBUG, INFO, WARNING, ERROR, or CRITICAL (default: INFO)
"""
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

NO_SESSION = "-"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(session_id)s] %(message)s"

# Session whose turn is running in the current thread or task
_current_session: ContextVar[str] = ContextVar("current_session", default=NO_SESSION)


def get_current_session() -> str:
    """Session id of the turn being handled, or NO_SESSION."""
    return _current_session.get()


@contextmanager
def session_log_context(session_id: str) -> Iterator[None]:
    """Tag log records emitted inside the block with `session_id`."""
    token = _current_session.set(session_id or NO_SESSION)
    try:
        yield
    finally:
        _current_session.reset(token)


class SessionContextFilter(logging.Filter):
    """Adds `session_id` to every record so LOG_FORMAT can render it."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _current_session.get()
        return True


def setup_logging(level: str = None) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               If not provided, reads from LOG_LEVEL env var, defaults to INFO.
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    level = level.upper()

    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        level = "INFO"
    numeric_level = getattr(logging, level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.addFilter(SessionContextFilter())

    # No-op when the root logger already has handlers (uvicorn, pytest)
    logging.basicConfig(level=numeric_level, handlers=[handler])

    logging.getLogger("dinner_bot").setLevel(numeric_level)

    # SQL echo and HTTP client chatter only at DEBUG
    if level != "DEBUG":
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging configured at %s level", level)
