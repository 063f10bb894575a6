"""Logging setup for the refund desk.

Records are stamped with the form session and engine component that
produced them, so the interleaved output of many sessions in one server
process can be told apart:

    2024-03-01 12:30:00 - refunddesk.engine.submission - INFO - [3f9c0a1b2d4e submission] Submission accepted as RFD-7K2QX

The context lives in a ContextVar, so concurrent requests and asyncio
tasks each see their own values.
"""

import contextlib
import functools
import logging
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

DEFAULT_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(session_id)s %(component)s] %(message)s"
)

# Values used when a record is logged outside any session or component
CONTEXT_DEFAULTS: Dict[str, Any] = {"session_id": "-", "component": "-"}

_log_context: ContextVar[Dict[str, Any]] = ContextVar("refunddesk_log_context", default={})


class ContextFilter(logging.Filter):
    """Stamp the active logging context onto every record."""

    def __init__(self, defaults: Optional[Dict[str, Any]] = None):
        super().__init__()
        self.defaults = dict(CONTEXT_DEFAULTS if defaults is None else defaults)

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in {**self.defaults, **get_context()}.items():
            setattr(record, key, value)
        return True


def setup_logging(
    level: str = "INFO",
    log_format: str = DEFAULT_FORMAT,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up logging for the shells with optional file output.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format string; may use %(session_id)s and %(component)s
        log_file: Optional path to log file

    Returns:
        Configured root logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(log_format)
    context_filter = ContextFilter()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(context_filter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(context_filter)
        root_logger.addHandler(file_handler)

    return root_logger


def get_context() -> Dict[str, Any]:
    """Return a copy of the context active in the current task or thread."""
    return dict(_log_context.get())


@contextlib.contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """
    Add fields to every record logged inside the block.

    Example:
        with log_context(session_id=session.session_id):
            logger.info("Submitting")  # carries the session id
    """
    token = _log_context.set({**_log_context.get(), **fields})
    try:
        yield
    finally:
        _log_context.reset(token)


def with_context(**context_kwargs):
    """
    Decorator to add fixed context to all log messages within a function.

    Example:
        @with_context(component="submission")
        def submit(self):
            logger.info("Submitting")  # Includes component
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with log_context(**context_kwargs):
                return func(*args, **kwargs)
        return wrapper
    return decorator


def with_session_context(method):
    """Decorator for session methods: log under the instance's session_id."""
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        with log_context(session_id=self.session_id):
            return method(self, *args, **kwargs)
    return wrapper
