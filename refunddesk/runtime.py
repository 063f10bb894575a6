"""
Runtime wiring shared by the HTTP and Streamlit shells.

Configuration, logging, the history sink and the dispute provider are set
up lazily on first use; ``create_session`` hands out mounted form sessions
bound to those shared resources.
"""

from __future__ import annotations

import logging
import os
import random
from typing import Optional

from dotenv import load_dotenv

from .engine.session import RefundFormSession
from .engine.timers import TimerBackend
from .storage.disputes import DisputeListProvider
from .storage.history import JsonFileSink, SubmissionHistory
from .utils.clipboard import ClipboardSink
from .utils.config import Config
from .utils.logging import setup_logging

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

_config: Optional[Config] = None
_history: Optional[SubmissionHistory] = None
_disputes: Optional[DisputeListProvider] = None


def _initialize_system() -> None:
    """Load config and build shared resources on first use."""
    global _config, _history, _disputes

    if _config is not None:
        return

    config = Config.load(os.getenv("REFUNDDESK_CONFIG", "config.yaml"))
    setup_logging(
        level=config.logging.level,
        log_format=config.logging.format,
        log_file=config.logging.file or None,
    )
    logger.info(
        f"Configuration loaded: variant={config.form.variant}, "
        f"max_file_size={config.form.max_file_size_bytes}"
    )

    _history = SubmissionHistory(
        JsonFileSink(config.storage.history_path),
        key=config.storage.history_key,
        limit=config.storage.history_limit,
    )
    _disputes = DisputeListProvider(config.storage.disputes_path)
    _config = config
    logger.info("Refund desk runtime initialized")


def get_config() -> Config:
    _initialize_system()
    return _config


def get_history() -> SubmissionHistory:
    _initialize_system()
    return _history


def get_dispute_provider() -> DisputeListProvider:
    _initialize_system()
    return _disputes


def create_session(
    timers: TimerBackend,
    clipboard: Optional[ClipboardSink] = None,
    rng: Optional[random.Random] = None,
) -> RefundFormSession:
    """
    Create and mount a form session on the shared runtime.

    Args:
        timers: Timer backend for the session's rotation groups
        clipboard: Optional clipboard sink
        rng: Optional random source for case IDs

    Returns:
        Mounted RefundFormSession
    """
    _initialize_system()
    session = RefundFormSession(
        config=_config,
        timers=timers,
        history=_history,
        clipboard=clipboard,
        rng=rng,
    )
    return session.mount()


def reset_runtime() -> None:
    """Drop shared resources so the next call reloads configuration. Used in testing."""
    global _config, _history, _disputes
    _config = None
    _history = None
    _disputes = None
