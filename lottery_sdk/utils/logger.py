"""Shared logging utilities for the lottery SDK.

Provides a central get_logger(name) factory that configures a console handler
(and an optional file handler) once, with the log level and file path
controlled via the LOG_LEVEL and LOG_FILE environment variables.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional


_configured = False


def _ensure_configured() -> None:
    global _configured
    if _configured:
        return

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', '')

    level = getattr(logging, LOG_LEVEL.upper(), logging.INFO)

    root = logging.getLogger('lottery_sdk')
    root.setLevel(level)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    # Console handler
    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(formatter)
    root.addHandler(ch)

    # File handler, only when requested
    if LOG_FILE:
        try:
            log_path = Path(LOG_FILE)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(log_path, encoding='utf-8')
            fh.setLevel(level)
            fh.setFormatter(formatter)
            root.addHandler(fh)
        except OSError:
            root.exception('Failed to create file log handler; continuing with console only')

    _configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a configured logger for the given name.

    The first call configures the ``lottery_sdk`` logger according to the
    environment (LOG_LEVEL, LOG_FILE). Loggers named under the package inherit
    its handlers and level.
    """
    _ensure_configured()
    return logging.getLogger(name)
