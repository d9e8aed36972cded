"""
Logging setup for the "pulse" logger hierarchy.

Every module logs through `logging.getLogger("pulse.<area>")`. This module
attaches a single console handler to the "pulse" parent logger so all of
them share one format. Called once from app.main at import time.

Log Format:
===========
    [2025-01-01 12:00:00] INFO [pulse.services.token_guard] Refreshed Google token for user ...

Never pass access tokens, refresh tokens, authorization codes or session
assertions to a logger. User ids are fine.
"""

import logging
import sys


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure the "pulse" logger.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ...)

    Returns:
        The configured "pulse" logger
    """
    logger = logging.getLogger("pulse")
    logger.setLevel(level.upper())

    # Idempotent: uvicorn --reload and tests import app.main repeatedly
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
