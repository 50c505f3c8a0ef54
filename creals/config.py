"""Runtime limits and logging setup, read from the environment.

Limits are looked up on this module at call time, so tests and callers may
assign to them after import.
"""

import logging
import os
import sys

logger = logging.getLogger(__name__)


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw, 0)
    except ValueError:
        logger.warning("ignoring %s=%r: not an integer, using %d", name, raw, default)
        return default


# Highest precision an inverse will request from its operand before giving up.
MAX_PRECISION: int = _int_from_env("CREALS_MAX_PRECISION", 1 << 20)


def log_level_from_env() -> int:
    levels = {
        "CRITICAL": logging.CRITICAL,
        "ERROR": logging.ERROR,
        "WARNING": logging.WARNING,
        "INFO": logging.INFO,
        "DEBUG": logging.DEBUG,
    }
    return levels.get(os.environ.get("CREALS_LOG_LEVEL", "WARNING").upper(), logging.WARNING)


def configure_logging():
    """Console logging for scripts. The library itself installs no handlers."""
    logging.basicConfig(
        level=log_level_from_env(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
