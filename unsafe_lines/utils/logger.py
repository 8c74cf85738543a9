"""
Logging utility for unsafe-lines.

STDOUT is reserved for the report line (or JSON document) so that CI jobs can
capture it verbatim. All log output goes to STDERR.

Debug output can be enabled with ``--verbose`` on the command line or with
``DEBUG=true`` in the environment.
"""

import os
import sys

from loguru import logger as loguru_logger

_LOG_FORMAT = "<level>{level: <8}</level> | {name}:{line} - {message}"


def is_debug_enabled() -> bool:
    """Check if debug mode is enabled."""
    return os.environ.get("DEBUG", "").lower() == "true"


def configure_logging(verbose: bool = False) -> None:
    """
    Replace loguru's default sink with a single STDERR sink.

    Args:
        verbose: Log at DEBUG instead of WARNING.
    """
    level = "DEBUG" if verbose or is_debug_enabled() else "WARNING"
    loguru_logger.remove()
    loguru_logger.add(sys.stderr, level=level, format=_LOG_FORMAT)


# Export loguru logger for direct use
logger = loguru_logger
