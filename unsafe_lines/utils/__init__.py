"""
unsafe-lines utility modules.

- Logging (STDERR only, STDOUT is reserved for the report)
"""

from .logger import configure_logging, is_debug_enabled, logger

__all__ = [
    "configure_logging",
    "is_debug_enabled",
    "logger",
]
