"""Shared constants for unsafe-lines.

Centralizes file names, environment variables and process exit codes so the
CLI, the driver and the tests agree on them.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


# Name of the per-project configuration file, searched upwards from the
# analysed file's directory.
CONFIG_FILE_NAME: str = ".unsafe-lines.json"

# Environment variable overriding the configured report format.
FORMAT_ENV_VAR: str = "UNSAFE_LINES_FORMAT"

# Modules declared in a crate root or in a ``mod.rs`` file live next to it;
# modules declared in any other file live in a directory named after it.
MOD_RS_NAME: str = "mod.rs"

# Maximum source file size accepted by the front end (8 MB).
MAX_FILE_SIZE: int = 8_000_000

# Process exit codes. 2 is left to click for usage errors.
EXIT_OK: int = 0
EXIT_FAILURE: int = 1
EXIT_THRESHOLD_EXCEEDED: int = 3

# Label used for source read from stdin.
STDIN_FILENAME: str = "<stdin>"
