"""Configuration for unsafe-lines.

Settings are layered, lowest precedence first:

1. built-in defaults
2. ``.unsafe-lines.json`` (found by walking up from the analysed path, or
   passed explicitly)
3. the ``UNSAFE_LINES_FORMAT`` environment variable
4. command-line options (applied by the CLI via ``with_overrides``)
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Mapping

from unsafe_lines.analysis.report import ReportFormat
from unsafe_lines.constants import CONFIG_FILE_NAME, FORMAT_ENV_VAR
from unsafe_lines.types.errors import ConfigurationError, ErrorCode, ErrorContext
from unsafe_lines.utils.logger import logger


@dataclass(frozen=True)
class UnsafeLinesConfig:
    report_format: ReportFormat = ReportFormat.AUTO
    follow_modules: bool = True
    # Exit with a distinct status when the percentage is above this value
    fail_above: float | None = None
    json_output: bool = False

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["report_format"] = str(self.report_format)
        return data

    def with_overrides(self, **overrides: Any) -> UnsafeLinesConfig:
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        if not values:
            return self
        return _validated(replace(self, **values), source="command line")


DEFAULT_CONFIG = UnsafeLinesConfig()

_FIELDS = frozenset(DEFAULT_CONFIG.to_dict())


def _invalid(message: str, source: str | None) -> ConfigurationError:
    return ConfigurationError(
        message,
        user_message=f"Invalid configuration: {message}",
        code=ErrorCode.CONFIG_VALIDATION_FAILED,
        context=ErrorContext(operation="load_config", file_path=source),
    )


def parse_report_format(value: Any, source: str | None = None) -> ReportFormat:
    try:
        return ReportFormat(str(value).lower())
    except ValueError:
        choices = ", ".join(f.value for f in ReportFormat)
        raise _invalid(f"report_format must be one of {choices}, got {value!r}", source) from None


def _validated(config: UnsafeLinesConfig, source: str | None) -> UnsafeLinesConfig:
    report_format = parse_report_format(config.report_format, source)
    if not isinstance(config.follow_modules, bool):
        raise _invalid("follow_modules must be true or false", source)
    if not isinstance(config.json_output, bool):
        raise _invalid("json_output must be true or false", source)

    fail_above = config.fail_above
    if fail_above is not None:
        if isinstance(fail_above, bool) or not isinstance(fail_above, (int, float)):
            raise _invalid("fail_above must be a number", source)
        if fail_above < 0:
            raise _invalid("fail_above must be non-negative", source)
        fail_above = float(fail_above)

    return replace(config, report_format=report_format, fail_above=fail_above)


def config_from_dict(data: Mapping[str, Any], source: str | None = None) -> UnsafeLinesConfig:
    """Merge a mapping onto the defaults, ignoring unknown keys."""
    unknown = sorted(set(data) - _FIELDS)
    if unknown:
        logger.warning("Ignoring unknown configuration keys in {}: {}", source, ", ".join(unknown))
    values = {k: v for k, v in data.items() if k in _FIELDS}
    return _validated(replace(DEFAULT_CONFIG, **values), source)


def find_config_file(start: str | Path) -> Path | None:
    """Walk up from ``start`` looking for ``.unsafe-lines.json``."""
    directory = Path(start).resolve()
    if not directory.is_dir():
        directory = directory.parent
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
    return None


def read_config_file(path: str | Path) -> UnsafeLinesConfig:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(
            f"Could not read {path}: {e}",
            context=ErrorContext(operation="load_config", file_path=str(path)),
            original_error=e,
        ) from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"{path} is not valid JSON: {e}",
            user_message="Configuration file is not valid JSON.",
            context=ErrorContext(operation="load_config", file_path=str(path)),
            original_error=e,
        ) from e

    if not isinstance(data, dict):
        raise _invalid("top level must be a JSON object", str(path))
    return config_from_dict(data, source=str(path))


def load_config(
    start: str | Path | None = None,
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> UnsafeLinesConfig:
    """Resolve the effective configuration (before command-line overrides).

    Args:
        start: File or directory to start the config file search from.
        config_path: Explicit config file; disables the search.
        environ: Environment mapping, ``os.environ`` by default.
    """
    environ = os.environ if environ is None else environ

    path: Path | None = Path(config_path) if config_path is not None else None
    if path is None and start is not None:
        path = find_config_file(start)

    if path is not None:
        logger.debug("Loading configuration from {}", path)
        config = read_config_file(path)
    else:
        config = DEFAULT_CONFIG

    env_format = environ.get(FORMAT_ENV_VAR)
    if env_format:
        config = replace(config, report_format=parse_report_format(env_format, FORMAT_ENV_VAR))

    return config


def write_default_config(directory: str | Path, force: bool = False) -> Path:
    """Write ``.unsafe-lines.json`` with default settings into ``directory``."""
    path = Path(directory) / CONFIG_FILE_NAME
    if path.exists() and not force:
        raise ConfigurationError(
            f"{path} already exists",
            user_message="A configuration file already exists.",
            context=ErrorContext(operation="init", file_path=str(path)),
        )
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(DEFAULT_CONFIG.to_dict(), indent=2) + "\n", encoding="utf-8")
    return path
