"""Analysis driver.

Parses one compilation unit, stops after parsing, and runs the unsafe-region
visitor and metrics aggregator over the result. Every fatal condition
propagates as an ``UnsafeLinesError``; callers decide how to exit.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from unsafe_lines.analysis.metrics import analyse_ast
from unsafe_lines.config import DEFAULT_CONFIG, UnsafeLinesConfig
from unsafe_lines.parsing.rust_frontend import ParsedUnit, RustFrontend
from unsafe_lines.types.core import Metrics
from unsafe_lines.utils.logger import logger


@dataclass
class AnalysisResult:
    """Metrics together with the unit they were computed from."""

    unit: ParsedUnit
    metrics: Metrics


def analyse_unit(unit: ParsedUnit) -> AnalysisResult:
    return AnalysisResult(unit=unit, metrics=analyse_ast(unit.root, unit.source_map))


def analyse_path(path: str | Path, config: UnsafeLinesConfig = DEFAULT_CONFIG) -> AnalysisResult:
    """Measure the crate rooted at ``path``."""
    logger.debug("Analysing {} (follow_modules={})", path, config.follow_modules)
    frontend = RustFrontend(follow_modules=config.follow_modules)
    return analyse_unit(frontend.parse_file(path))


def analyse_source(
    source: str | bytes,
    filename: str = "<input>",
    config: UnsafeLinesConfig = DEFAULT_CONFIG,
) -> AnalysisResult:
    """Measure a single in-memory file."""
    frontend = RustFrontend(follow_modules=config.follow_modules)
    return analyse_unit(frontend.parse_source(source, filename))


def exceeds_threshold(metrics: Metrics, fail_above: float | None) -> bool:
    """Whether the unsafe percentage is strictly above ``fail_above``.

    Without a threshold or without a total line count there is nothing to
    compare, so the gate passes.
    """
    if fail_above is None:
        return False
    percentage = metrics.percentage
    if percentage is None:
        logger.warning("No total line count available; --fail-above check skipped")
        return False
    return percentage > fail_above
