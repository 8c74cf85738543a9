"""Report rendering.

Two historical text shapes are supported:

    Unsafe lines: 12
    Unsafe lines: 12/483 (2.48%)

plus a JSON document carrying every row.
"""

from __future__ import annotations

import json
from enum import StrEnum

from unsafe_lines.types.core import Metrics, Row, unsafe_percentage
from unsafe_lines.utils.logger import logger

REPORT_PREFIX = "Unsafe lines:"


class ReportFormat(StrEnum):
    """Text report shape."""

    COUNT = "count"
    PERCENTAGE = "percentage"
    AUTO = "auto"


def format_count(total_unsafe: int) -> str:
    return f"{REPORT_PREFIX} {total_unsafe}"


def format_with_total(total_unsafe: int, total_lines: int) -> str:
    percentage = unsafe_percentage(total_unsafe, total_lines)
    return f"{REPORT_PREFIX} {total_unsafe}/{total_lines} ({percentage}%)"


def format_report(metrics: Metrics, report_format: ReportFormat = ReportFormat.AUTO) -> str:
    """Render the one-line text report.

    ``percentage`` without a usable total falls back to the count-only
    shape instead of failing.
    """
    total_unsafe = metrics.total_unsafe

    if report_format is ReportFormat.COUNT:
        return format_count(total_unsafe)

    if not metrics.has_total:
        if report_format is ReportFormat.PERCENTAGE:
            logger.warning(
                "Percentage report requested but no total line count is available; "
                "reporting the unsafe line count only"
            )
        return format_count(total_unsafe)

    return format_with_total(total_unsafe, metrics.total_lines)


def format_row(row: Row) -> str:
    """``file:line:col-line:col  N`` for the spans listing."""
    return (
        f"{row.start.filename}:{row.start.line}:{row.start.column}"
        f"-{row.end.line}:{row.end.column}  {row.num_lines}"
    )


def render_json(metrics: Metrics) -> str:
    return json.dumps(metrics.to_dict(), indent=2)
