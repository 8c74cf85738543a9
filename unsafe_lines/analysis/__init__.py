"""Unsafe-region analysis: visitor, aggregator and report rendering."""

from unsafe_lines.analysis.metrics import aggregate, analyse_ast, build_row
from unsafe_lines.analysis.report import ReportFormat, format_report, format_row, render_json
from unsafe_lines.analysis.visitor import (
    UNSAFE_ELIGIBLE_KINDS,
    UnsafeVisitor,
    classify,
    collect_unsafe_extents,
    find_unsafe_regions,
)

__all__ = [
    "UNSAFE_ELIGIBLE_KINDS",
    "UnsafeVisitor",
    "classify",
    "collect_unsafe_extents",
    "find_unsafe_regions",
    "build_row",
    "aggregate",
    "analyse_ast",
    "ReportFormat",
    "format_report",
    "format_row",
    "render_json",
]
