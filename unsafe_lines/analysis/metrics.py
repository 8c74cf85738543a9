"""Metrics aggregator.

Turns the visitor's extents into resolved, line-counted rows and packages
them with the unit's total line count.
"""

from __future__ import annotations

from typing import Iterable

from unsafe_lines.analysis.visitor import UnsafeVisitor
from unsafe_lines.parsing.protocols import PositionResolver
from unsafe_lines.parsing.syntax import SyntaxNode
from unsafe_lines.types.core import Metrics, Row, SourceExtent
from unsafe_lines.utils.logger import logger


def build_row(extent: SourceExtent, resolver: PositionResolver) -> Row:
    """Resolve both endpoints of an extent and count its lines.

    A region whose endpoints share a line counts as one line.
    """
    start = resolver.resolve(extent.lo)
    end = resolver.resolve(extent.hi)
    return Row(start=start, end=end, num_lines=max(1, end.line - start.line))


def aggregate(extents: Iterable[SourceExtent], resolver: PositionResolver) -> Metrics:
    """Build Metrics from extents in visitor order.

    Args:
        extents: Unsafe regions, in traversal order.
        resolver: Position-resolution service for the unit; also supplies
            the total line count.

    Raises:
        ResolutionError: if an extent endpoint cannot be resolved.
    """
    rows = tuple(build_row(extent, resolver) for extent in extents)
    return Metrics(spans=rows, total_lines=resolver.total_line_count())


def analyse_ast(root: SyntaxNode, resolver: PositionResolver) -> Metrics:
    """Run the visitor over ``root`` and aggregate the result."""
    visitor = UnsafeVisitor()
    extents = visitor.visit(root)
    metrics = aggregate(extents, resolver)
    logger.debug(
        "Found {} unsafe regions covering {} lines (total lines: {})",
        len(metrics.spans),
        metrics.total_unsafe,
        metrics.total_lines,
    )
    return metrics
