"""
Phase 4 Tests: Metrics aggregation

Rows are built from extents through a stub resolver, so line arithmetic can
be checked without parsing anything.
"""

import pytest

from helpers import LineResolver, crate, node, on_lines
from unsafe_lines.analysis.metrics import aggregate, analyse_ast, build_row
from unsafe_lines.parsing.syntax import NodeKind
from unsafe_lines.types import ResolutionError, ResolvedLocation, SourceExtent


class FailingResolver(LineResolver):
    """Resolver that refuses offsets past ``limit``."""

    def __init__(self, limit: int):
        super().__init__(total_lines=10)
        self.limit = limit

    def resolve(self, offset):
        if offset > self.limit:
            raise ResolutionError(f"offset {offset} is outside every file", offset=offset)
        return super().resolve(offset)


class TestBuildRow:
    """Line counting for a single region."""

    def test_multi_line_region(self):
        row = build_row(on_lines(5, 9), LineResolver(50))
        assert row.start == ResolvedLocation("lib.rs", 5, 0)
        assert row.end == ResolvedLocation("lib.rs", 9, 1)
        assert row.num_lines == 4

    def test_single_line_region_counts_one(self):
        row = build_row(SourceExtent(1110, 1140), LineResolver(50))
        assert row.start.line == row.end.line == 12
        assert row.num_lines == 1

    def test_empty_extent_counts_one(self):
        assert build_row(SourceExtent(300, 300), LineResolver(50)).num_lines == 1

    def test_both_endpoints_resolved_in_order(self):
        resolver = LineResolver(50)
        build_row(SourceExtent(120, 480), resolver)
        assert resolver.calls == [120, 480]


class TestAggregate:
    """Rows, totals and ordering."""

    def test_empty(self):
        metrics = aggregate([], LineResolver(483))
        assert metrics.spans == ()
        assert metrics.total_unsafe == 0
        assert metrics.total_lines == 483

    def test_rows_keep_input_order(self):
        extents = [on_lines(20, 22), on_lines(5, 9), on_lines(12, 12)]
        metrics = aggregate(extents, LineResolver(50))
        assert [row.start.line for row in metrics.spans] == [20, 5, 12]
        assert [row.num_lines for row in metrics.spans] == [2, 4, 1]
        assert metrics.total_unsafe == 7

    def test_total_always_taken_from_resolver(self):
        metrics = aggregate([on_lines(5, 9)], LineResolver(0))
        assert metrics.total_lines == 0
        assert metrics.percentage is None

    def test_resolution_failure_propagates(self):
        with pytest.raises(ResolutionError) as exc_info:
            aggregate([SourceExtent(0, 10), SourceExtent(20, 500)], FailingResolver(limit=100))
        assert exc_info.value.offset == 500


class TestAnalyseAst:
    """Visitor and aggregator together."""

    def test_unsafe_fn_over_fifty_lines(self):
        """An unsafe fn from line 5 to line 9 in a 50-line file."""
        extent = on_lines(5, 9)
        tree = crate(5000, node(NodeKind.FN, extent.lo, extent.hi, unsafe=True))
        metrics = analyse_ast(tree, LineResolver(50))
        assert metrics.total_unsafe == 4
        assert metrics.total_lines == 50
        assert metrics.percentage == 8.0

    def test_nested_regions_double_count(self):
        outer, inner = on_lines(1, 11), on_lines(3, 5)
        tree = crate(
            2000,
            node(
                NodeKind.FN,
                outer.lo,
                outer.hi,
                node(NodeKind.BLOCK, inner.lo, inner.hi, unsafe=True),
                unsafe=True,
            ),
        )
        metrics = analyse_ast(tree, LineResolver(20))
        assert [row.num_lines for row in metrics.spans] == [10, 2]
        assert metrics.total_unsafe == 12

    def test_macro_region_ignored(self):
        extent = on_lines(2, 4)
        tree = crate(
            1000,
            node(
                NodeKind.MACRO_INVOCATION,
                0,
                extent.hi,
                node(NodeKind.BLOCK, extent.lo, extent.hi, unsafe=True),
            ),
        )
        resolver = LineResolver(10)
        metrics = analyse_ast(tree, resolver)
        assert metrics.spans == ()
        assert resolver.calls == []
