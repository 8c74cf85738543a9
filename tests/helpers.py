"""Builders for synthetic syntax trees and resolvers used across tests."""

from __future__ import annotations

from unsafe_lines.parsing.syntax import NodeKind, Safety, SyntaxNode
from unsafe_lines.types.core import ResolvedLocation, SourceExtent


def node(kind, lo, hi, *children, unsafe=False):
    return SyntaxNode(
        kind=kind,
        extent=SourceExtent(lo, hi),
        safety=Safety.UNSAFE if unsafe else Safety.SAFE,
        children=tuple(children),
    )


def crate(hi, *children):
    return node(NodeKind.CRATE, 0, hi, *children)


class LineResolver:
    """Resolver where every offset maps to ``line = offset // width + 1``."""

    def __init__(self, total_lines: int, width: int = 100, filename: str = "lib.rs"):
        self.total_lines = total_lines
        self.width = width
        self.filename = filename
        self.calls: list[int] = []

    def resolve(self, offset: int) -> ResolvedLocation:
        self.calls.append(offset)
        return ResolvedLocation(self.filename, offset // self.width + 1, offset % self.width)

    def total_line_count(self) -> int:
        return self.total_lines


def on_lines(start_line: int, end_line: int, width: int = 100) -> SourceExtent:
    """Extent from column 0 of ``start_line`` to column 1 of ``end_line``."""
    return SourceExtent((start_line - 1) * width, (end_line - 1) * width + 1)
