"""Unsafe-region visitor.

Walks a lowered syntax tree once, pre-order and depth-first, and records the
extent of every node explicitly marked ``unsafe``:

- unsafe item functions (free, module-level or nested; not methods)
- unsafe traits
- unsafe default / blanket impls
- unsafe impl blocks
- unsafe blocks, at any depth

A node's own marking is all that matters, so an unsafe block inside an unsafe
function is recorded as well. Macro invocations are opaque: they are neither
classified nor descended into.
"""

from __future__ import annotations

from unsafe_lines.parsing.syntax import NodeKind, SyntaxNode
from unsafe_lines.types.core import SourceExtent

# Node kinds that count when explicitly marked unsafe.
UNSAFE_ELIGIBLE_KINDS: frozenset[NodeKind] = frozenset(
    {
        NodeKind.FN,
        NodeKind.TRAIT,
        NodeKind.DEFAULT_IMPL,
        NodeKind.IMPL,
        NodeKind.BLOCK,
    }
)

# Node kinds whose subtree is never visited.
OPAQUE_KINDS: frozenset[NodeKind] = frozenset({NodeKind.MACRO_INVOCATION})


def classify(node: SyntaxNode) -> SourceExtent | None:
    """Return the node's extent if it is an unsafe region, else None."""
    if node.kind in UNSAFE_ELIGIBLE_KINDS and node.is_unsafe:
        return node.extent
    return None


def collect_unsafe_extents(root: SyntaxNode, accumulator: list[SourceExtent]) -> list[SourceExtent]:
    """Append the extent of every unsafe region under ``root`` to ``accumulator``.

    Args:
        root: Root of the tree (normally the crate node).
        accumulator: List extended in traversal order.

    Returns:
        The same accumulator, for chaining.
    """
    stack = [root]
    while stack:
        node = stack.pop()
        if node.kind in OPAQUE_KINDS:
            continue
        extent = classify(node)
        if extent is not None:
            accumulator.append(extent)
        stack.extend(reversed(node.children))
    return accumulator


class UnsafeVisitor:
    """Collects unsafe regions from one or more trees.

    Usage:
        visitor = UnsafeVisitor()
        visitor.visit(unit.root)
        visitor.unsafe_spans  # [SourceExtent, ...]
    """

    def __init__(self) -> None:
        self.unsafe_spans: list[SourceExtent] = []

    def visit(self, root: SyntaxNode) -> list[SourceExtent]:
        return collect_unsafe_extents(root, self.unsafe_spans)


def find_unsafe_regions(root: SyntaxNode) -> list[SourceExtent]:
    """Convenience wrapper returning a fresh list of extents."""
    return collect_unsafe_extents(root, [])
