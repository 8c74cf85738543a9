"""Syntax model consumed by the unsafe-region visitor.

The front end lowers whatever concrete tree its parser produces into this
small tagged-variant tree. Only the distinctions the analysis needs survive:
which declarations and blocks carry an explicit ``unsafe`` marking, and where
macro invocations start (their contents are opaque).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Iterator

from unsafe_lines.types.core import SourceExtent


class NodeKind(StrEnum):
    """Closed set of syntax node kinds."""

    CRATE = "crate"
    MODULE = "module"
    FN = "fn"
    TRAIT = "trait"
    DEFAULT_IMPL = "default_impl"
    IMPL = "impl"
    BLOCK = "block"
    MACRO_INVOCATION = "macro_invocation"
    OTHER = "other"


class Safety(StrEnum):
    """A node's own explicit safety marking."""

    SAFE = "safe"
    UNSAFE = "unsafe"


@dataclass(frozen=True)
class SyntaxNode:
    """One node of the lowered syntax tree."""

    kind: NodeKind
    extent: SourceExtent
    safety: Safety = Safety.SAFE
    children: tuple[SyntaxNode, ...] = ()
    # Front end node type, kept for diagnostics only
    label: str = field(default="", compare=False)

    @property
    def is_unsafe(self) -> bool:
        return self.safety is Safety.UNSAFE

    def iter_preorder(self) -> Iterator[SyntaxNode]:
        """Yield every node, this one first, without recursion."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def count_nodes(self) -> int:
        return sum(1 for _ in self.iter_preorder())
