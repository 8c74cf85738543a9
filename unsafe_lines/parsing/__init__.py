"""Parsing front end: syntax model, source map and the tree-sitter Rust lowering."""

from unsafe_lines.parsing.protocols import PositionResolver
from unsafe_lines.parsing.rust_frontend import ParsedUnit, RustFrontend
from unsafe_lines.parsing.source_map import SourceFile, SourceMap
from unsafe_lines.parsing.syntax import NodeKind, Safety, SyntaxNode

__all__ = [
    "NodeKind",
    "Safety",
    "SyntaxNode",
    "PositionResolver",
    "SourceFile",
    "SourceMap",
    "ParsedUnit",
    "RustFrontend",
]
