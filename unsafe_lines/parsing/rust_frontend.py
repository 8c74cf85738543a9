"""Rust front end built on tree-sitter.

Parses a crate root (and, optionally, every out-of-line module it declares)
and lowers the concrete syntax tree into the ``SyntaxNode`` model. All files
of the unit share one ``SourceMap`` so extents from different files never
overlap.

Only what the unsafe analysis needs is preserved: which items and blocks are
explicitly ``unsafe``, where macro invocations are, and the extent of every
named node. Anonymous tokens are dropped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from unsafe_lines.constants import MAX_FILE_SIZE, MOD_RS_NAME
from unsafe_lines.parsing.source_map import SourceFile, SourceMap
from unsafe_lines.parsing.syntax import NodeKind, Safety, SyntaxNode
from unsafe_lines.types.core import SourceExtent
from unsafe_lines.types.errors import (
    ErrorCode,
    ErrorContext,
    ParseError,
    RecoveryAction,
    ResourceError,
)
from unsafe_lines.utils.logger import logger

if TYPE_CHECKING:
    from tree_sitter import Node, Parser


# tree-sitter-rust node type -> lowered kind. Anything else becomes OTHER.
NODE_KINDS: dict[str, NodeKind] = {
    "source_file": NodeKind.CRATE,
    "mod_item": NodeKind.MODULE,
    "function_item": NodeKind.FN,
    "trait_item": NodeKind.TRAIT,
    "impl_item": NodeKind.IMPL,
    "unsafe_block": NodeKind.BLOCK,
    "block": NodeKind.BLOCK,
    "macro_invocation": NodeKind.MACRO_INVOCATION,
    "macro_definition": NodeKind.MACRO_INVOCATION,
}

_PATH_ATTRIBUTE = re.compile(r'#\s*\[\s*path\s*=\s*"([^"]*)"\s*\]')
_ATTRIBUTE_SIBLINGS = frozenset({"attribute_item", "line_comment", "block_comment"})
# A function in the body of one of these is a method or associated fn, not an item.
_ASSOCIATED_ITEM_OWNERS = frozenset({"impl_item", "trait_item"})


@dataclass
class ParsedUnit:
    """Output of the front end: the lowered tree and its source map."""

    root: SyntaxNode
    source_map: SourceMap
    files: list[str] = field(default_factory=list)


@dataclass
class _Frame:
    """In-progress lowering of one tree-sitter node."""

    ts_node: Node
    module_dir: Path | None
    pending: list[Node]
    children: list[SyntaxNode] = field(default_factory=list)


def _has_unsafe_token(node: Node) -> bool:
    return any(child.type == "unsafe" for child in node.children)


def _node_text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def node_safety(node: Node) -> Safety:
    """Explicit safety marking of a tree-sitter node."""
    if node.type == "unsafe_block":
        return Safety.UNSAFE
    if node.type == "function_item":
        for child in node.children:
            if child.type == "function_modifiers" and _has_unsafe_token(child):
                return Safety.UNSAFE
        return Safety.SAFE
    if node.type in ("trait_item", "impl_item"):
        return Safety.UNSAFE if _has_unsafe_token(node) else Safety.SAFE
    return Safety.SAFE


def is_blanket_impl(node: Node) -> bool:
    """``impl<T: Bound> Trait for T``: a trait impl for one of its own parameters."""
    if node.child_by_field_name("trait") is None:
        return False
    self_type = node.child_by_field_name("type")
    params = node.child_by_field_name("type_parameters")
    if self_type is None or params is None or self_type.type != "type_identifier":
        return False

    names: set[str] = set()
    for param in params.named_children:
        if param.type == "type_identifier":
            names.add(_node_text(param))
            continue
        name = param.child_by_field_name("name") or param.child_by_field_name("left")
        if name is not None and name.type == "type_identifier":
            names.add(_node_text(name))
    return _node_text(self_type) in names


def is_associated_fn(node: Node) -> bool:
    """Whether a ``function_item`` sits in the body of an impl or trait."""
    body = node.parent
    if body is None or body.type != "declaration_list":
        return False
    owner = body.parent
    return owner is not None and owner.type in _ASSOCIATED_ITEM_OWNERS


def node_kind(node: Node) -> NodeKind:
    kind = NODE_KINDS.get(node.type, NodeKind.OTHER)
    if kind is NodeKind.FN and is_associated_fn(node):
        return NodeKind.OTHER
    if kind is NodeKind.IMPL and is_blanket_impl(node):
        return NodeKind.DEFAULT_IMPL
    return kind


def _path_attribute(mod_node: Node) -> str | None:
    """Value of a ``#[path = "..."]`` attribute directly above a ``mod`` item."""
    sibling = mod_node.prev_named_sibling
    while sibling is not None and sibling.type in _ATTRIBUTE_SIBLINGS:
        if sibling.type == "attribute_item":
            match = _PATH_ATTRIBUTE.search(_node_text(sibling))
            if match:
                return match.group(1)
        sibling = sibling.prev_named_sibling
    return None


def _find_syntax_error(root: Node) -> Node | None:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


class RustFrontend:
    """Parse Rust source into a ``ParsedUnit``.

    The tree-sitter parser is initialized lazily on first use and reused for
    every file of every unit parsed by this instance.

    Usage:
        frontend = RustFrontend()
        unit = frontend.parse_file("src/lib.rs")
        unit.root, unit.source_map
    """

    LANGUAGE = "rust"

    def __init__(self, follow_modules: bool = True) -> None:
        self.follow_modules = follow_modules
        self._parser: Parser | None = None

    # ----------------------------------------------------------------
    # Parser management
    # ----------------------------------------------------------------

    def _ensure_parser(self) -> Parser:
        if self._parser is not None:
            return self._parser

        try:
            import tree_sitter_language_pack as tslp
            from tree_sitter import Parser

            self._parser = Parser(tslp.get_language(self.LANGUAGE))
        except Exception as e:
            raise ParseError(
                f"Failed to initialize tree-sitter for {self.LANGUAGE}: {e}",
                user_message="The Rust parser could not be loaded.",
                code=ErrorCode.TREE_SITTER_FAILED,
                context=ErrorContext(operation="init_parser", component="rust_frontend"),
                recovery_actions=[
                    RecoveryAction(
                        "Install the parser dependencies",
                        command="pip install tree-sitter tree-sitter-language-pack",
                    )
                ],
                original_error=e,
            ) from e

        logger.debug("Initialized tree-sitter parser for {}", self.LANGUAGE)
        return self._parser

    # ----------------------------------------------------------------
    # Public API
    # ----------------------------------------------------------------

    def parse_source(self, source: str | bytes, filename: str = "<input>") -> ParsedUnit:
        """Parse a single in-memory file. ``mod foo;`` items are not followed."""
        builder = _UnitBuilder(self, follow_modules=False)
        root = builder.add_file(filename, source, module_dir=None)
        return builder.finish(root)

    def parse_file(self, path: str | Path) -> ParsedUnit:
        """Parse a crate root and, if enabled, its out-of-line modules."""
        path = Path(path)
        builder = _UnitBuilder(self, follow_modules=self.follow_modules)
        root = builder.load(path, module_dir=path.parent)
        return builder.finish(root)


class _UnitBuilder:
    """Per-unit state: the shared source map and the set of loaded files."""

    def __init__(self, frontend: RustFrontend, follow_modules: bool) -> None:
        self._frontend = frontend
        self._follow_modules = follow_modules
        self.source_map = SourceMap()
        self._loaded: set[Path] = set()

    def finish(self, root: SyntaxNode) -> ParsedUnit:
        files = [f.name for f in self.source_map.files]
        logger.debug("Parsed unit of {} file(s), {} nodes", len(files), root.count_nodes())
        return ParsedUnit(root=root, source_map=self.source_map, files=files)

    # ----------------------------------------------------------------
    # File loading
    # ----------------------------------------------------------------

    def load(self, path: Path, module_dir: Path) -> SyntaxNode:
        resolved = path.resolve()
        if resolved in self._loaded:
            raise ParseError(
                f"Module file {path} is included more than once",
                user_message="A module file is reachable through more than one `mod` declaration.",
                code=ErrorCode.MODULE_CYCLE,
                context=ErrorContext(operation="load_module", file_path=str(path)),
            )
        self._loaded.add(resolved)
        return self.add_file(str(path), self._read(path), module_dir=module_dir)

    @staticmethod
    def _read(path: Path) -> bytes:
        context = ErrorContext(operation="read_source", file_path=str(path))
        try:
            size = path.stat().st_size
            if size > MAX_FILE_SIZE:
                raise ResourceError(
                    f"{path} is {size} bytes, larger than the {MAX_FILE_SIZE} byte limit",
                    user_message="Source file is too large to analyse.",
                    code=ErrorCode.FILE_TOO_LARGE,
                    context=context,
                )
            return path.read_bytes()
        except FileNotFoundError as e:
            raise ResourceError(
                f"No such file: {path}",
                code=ErrorCode.FILE_NOT_FOUND,
                context=context,
                original_error=e,
            ) from e
        except OSError as e:
            raise ResourceError(
                f"Could not read {path}: {e}",
                code=ErrorCode.FILE_READ_FAILED,
                context=context,
                original_error=e,
            ) from e

    def add_file(self, name: str, source: str | bytes, module_dir: Path | None) -> SyntaxNode:
        source_file = self.source_map.add_file(name, source)
        tree = self._frontend._ensure_parser().parse(source_file.data)
        root = tree.root_node
        if root.has_error:
            self._raise_syntax_error(root, source_file)
        logger.debug("Parsed {} ({} bytes)", name, len(source_file.data))
        return self._lower(root, source_file, module_dir)

    def _raise_syntax_error(self, root: Node, source_file: SourceFile) -> None:
        bad = _find_syntax_error(root) or root
        location = source_file.locate(source_file.start_pos + bad.start_byte)
        what = f"missing {bad.type}" if bad.is_missing else "syntax error"
        raise ParseError(
            f"{what} at {location}",
            user_message="The source contains syntax errors; fix them before measuring.",
            context=ErrorContext(
                operation="parse",
                file_path=source_file.name,
                component="rust_frontend",
                additional_info={"line": location.line, "column": location.column},
            ),
        )

    # ----------------------------------------------------------------
    # Lowering
    # ----------------------------------------------------------------

    def _lower(self, ts_root: Node, source_file: SourceFile, module_dir: Path | None) -> SyntaxNode:
        base = source_file.start_pos
        stack = [_Frame(ts_root, module_dir, list(reversed(ts_root.named_children)))]
        while True:
            frame = stack[-1]
            if frame.pending:
                child = frame.pending.pop()
                stack.append(
                    _Frame(child, self._child_dir(frame), list(reversed(child.named_children)))
                )
                continue

            stack.pop()
            children = frame.children
            if frame.ts_node.type == "mod_item" and frame.ts_node.child_by_field_name("body") is None:
                children = self._out_of_line_module(frame, source_file)

            node = SyntaxNode(
                kind=node_kind(frame.ts_node),
                extent=SourceExtent(frame.ts_node.start_byte, frame.ts_node.end_byte).shifted(base),
                safety=node_safety(frame.ts_node),
                children=tuple(children),
                label=frame.ts_node.type,
            )
            if not stack:
                return node
            stack[-1].children.append(node)

    @staticmethod
    def _child_dir(frame: _Frame) -> Path | None:
        """Inline ``mod a { ... }`` nests the directory used for its children."""
        if frame.module_dir is None or frame.ts_node.type != "mod_item":
            return frame.module_dir
        return frame.module_dir / _node_text(frame.ts_node.child_by_field_name("name"))

    def _out_of_line_module(self, frame: _Frame, source_file: SourceFile) -> list[SyntaxNode]:
        name = _node_text(frame.ts_node.child_by_field_name("name"))
        if not self._follow_modules or frame.module_dir is None:
            logger.debug("Not following `mod {};` in {}", name, source_file.name)
            return []

        path = self._module_path(frame, name, source_file)
        logger.debug("Loading `mod {};` from {}", name, path)
        child_dir = path.parent if path.name == MOD_RS_NAME else path.parent / path.stem
        return [self.load(path, module_dir=child_dir)]

    @staticmethod
    def _module_path(frame: _Frame, name: str, source_file: SourceFile) -> Path:
        override = _path_attribute(frame.ts_node)
        if override is not None:
            candidates = [Path(source_file.name).parent / override]
        else:
            candidates = [frame.module_dir / f"{name}.rs", frame.module_dir / name / "mod.rs"]

        for candidate in candidates:
            if candidate.is_file():
                return candidate

        raise ResourceError(
            f"File not found for module `{name}` declared in {source_file.name}",
            user_message=f"Module `{name}` could not be found.",
            code=ErrorCode.MODULE_NOT_FOUND,
            context=ErrorContext(
                operation="load_module",
                file_path=source_file.name,
                additional_info={"candidates": [str(c) for c in candidates]},
            ),
            recovery_actions=[
                RecoveryAction(f"Create {candidates[0]}"),
                RecoveryAction("Skip out-of-line modules", command="unsafe-lines count --no-follow-modules"),
            ],
        )
