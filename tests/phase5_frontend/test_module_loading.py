"""
Phase 5 Tests: Out-of-line module loading

A crate root pulls ``mod foo;`` files into the same unit; rows then name the
file each region lives in.
"""

import pytest

from unsafe_lines.analysis.metrics import analyse_ast
from unsafe_lines.parsing import RustFrontend
from unsafe_lines.parsing.syntax import NodeKind
from unsafe_lines.types import ErrorCode, ParseError, ResourceError


def _parse(root, rel="src/lib.rs", follow_modules=True):
    return RustFrontend(follow_modules=follow_modules).parse_file(root / rel)


class TestModuleResolution:
    """Where `mod foo;` is looked for."""

    def test_sibling_file(self, write_crate):
        root = write_crate({"src/lib.rs": "mod a;\n", "src/a.rs": "pub fn f() {}\n"})
        unit = _parse(root)
        assert unit.files == [str(root / "src/lib.rs"), str(root / "src/a.rs")]

    def test_mod_rs_file(self, write_crate):
        root = write_crate({"src/lib.rs": "mod a;\n", "src/a/mod.rs": "pub fn f() {}\n"})
        assert _parse(root).files[1] == str(root / "src/a/mod.rs")

    def test_sibling_file_preferred_over_mod_rs(self, write_crate):
        root = write_crate(
            {"src/lib.rs": "mod a;\n", "src/a.rs": "\n", "src/a/mod.rs": "\n"}
        )
        assert _parse(root).files[1] == str(root / "src/a.rs")

    def test_nested_from_mod_rs(self, write_crate):
        root = write_crate(
            {"src/lib.rs": "mod a;\n", "src/a/mod.rs": "mod b;\n", "src/a/b.rs": "\n"}
        )
        assert _parse(root).files[2] == str(root / "src/a/b.rs")

    def test_nested_from_named_file(self, write_crate):
        root = write_crate(
            {"src/main.rs": "mod foo;\n", "src/foo.rs": "mod bar;\n", "src/foo/bar.rs": "\n"}
        )
        assert _parse(root, "src/main.rs").files[2] == str(root / "src/foo/bar.rs")

    def test_inside_inline_module(self, write_crate):
        root = write_crate(
            {"src/lib.rs": "mod outer {\n    mod inner;\n}\n", "src/outer/inner.rs": "\n"}
        )
        assert _parse(root).files[1] == str(root / "src/outer/inner.rs")

    def test_path_attribute(self, write_crate):
        root = write_crate(
            {
                "src/lib.rs": '#[path = "platform/unix.rs"]\nmod sys;\n',
                "src/platform/unix.rs": "\n",
            }
        )
        assert _parse(root).files[1] == str(root / "src/platform/unix.rs")

    def test_module_subtree_attached_to_declaration(self, write_crate):
        root = write_crate({"src/lib.rs": "mod a;\n", "src/a.rs": "unsafe fn f() {}\n"})
        unit = _parse(root)
        (module,) = unit.root.children
        assert module.kind is NodeKind.MODULE
        (file_root,) = module.children
        assert file_root.kind is NodeKind.CRATE
        assert file_root.extent.lo == unit.source_map.files[1].start_pos


class TestModuleFailures:
    """Missing files and cycles are fatal."""

    def test_missing_module(self, write_crate):
        root = write_crate({"src/lib.rs": "mod gone;\n"})
        with pytest.raises(ResourceError) as exc_info:
            _parse(root)
        error = exc_info.value
        assert error.code is ErrorCode.MODULE_NOT_FOUND
        assert "gone" in str(error)
        assert str(root / "src/gone.rs") in error.context.additional_info["candidates"]

    def test_missing_root(self, tmp_path):
        with pytest.raises(ResourceError) as exc_info:
            RustFrontend().parse_file(tmp_path / "nope.rs")
        assert exc_info.value.code is ErrorCode.FILE_NOT_FOUND

    def test_file_included_twice(self, write_crate):
        root = write_crate({"src/lib.rs": '#[path = "lib.rs"]\nmod again;\n'})
        with pytest.raises(ParseError) as exc_info:
            _parse(root)
        assert exc_info.value.code is ErrorCode.MODULE_CYCLE

    def test_syntax_error_in_module(self, write_crate):
        root = write_crate({"src/lib.rs": "mod a;\n", "src/a.rs": "fn broken( {\n"})
        with pytest.raises(ParseError) as exc_info:
            _parse(root)
        assert exc_info.value.context.file_path == str(root / "src/a.rs")


class TestFollowingDisabled:
    """follow_modules=False analyses the root file alone."""

    def test_only_root_file(self, write_crate):
        root = write_crate({"src/lib.rs": "mod a;\n", "src/a.rs": "unsafe fn f() {}\n"})
        unit = _parse(root, follow_modules=False)
        assert unit.files == [str(root / "src/lib.rs")]
        assert analyse_ast(unit.root, unit.source_map).total_unsafe == 0

    def test_missing_module_tolerated(self, write_crate):
        root = write_crate({"src/lib.rs": "mod gone;\nunsafe fn f() {}\n"})
        unit = _parse(root, follow_modules=False)
        assert analyse_ast(unit.root, unit.source_map).total_unsafe == 1


class TestMultiFileMetrics:
    """Rows and totals across files."""

    def test_rows_name_their_file(self, write_crate):
        root = write_crate(
            {
                "src/lib.rs": "mod a;\nunsafe fn top() {\n}\n",
                "src/a.rs": "\n\nunsafe fn inner() {\n    x();\n}\n",
            }
        )
        unit = _parse(root)
        metrics = analyse_ast(unit.root, unit.source_map)
        # the module's regions come first: `mod a;` precedes `top`
        first, second = metrics.spans
        assert first.start.filename == str(root / "src/a.rs")
        assert (first.start.line, first.end.line, first.num_lines) == (3, 5, 2)
        assert second.start.filename == str(root / "src/lib.rs")
        assert (second.start.line, second.num_lines) == (2, 1)

    def test_total_lines_sums_files(self, write_crate):
        root = write_crate(
            {"src/lib.rs": "mod a;\nmod b;\n", "src/a.rs": "\n\n\n", "src/b/mod.rs": "fn f() {}"}
        )
        unit = _parse(root)
        assert unit.source_map.total_line_count() == 2 + 3 + 1
