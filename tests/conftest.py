"""
Pytest configuration and shared fixtures for unsafe-lines tests.
"""

import os

import pytest

from unsafe_lines.parsing.rust_frontend import RustFrontend

# Debug logging from the environment would leak into CLI output assertions.
os.environ.pop("DEBUG", None)
os.environ.pop("UNSAFE_LINES_FORMAT", None)


@pytest.fixture(scope="session")
def rust_frontend():
    """Single-file front end (module following off)."""
    return RustFrontend(follow_modules=False)


@pytest.fixture
def write_crate(tmp_path):
    """Write a mapping of relative path -> source text under tmp_path."""

    def _write(files: dict[str, str]):
        for rel, text in files.items():
            path = tmp_path / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        return tmp_path

    return _write
