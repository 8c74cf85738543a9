"""unsafe-lines command line interface."""

from unsafe_lines.cli.main import cli, main

__all__ = ["cli", "main"]
