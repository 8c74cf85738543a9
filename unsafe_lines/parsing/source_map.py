"""Combined source map for one compilation unit.

Every file of the unit is placed into a single byte address space. A file
starting at ``start_pos`` occupies ``[start_pos, end_pos]``, both ends
inclusive so an extent ending exactly at end of file still resolves, and the
next file starts at ``end_pos + 1``.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field

from unsafe_lines.types.core import ResolvedLocation
from unsafe_lines.types.errors import ErrorContext, ResolutionError


def _line_starts(data: bytes) -> list[int]:
    starts = [0]
    pos = data.find(b"\n")
    while pos != -1:
        starts.append(pos + 1)
        pos = data.find(b"\n", pos + 1)
    return starts


@dataclass
class SourceFile:
    """A single file registered in a SourceMap."""

    name: str
    start_pos: int
    data: bytes
    line_starts: list[int] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        if not self.line_starts:
            self.line_starts = _line_starts(self.data)

    @property
    def end_pos(self) -> int:
        return self.start_pos + len(self.data)

    @property
    def line_count(self) -> int:
        """Newline count, plus one for an unterminated last line."""
        if not self.data:
            return 0
        newlines = len(self.line_starts) - 1
        return newlines if self.data.endswith(b"\n") else newlines + 1

    def contains(self, offset: int) -> bool:
        return self.start_pos <= offset <= self.end_pos

    def locate(self, offset: int) -> ResolvedLocation:
        """Resolve an absolute offset known to fall inside this file."""
        local = offset - self.start_pos
        index = bisect.bisect_right(self.line_starts, local) - 1
        line_start = self.line_starts[index]
        # Columns count characters, not bytes
        column = len(self.data[line_start:local].decode("utf-8", errors="replace"))
        return ResolvedLocation(filename=self.name, line=index + 1, column=column)


class SourceMap:
    """Position-resolution service over all files of a unit.

    Usage:
        source_map = SourceMap()
        lib = source_map.add_file("src/lib.rs", text)
        source_map.resolve(lib.start_pos + 10)
    """

    def __init__(self) -> None:
        self._files: list[SourceFile] = []
        self._starts: list[int] = []

    @property
    def files(self) -> list[SourceFile]:
        return list(self._files)

    def next_start_pos(self) -> int:
        if not self._files:
            return 0
        return self._files[-1].end_pos + 1

    def add_file(self, name: str, source: str | bytes) -> SourceFile:
        """Append a file to the map and return it with its start position."""
        data = source.encode("utf-8") if isinstance(source, str) else source
        source_file = SourceFile(name=name, start_pos=self.next_start_pos(), data=data)
        self._files.append(source_file)
        self._starts.append(source_file.start_pos)
        return source_file

    def lookup_file(self, offset: int) -> SourceFile:
        index = bisect.bisect_right(self._starts, offset) - 1
        if index < 0 or not self._files[index].contains(offset):
            raise ResolutionError(
                f"Byte offset {offset} is outside every file in the source map",
                offset=offset,
                context=ErrorContext(
                    operation="resolve",
                    component="source_map",
                    additional_info={"files": [f.name for f in self._files]},
                ),
            )
        return self._files[index]

    def resolve(self, offset: int) -> ResolvedLocation:
        return self.lookup_file(offset).locate(offset)

    def total_line_count(self) -> int:
        return sum(f.line_count for f in self._files)
