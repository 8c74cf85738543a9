"""Position-resolution protocol.

Defines the PositionResolver Protocol the metrics aggregator depends on.
``SourceMap`` is the production implementation; tests substitute small
in-memory resolvers.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from unsafe_lines.types.core import ResolvedLocation


@runtime_checkable
class PositionResolver(Protocol):
    """Lookup from byte offsets in a compilation unit to file positions.

    Implementations must be pure: resolving the same offset twice returns
    equal locations.
    """

    def resolve(self, offset: int) -> ResolvedLocation:
        """Resolve a byte offset to filename, 1-based line, 0-based column.

        Raises:
            ResolutionError: if the offset lies outside every known file.
        """
        ...

    def total_line_count(self) -> int:
        """Total number of source lines in the unit."""
        ...
