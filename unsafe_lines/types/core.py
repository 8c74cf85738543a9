"""
Core types for the unsafe-lines metric.

These are the values handed from one stage to the next: the visitor emits
``SourceExtent`` values, the aggregator resolves them into ``Row`` values,
and a single ``Metrics`` value is reported.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

_TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class SourceExtent:
    """Half-open byte range ``[lo, hi)`` in the unit's combined source map."""

    lo: int
    hi: int

    def __post_init__(self) -> None:
        if self.lo < 0:
            raise ValueError("lo must be non-negative")
        if self.hi < self.lo:
            raise ValueError("hi must be >= lo")

    def shifted(self, offset: int) -> SourceExtent:
        """Return the same range moved by ``offset`` bytes."""
        return SourceExtent(self.lo + offset, self.hi + offset)


@dataclass(frozen=True)
class ResolvedLocation:
    """One endpoint of an extent, resolved to a human-readable position."""

    filename: str
    line: int
    column: int

    def __post_init__(self) -> None:
        if self.line < 1:
            raise ValueError("line must be >= 1")
        if self.column < 0:
            raise ValueError("column must be non-negative")

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"

    def to_dict(self) -> dict[str, Any]:
        return {"filename": self.filename, "line": self.line, "column": self.column}


@dataclass(frozen=True)
class Row:
    """A resolved, line-counted unsafe region.

    ``num_lines`` is ``max(1, end.line - start.line)``: a region that starts
    and ends on the same line still counts as one line.
    """

    start: ResolvedLocation
    end: ResolvedLocation
    num_lines: int

    def __post_init__(self) -> None:
        if self.num_lines < 1:
            raise ValueError("num_lines must be >= 1")

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "num_lines": self.num_lines,
        }


def unsafe_percentage(total_unsafe: int, total_lines: int | None) -> Decimal | None:
    """Percentage of unsafe lines, rounded half away from zero to 2 places.

    Uses exact decimal arithmetic so ``1/32`` gives ``3.13`` rather than the
    ``3.12`` produced by binary float formatting.

    Returns:
        The rounded percentage, or None when no usable total is available.
    """
    if not total_lines:
        return None
    ratio = Decimal(100 * total_unsafe) / Decimal(total_lines)
    return ratio.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Metrics:
    """Rows for every unsafe region plus the unit's total line count.

    ``total_lines`` is None for the older count-only report shape.
    """

    spans: tuple[Row, ...] = ()
    total_lines: int | None = None

    def __post_init__(self) -> None:
        if self.total_lines is not None and self.total_lines < 0:
            raise ValueError("total_lines must be non-negative")

    @property
    def total_unsafe(self) -> int:
        """Sum of ``num_lines`` across all rows (nested regions double count)."""
        return sum(row.num_lines for row in self.spans)

    @property
    def has_total(self) -> bool:
        """Whether a percentage can be computed."""
        return bool(self.total_lines)

    @property
    def percentage(self) -> float | None:
        value = unsafe_percentage(self.total_unsafe, self.total_lines)
        return float(value) if value is not None else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "total_unsafe": self.total_unsafe,
            "total_lines": self.total_lines,
            "percentage": self.percentage,
            "spans": [row.to_dict() for row in self.spans],
        }
