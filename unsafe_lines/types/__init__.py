"""
unsafe-lines type definitions.

This module exports the value types passed between pipeline stages and the
error hierarchy.
"""

# Core types
from .core import (
    Metrics,
    ResolvedLocation,
    Row,
    SourceExtent,
    unsafe_percentage,
)

# Error types
from .errors import (
    ConfigurationError,
    ErrorCode,
    ErrorContext,
    ErrorSeverity,
    ParseError,
    RecoveryAction,
    ResolutionError,
    ResourceError,
    UnsafeLinesError,
)

__all__ = [
    # Core types
    "SourceExtent",
    "ResolvedLocation",
    "Row",
    "Metrics",
    "unsafe_percentage",
    # Error types
    "ErrorCode",
    "ErrorSeverity",
    "RecoveryAction",
    "ErrorContext",
    "UnsafeLinesError",
    "ParseError",
    "ResolutionError",
    "ResourceError",
    "ConfigurationError",
]
