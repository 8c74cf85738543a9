"""
Error handling system for unsafe-lines.

Every fatal condition the analysis can hit is raised as an
``UnsafeLinesError`` subclass. The driver never catches these; the CLI turns
them into a formatted message on stderr and a non-zero exit status.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any

from unsafe_lines.constants import utcnow


class ErrorCode(IntEnum):
    """Internal error codes for categorization."""

    # File System Errors (2000-2999)
    FILE_NOT_FOUND = 2001
    FILE_READ_FAILED = 2002
    FILE_TOO_LARGE = 2003
    MODULE_NOT_FOUND = 2004

    # Parsing/Analysis Errors (3000-3999)
    PARSE_FAILED = 3002
    TREE_SITTER_FAILED = 3003
    MODULE_CYCLE = 3004
    POSITION_UNRESOLVED = 3005

    # Configuration Errors (4000-4999)
    INVALID_CONFIG = 4001
    CONFIG_VALIDATION_FAILED = 4003


class ErrorSeverity(str, Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class RecoveryAction:
    """Suggested action to recover from an error."""

    description: str
    command: str | None = None


@dataclass
class ErrorContext:
    """Context information for an error."""

    operation: str | None = None
    file_path: str | None = None
    component: str | None = None
    timestamp: datetime = field(default_factory=utcnow)
    additional_info: dict[str, Any] = field(default_factory=dict)


class UnsafeLinesError(Exception):
    """Base error class for unsafe-lines."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        user_message: str,
        severity: str = ErrorSeverity.MEDIUM,
        context: ErrorContext | None = None,
        recovery_actions: list[RecoveryAction] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.severity = severity
        self.user_message = user_message
        self.context = context or ErrorContext()
        self.recovery_actions = recovery_actions or []
        self.original_error = original_error

    def get_formatted_message(self) -> str:
        """Get a formatted error message for display to users."""
        parts = [
            f"[Error] {self.user_message}",
            f"   Code: {self.code.value}",
            f"   Detail: {self}",
        ]

        if self.context.operation:
            parts.append(f"   Operation: {self.context.operation}")
        if self.context.file_path:
            parts.append(f"   File: {self.context.file_path}")
        if self.context.component:
            parts.append(f"   Component: {self.context.component}")

        if self.recovery_actions:
            parts.append("")
            parts.append("Suggested actions:")
            for i, action in enumerate(self.recovery_actions, 1):
                parts.append(f"   {i}. {action.description}")
                if action.command:
                    parts.append(f"      Run: {action.command}")

        return "\n".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "name": self.__class__.__name__,
            "code": self.code.value,
            "message": str(self),
            "user_message": self.user_message,
            "severity": getattr(self.severity, "value", self.severity),
            "context": {
                "operation": self.context.operation,
                "file_path": self.context.file_path,
                "component": self.context.component,
                "timestamp": self.context.timestamp.isoformat(),
                "additional_info": self.context.additional_info,
            },
            "recovery_actions": [
                {"description": a.description, "command": a.command}
                for a in self.recovery_actions
            ],
            "original_error": str(self.original_error) if self.original_error else None,
        }


class ParseError(UnsafeLinesError):
    """The front end could not produce a well-formed syntax tree."""

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        code: ErrorCode = ErrorCode.PARSE_FAILED,
        context: ErrorContext | None = None,
        recovery_actions: list[RecoveryAction] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            user_message=user_message or "Source could not be parsed.",
            severity=ErrorSeverity.HIGH,
            context=context,
            recovery_actions=recovery_actions,
            original_error=original_error,
        )


class ResolutionError(UnsafeLinesError):
    """A byte offset lies outside every file in the source map."""

    def __init__(
        self,
        message: str,
        offset: int,
        context: ErrorContext | None = None,
    ) -> None:
        context = context or ErrorContext(component="source_map")
        context.additional_info.setdefault("offset", offset)
        super().__init__(
            code=ErrorCode.POSITION_UNRESOLVED,
            message=message,
            user_message="Internal error: source position could not be resolved.",
            severity=ErrorSeverity.CRITICAL,
            context=context,
        )
        self.offset = offset


class ResourceError(UnsafeLinesError):
    """Error related to reading source files."""

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        code: ErrorCode = ErrorCode.FILE_NOT_FOUND,
        context: ErrorContext | None = None,
        recovery_actions: list[RecoveryAction] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            user_message=user_message or "Source file could not be read.",
            severity=ErrorSeverity.MEDIUM,
            context=context,
            recovery_actions=recovery_actions,
            original_error=original_error,
        )


class ConfigurationError(UnsafeLinesError):
    """Error related to configuration issues."""

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        code: ErrorCode = ErrorCode.INVALID_CONFIG,
        context: ErrorContext | None = None,
        recovery_actions: list[RecoveryAction] | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            user_message=user_message or "Configuration error occurred.",
            severity=ErrorSeverity.HIGH,
            context=context,
            recovery_actions=recovery_actions,
            original_error=original_error,
        )
