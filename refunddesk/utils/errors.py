"""Error handling utilities for the refund desk.

Field and attachment validation never raise: the form contract is
state-based (an ``errors`` map plus a derived validity flag). The classes
here cover the remaining cases: programming errors against the engine API,
broken configuration, and failures of best-effort side effects (history
persistence, clipboard, preview decoding) which are logged and swallowed.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any
from enum import Enum


class ErrorType(Enum):
    """Enumeration of error types raised or recorded by the refund desk."""

    # Side effects
    HISTORY_UNAVAILABLE = "HISTORY_UNAVAILABLE"
    CLIPBOARD_UNAVAILABLE = "CLIPBOARD_UNAVAILABLE"
    PREVIEW_DECODE_FAILED = "PREVIEW_DECODE_FAILED"

    # Engine usage
    UNKNOWN_FIELD = "UNKNOWN_FIELD"
    UNKNOWN_ROTATION_MEMBER = "UNKNOWN_ROTATION_MEMBER"
    SESSION_CLOSED = "SESSION_CLOSED"

    # Configuration
    CONFIG_INVALID = "CONFIG_INVALID"

    # Dispute list
    DISPUTE_DATA_INVALID = "DISPUTE_DATA_INVALID"

    UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass
class ErrorContext:
    """
    Context information for errors in the refund desk.

    Attributes:
        error_type: Type of error from ErrorType enum
        message: Human-readable error message
        recoverable: Whether the error can be recovered from
        fallback_action: Optional description of fallback action taken
        details: Optional additional error details
        original_exception: Optional original exception that caused this error
    """

    error_type: ErrorType
    message: str
    recoverable: bool
    fallback_action: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    original_exception: Optional[Exception] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error context to dictionary for logging/serialization.

        Returns:
            Dictionary representation of error context
        """
        return {
            "error_type": self.error_type.value,
            "message": self.message,
            "recoverable": self.recoverable,
            "fallback_action": self.fallback_action,
            "details": self.details or {},
            "original_exception": str(self.original_exception) if self.original_exception else None
        }


class RefundDeskError(Exception):
    """
    Base exception for all refund desk errors.

    Attributes:
        context: ErrorContext with detailed error information
    """

    def __init__(self, context: ErrorContext):
        self.context = context
        super().__init__(context.message)

    def __str__(self) -> str:
        base = f"{self.context.error_type.value}: {self.context.message}"
        if self.context.fallback_action:
            base += f" (Fallback: {self.context.fallback_action})"
        return base

    def to_dict(self) -> Dict[str, Any]:
        return self.context.to_dict()


class EngineUsageError(RefundDeskError, ValueError):
    """Raised when a caller addresses the engine with an unknown name."""

    @classmethod
    def unknown_field(cls, field: str, known: Any) -> "EngineUsageError":
        context = ErrorContext(
            error_type=ErrorType.UNKNOWN_FIELD,
            message=f"Unknown form field '{field}'",
            recoverable=False,
            details={"field": field, "known": sorted(known)},
        )
        return cls(context)

    @classmethod
    def managed_field(cls, field: str) -> "EngineUsageError":
        context = ErrorContext(
            error_type=ErrorType.UNKNOWN_FIELD,
            message=f"Field '{field}' is set through the attachment controller",
            recoverable=False,
            details={"field": field},
        )
        return cls(context)

    @classmethod
    def unknown_member(cls, group: str, key: str) -> "EngineUsageError":
        context = ErrorContext(
            error_type=ErrorType.UNKNOWN_ROTATION_MEMBER,
            message=f"'{key}' is not a member of rotation group '{group}'",
            recoverable=False,
            details={"group": group, "key": key},
        )
        return cls(context)

    @classmethod
    def session_closed(cls, session_id: str) -> "EngineUsageError":
        context = ErrorContext(
            error_type=ErrorType.SESSION_CLOSED,
            message=f"Form session '{session_id}' has been torn down",
            recoverable=False,
            details={"session_id": session_id},
        )
        return cls(context)


class ConfigurationError(RefundDeskError):
    """Exception for missing or malformed configuration."""

    @classmethod
    def invalid(cls, path: str, error: Exception) -> "ConfigurationError":
        """
        Create error for a configuration file that cannot be used.

        Args:
            path: Path of the configuration file
            error: Original exception

        Returns:
            ConfigurationError instance
        """
        context = ErrorContext(
            error_type=ErrorType.CONFIG_INVALID,
            message=f"Invalid configuration in '{path}': {str(error)}",
            recoverable=False,
            details={"path": path},
            original_exception=error
        )
        return cls(context)


class SideEffectError(RefundDeskError):
    """Exception for best-effort side effects that failed."""

    @classmethod
    def history_unavailable(
        cls,
        key: str,
        error: Exception,
        fallback_action: Optional[str] = None
    ) -> "SideEffectError":
        """
        Create error for a history sink that could not be written.

        Args:
            key: History key being written
            error: Original exception
            fallback_action: Optional fallback action

        Returns:
            SideEffectError instance
        """
        context = ErrorContext(
            error_type=ErrorType.HISTORY_UNAVAILABLE,
            message=f"Could not persist submission history '{key}': {str(error)}",
            recoverable=True,
            fallback_action=fallback_action or "Keep submission in memory only",
            details={"key": key},
            original_exception=error
        )
        return cls(context)

    @classmethod
    def clipboard_unavailable(
        cls,
        error: Exception,
        fallback_action: Optional[str] = None
    ) -> "SideEffectError":
        context = ErrorContext(
            error_type=ErrorType.CLIPBOARD_UNAVAILABLE,
            message=f"Clipboard copy failed: {str(error)}",
            recoverable=True,
            fallback_action=fallback_action or "Skip copied confirmation",
            original_exception=error
        )
        return cls(context)

    @classmethod
    def preview_decode_failed(
        cls,
        filename: str,
        error: Exception,
        fallback_action: Optional[str] = None
    ) -> "SideEffectError":
        """
        Create error for an image preview that could not be decoded.

        Args:
            filename: Name of the attached image
            error: Original exception
            fallback_action: Optional fallback action

        Returns:
            SideEffectError instance
        """
        context = ErrorContext(
            error_type=ErrorType.PREVIEW_DECODE_FAILED,
            message=f"Failed to decode preview for '{filename}': {str(error)}",
            recoverable=True,
            fallback_action=fallback_action or "Use original bytes as preview",
            details={"filename": filename},
            original_exception=error
        )
        return cls(context)


def handle_side_effect_error(
    error: Exception,
    operation: str,
    logger,
    fallback_action: Optional[str] = None
) -> ErrorContext:
    """
    Log a failed side effect and continue.

    Side-effect failures must never surface as form errors, so unlike the
    handlers for hard failures this returns the context instead of raising.

    Args:
        error: Original exception (a SideEffectError is logged as-is)
        operation: Description of the side effect that failed
        logger: Logger instance for error logging
        fallback_action: Optional fallback action description

    Returns:
        ErrorContext describing the failure
    """
    if isinstance(error, SideEffectError):
        context = error.context
    else:
        context = ErrorContext(
            error_type=ErrorType.UNKNOWN_ERROR,
            message=f"{operation} failed: {str(error)}",
            recoverable=True,
            fallback_action=fallback_action,
            details={"operation": operation},
            original_exception=error
        )

    logger.warning(f"Side effect '{operation}' failed: {RefundDeskError(context)}")
    return context


class DisputeDataError(RefundDeskError):
    """Exception for dispute list data that cannot be read."""

    @classmethod
    def invalid_record(cls, source: str, index: int, error: Exception) -> "DisputeDataError":
        context = ErrorContext(
            error_type=ErrorType.DISPUTE_DATA_INVALID,
            message=f"Dispute record {index} in '{source}' is invalid: {str(error)}",
            recoverable=False,
            details={"source": source, "index": index},
            original_exception=error
        )
        return cls(context)

    @classmethod
    def invalid_file(cls, source: str, error: Exception) -> "DisputeDataError":
        context = ErrorContext(
            error_type=ErrorType.DISPUTE_DATA_INVALID,
            message=f"Dispute data in '{source}' could not be read: {str(error)}",
            recoverable=False,
            details={"source": source},
            original_exception=error
        )
        return cls(context)
