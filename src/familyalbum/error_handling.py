"""
Error classification and handling for the familyalbum application.

Every failure the application knows about is a ``FamilyAlbumError`` carrying a
category, a severity, a stable code and a user-facing message. Backend
failures (database, storage, network) share the ``BackendError`` base so UI
call sites can catch them in one place and fall back to an empty state.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .logging_config import get_logger, log_error, log_security_event

logger = get_logger(__name__)


class ErrorCategory(Enum):
    """Error categories for classification and handling."""

    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    DATABASE = "database"
    STORAGE = "storage"
    NETWORK = "network"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


USER_MESSAGES = {
    ErrorCategory.AUTHENTICATION: "Sign-in failed. Please sign in again.",
    ErrorCategory.AUTHORIZATION: "You do not have permission to do that.",
    ErrorCategory.VALIDATION: "Some required information is missing.",
    ErrorCategory.NOT_FOUND: "That item could not be found.",
    ErrorCategory.DATABASE: "The photo library is unavailable right now.",
    ErrorCategory.STORAGE: "Photo storage is unavailable right now.",
    ErrorCategory.NETWORK: "A network error occurred.",
    ErrorCategory.UNKNOWN: "Something went wrong.",
}


@dataclass
class ErrorInfo:
    """Structured error information."""

    category: ErrorCategory
    severity: ErrorSeverity
    code: str
    message: str
    user_message: str
    details: dict[str, Any]
    timestamp: datetime
    recoverable: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert error info to dictionary."""
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "user_message": self.user_message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "recoverable": self.recoverable,
        }


class FamilyAlbumError(Exception):
    """Base exception class for the familyalbum application."""

    category = ErrorCategory.UNKNOWN
    severity = ErrorSeverity.MEDIUM
    default_code = "unknown_error"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
        original_exception: Exception | None = None,
    ):
        super().__init__(message)
        self.code = code or self.default_code
        self.user_message = user_message or USER_MESSAGES[self.category]
        self.details = details or {}
        self.recoverable = recoverable
        self.original_exception = original_exception
        self.timestamp = datetime.now()

        self._log_error()

    def _log_error(self) -> None:
        """Log the error; expected low-severity outcomes are only warnings."""
        error_context = {
            "category": self.category.value,
            "severity": self.severity.value,
            "code": self.code,
            "recoverable": self.recoverable,
            **self.details,
        }
        if self.original_exception:
            error_context["original_exception"] = str(self.original_exception)

        if self.severity is ErrorSeverity.LOW:
            logger.warning("expected_error", message=str(self), **error_context)
        else:
            log_error(self, error_context)

        if self.category in (ErrorCategory.AUTHENTICATION, ErrorCategory.AUTHORIZATION):
            log_security_event(self.category.value, **error_context)

    def get_error_info(self) -> ErrorInfo:
        """Get structured error information."""
        return ErrorInfo(
            category=self.category,
            severity=self.severity,
            code=self.code,
            message=str(self),
            user_message=self.user_message,
            details=self.details,
            timestamp=self.timestamp,
            recoverable=self.recoverable,
        )


class AuthenticationError(FamilyAlbumError):
    """Sign-in failed or no signed-in user where one is required."""

    category = ErrorCategory.AUTHENTICATION
    severity = ErrorSeverity.HIGH
    default_code = "auth_failed"


class AuthorizationError(FamilyAlbumError):
    """Signed-in user lacks the role an action needs."""

    category = ErrorCategory.AUTHORIZATION
    severity = ErrorSeverity.HIGH
    default_code = "access_denied"

    def __init__(self, message: str, **kwargs: Any):
        kwargs.setdefault("recoverable", False)
        super().__init__(message, **kwargs)


class ValidationError(FamilyAlbumError):
    """A required field is missing or malformed (empty title, no file selected)."""

    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.LOW
    default_code = "validation_failed"


class NotFoundError(FamilyAlbumError):
    """A referenced record does not exist."""

    category = ErrorCategory.NOT_FOUND
    severity = ErrorSeverity.LOW
    default_code = "not_found"


class BackendError(FamilyAlbumError):
    """Any failed call to the record store, object storage or auth backend."""

    category = ErrorCategory.NETWORK
    severity = ErrorSeverity.MEDIUM
    default_code = "backend_error"


class DatabaseError(BackendError):
    """Record store failures."""

    category = ErrorCategory.DATABASE
    severity = ErrorSeverity.HIGH
    default_code = "database_error"


class StorageError(BackendError):
    """Object storage failures."""

    category = ErrorCategory.STORAGE
    severity = ErrorSeverity.HIGH
    default_code = "storage_error"


_KEYWORD_CLASSES: list[tuple[tuple[str, ...], type[FamilyAlbumError]]] = [
    (("authentication", "unauthorized", "jwt", "token", "sign in", "login"), AuthenticationError),
    (("permission", "access denied", "forbidden", "not allowed"), AuthorizationError),
    (("not found", "does not exist", "no such"), NotFoundError),
    (("database", "duckdb", "sql", "query", "constraint"), DatabaseError),
    (("storage", "gcs", "bucket", "blob", "upload"), StorageError),
    (("validation", "invalid", "required", "missing"), ValidationError),
    (("network", "connection", "timeout", "unreachable"), BackendError),
]


class ErrorHandler:
    """Classifies arbitrary exceptions and keeps per-code counters."""

    def __init__(self) -> None:
        self.error_counts: dict[str, int] = {}

    def handle_error(self, error: Exception, context: dict[str, Any] | None = None) -> ErrorInfo:
        """
        Handle and classify an error.

        Args:
            error: Exception to handle
            context: Additional context information

        Returns:
            ErrorInfo: Structured error information
        """
        if isinstance(error, FamilyAlbumError):
            error_info = error.get_error_info()
        else:
            error_info = self.classify_error(error, context or {}).get_error_info()

        self._track_error(error_info.code)
        return error_info

    def classify_error(self, error: Exception, context: dict[str, Any]) -> FamilyAlbumError:
        """Wrap a foreign exception in the closest FamilyAlbumError subclass."""
        message = str(error)
        lowered = message.lower()
        details = {"original_type": type(error).__name__, **context}

        for keywords, error_class in _KEYWORD_CLASSES:
            if any(keyword in lowered for keyword in keywords):
                return error_class(message, details=details, original_exception=error)

        if isinstance(error, (ConnectionError, TimeoutError)):
            return BackendError(message, details=details, original_exception=error)

        return FamilyAlbumError(message, details=details, original_exception=error)

    def _track_error(self, error_code: str) -> None:
        self.error_counts[error_code] = self.error_counts.get(error_code, 0) + 1

        if self.error_counts[error_code] % 10 == 0:
            logger.warning("frequent_error_detected", error_code=error_code, count=self.error_counts[error_code])

    def get_error_statistics(self) -> dict[str, int]:
        """Get error occurrence statistics."""
        return self.error_counts.copy()

    def reset_statistics(self) -> None:
        """Reset error statistics."""
        self.error_counts.clear()


error_handler = ErrorHandler()


def handle_error(error: Exception, context: dict[str, Any] | None = None) -> ErrorInfo:
    """Classify an error with the global handler."""
    return error_handler.handle_error(error, context)


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    return error_handler
