"""
Centralized error handling and classification for legoworld.

Every failure the application knows about is a ``LegoWorldError`` subclass.
None of them is fatal: uploads fall back to inline data, reads fall back to
the local cache, and everything else is reported to the user.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from legoworld.logging_config import get_logger, log_error, log_security_event

logger = get_logger(__name__)


class ErrorCategory(Enum):
    """Error categories for classification and handling."""

    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    UPLOAD = "upload"
    MEDIA_HOST = "media_host"
    PERSISTENCE = "persistence"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


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


class LegoWorldError(Exception):
    """Base exception class for legoworld."""

    default_user_messages = {
        ErrorCategory.CONFIGURATION: "The app is missing some configuration.",
        ErrorCategory.AUTHENTICATION: "Sign in failed. Please check your email and password.",
        ErrorCategory.UPLOAD: "The file could not be uploaded to the media host.",
        ErrorCategory.MEDIA_HOST: "The media host returned an unexpected response.",
        ErrorCategory.PERSISTENCE: "The database could not be reached. Please try again.",
        ErrorCategory.VALIDATION: "Some of the input is invalid.",
        ErrorCategory.UNKNOWN: "Something unexpected went wrong.",
    }

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
        original_exception: Exception | None = None,
    ):
        super().__init__(message)
        self.category = category
        self.severity = severity
        self.code = code or f"{category.value}_error"
        self.user_message = user_message or self.default_user_messages.get(category, "Something went wrong.")
        self.details = details or {}
        self.recoverable = recoverable
        self.original_exception = original_exception
        self.timestamp = datetime.now()

        self._log_error()

    def _log_error(self) -> None:
        """Log the error with its classification context."""
        error_context = {
            "category": self.category.value,
            "severity": self.severity.value,
            "code": self.code,
            "recoverable": self.recoverable,
            **self.details,
        }

        if self.original_exception:
            error_context["original_exception"] = str(self.original_exception)

        log_error(self, error_context)

        if self.category == ErrorCategory.AUTHENTICATION:
            log_security_event(self.category.value, context=error_context)

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


class ConfigError(LegoWorldError):
    """Required credentials or settings are missing."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            code=code or "config_missing",
            user_message=user_message,
            details=details,
            recoverable=False,
            original_exception=original_exception,
        )


class AuthenticationError(LegoWorldError):
    """Admin sign-in failures."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.AUTHENTICATION,
            severity=ErrorSeverity.HIGH,
            code=code or "auth_failed",
            user_message=user_message,
            details=details,
            recoverable=True,
            original_exception=original_exception,
        )


class UploadError(LegoWorldError):
    """The media host rejected an upload or could not be reached."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.UPLOAD,
            severity=ErrorSeverity.MEDIUM,
            code=code or "upload_failed",
            user_message=user_message,
            details=details,
            recoverable=True,
            original_exception=original_exception,
        )


class MediaHostError(LegoWorldError):
    """The media host search failed or returned a payload of the wrong shape."""

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        self.status_code = status_code
        super().__init__(
            message=message,
            category=ErrorCategory.MEDIA_HOST,
            severity=ErrorSeverity.MEDIUM,
            code=code or "media_host_error",
            user_message=user_message,
            details={"status_code": status_code, **(details or {})},
            recoverable=True,
            original_exception=original_exception,
        )


class PersistenceError(LegoWorldError):
    """The relational store is unreachable or rejected the request."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.PERSISTENCE,
            severity=ErrorSeverity.HIGH,
            code=code or "persistence_failed",
            user_message=user_message,
            details=details,
            recoverable=True,
            original_exception=original_exception,
        )


class ValidationError(LegoWorldError):
    """Bad file type, size or count, or a malformed record."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            code=code or "validation_failed",
            user_message=user_message or message,
            details=details,
            recoverable=True,
            original_exception=original_exception,
        )


class ErrorHandler:
    """Turns arbitrary exceptions into ``ErrorInfo`` for display."""

    def __init__(self) -> None:
        self.error_counts: dict[str, int] = {}
        self.logger = get_logger(__name__)

    def handle_error(
        self,
        error: Exception,
        context: dict[str, Any] | None = None,
    ) -> ErrorInfo:
        """
        Handle and classify errors.

        Args:
            error: Exception to handle
            context: Additional context information

        Returns:
            ErrorInfo: Structured error information
        """
        context = context or {}

        if isinstance(error, LegoWorldError):
            error_info = error.get_error_info()
        else:
            error_info = self._classify_error(error, context).get_error_info()

        self._track_error(error_info.code)
        return error_info

    def _classify_error(self, error: Exception, context: dict[str, Any]) -> LegoWorldError:
        """Classify a foreign exception by its message."""
        error_message = str(error)
        lowered = error_message.lower()
        details = {"original_type": type(error).__name__, **context}

        if any(keyword in lowered for keyword in ["credential", "not configured", "environment variable"]):
            return ConfigError(error_message, details=details, original_exception=error)

        if any(keyword in lowered for keyword in ["login", "password", "unauthorized", "jwt"]):
            return AuthenticationError(error_message, details=details, original_exception=error)

        if any(keyword in lowered for keyword in ["cloudinary", "upload"]):
            return UploadError(error_message, details=details, original_exception=error)

        if any(keyword in lowered for keyword in ["supabase", "database", "postgrest", "connection"]):
            return PersistenceError(error_message, details=details, original_exception=error)

        if any(keyword in lowered for keyword in ["invalid", "too large", "unsupported", "required"]):
            return ValidationError(error_message, details=details, original_exception=error)

        return LegoWorldError(error_message, details=details, original_exception=error)

    def _track_error(self, error_code: str) -> None:
        """Track error occurrence for monitoring."""
        self.error_counts[error_code] = self.error_counts.get(error_code, 0) + 1

        if self.error_counts[error_code] % 10 == 0:
            self.logger.warning("frequent_error_detected", error_code=error_code, count=self.error_counts[error_code])

    def get_error_statistics(self) -> dict[str, int]:
        """Get error occurrence statistics."""
        return self.error_counts.copy()


error_handler = ErrorHandler()


def handle_error(error: Exception, context: dict[str, Any] | None = None) -> ErrorInfo:
    """Classify an error with the global handler."""
    return error_handler.handle_error(error, context)


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    return error_handler
