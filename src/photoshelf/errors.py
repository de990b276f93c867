"""
Error classification for photoshelf.

Every failure raised by the storage layer, the catalog builder and the EXIF
pipeline is a :class:`PhotoshelfError`. The places that deliberately degrade
to empty or null results catch these explicitly; nothing else swallows them.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .logging_config import log_error


class ErrorCategory(Enum):
    """Error categories for classification and handling."""

    STORAGE = "storage"
    LISTING = "listing"
    IMAGE_PROCESSING = "image_processing"
    NETWORK = "network"
    CONFIGURATION = "configuration"
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
    details: dict[str, Any]
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert error info to dictionary."""
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class PhotoshelfError(Exception):
    """Base exception class for photoshelf."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(message)
        self.category = category
        self.severity = severity
        self.code = code or f"{category.value}_error"
        self.details = details or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now()

        self._log_error()

    def _log_error(self) -> None:
        error_context = {
            "category": self.category.value,
            "severity": self.severity.value,
            "code": self.code,
            **self.details,
        }

        if self.original_exception:
            error_context["original_exception"] = str(self.original_exception)

        log_error(self, error_context)

    def get_error_info(self) -> ErrorInfo:
        """Get structured error information."""
        return ErrorInfo(
            category=self.category,
            severity=self.severity,
            code=self.code,
            message=str(self),
            details=self.details,
            timestamp=self.timestamp,
        )


class StorageError(PhotoshelfError):
    """Object storage failures (get-object, head-bucket)."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.STORAGE,
            severity=ErrorSeverity.HIGH,
            code=code or "storage_failed",
            details=details,
            original_exception=original_exception,
        )


class ListingError(PhotoshelfError):
    """A bucket listing page could not be fetched.

    ``response`` holds whatever the provider returned: the raw response
    mapping for a non-200 status, or ``None`` when the call itself failed.
    """

    def __init__(
        self,
        message: str,
        response: Any = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        self.response = response
        super().__init__(
            message=message,
            category=ErrorCategory.LISTING,
            severity=ErrorSeverity.MEDIUM,
            code="listing_failed",
            details=details,
            original_exception=original_exception,
        )


class FetchTimeoutError(PhotoshelfError):
    """An object fetch did not finish within the allotted time."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.MEDIUM,
            code="fetch_timeout",
            details=details,
        )


class FetchCancelledError(PhotoshelfError):
    """Raised inside a fetch worker once its cancellation token is set."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.LOW,
            code="fetch_cancelled",
            details=details,
        )


class ImageProcessingError(PhotoshelfError):
    """EXIF data could not be decoded from an image buffer."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.IMAGE_PROCESSING,
            severity=ErrorSeverity.LOW,
            code="exif_parse_failed",
            details=details,
            original_exception=original_exception,
        )
