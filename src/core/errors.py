"""
Custom exceptions and error handling for FareWatch.

Defines application-specific exceptions with error codes so fare-check runs
can report per-trip failures consistently in logs and run reports.

Usage:
    from core.errors import SourceUnavailableError, ErrorCode

    raise SourceUnavailableError("Search API returned 503", code=ErrorCode.SOURCE_UNAVAILABLE)
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Error codes recorded on failed or skipped trips."""

    # Fare lookup errors
    SOURCE_UNAVAILABLE = "SOURCE_UNAVAILABLE"
    NO_FARES = "NO_FARES"

    # Recipient errors
    MALFORMED_TOKEN = "MALFORMED_TOKEN"

    # Dispatch errors
    DISPATCH_FAILED = "DISPATCH_FAILED"

    # Store errors
    STORE_READ_FAILED = "STORE_READ_FAILED"
    STORE_WRITE_FAILED = "STORE_WRITE_FAILED"

    # System errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


ERROR_SUMMARIES: dict[ErrorCode, str] = {
    ErrorCode.SOURCE_UNAVAILABLE: "Fare source returned no quotes. Trip will be checked again next run.",
    ErrorCode.NO_FARES: "No fare quotes to evaluate.",
    ErrorCode.MALFORMED_TOKEN: "Recipient push token is missing or malformed.",
    ErrorCode.DISPATCH_FAILED: "Push dispatch could not be attempted. Alerts stay pending.",
    ErrorCode.STORE_READ_FAILED: "Unable to read pending trips from the alert store.",
    ErrorCode.STORE_WRITE_FAILED: "Alert store write failed. Trip will be re-evaluated next run.",
    ErrorCode.CONFIGURATION_ERROR: "Fare check is not configured correctly.",
    ErrorCode.INTERNAL_ERROR: "An unexpected error occurred while checking this trip.",
}


class FareWatchError(Exception):
    """Base exception for all FareWatch errors."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.INTERNAL_ERROR):
        self.message = message
        self.code = code
        super().__init__(message)

    @property
    def summary(self) -> str:
        return ERROR_SUMMARIES.get(self.code, ERROR_SUMMARIES[ErrorCode.INTERNAL_ERROR])


class SourceUnavailableError(FareWatchError):
    """Fare lookup failed or the source could not be reached."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.SOURCE_UNAVAILABLE):
        super().__init__(message, code=code)


class NoFaresError(FareWatchError):
    """A fare evaluation was requested for an empty quote list."""

    def __init__(self, message: str = "Cannot evaluate an empty quote list", code: ErrorCode = ErrorCode.NO_FARES):
        super().__init__(message, code=code)


class MalformedTokenError(FareWatchError):
    """A recipient push token failed format validation."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.MALFORMED_TOKEN):
        super().__init__(message, code=code)


class NotificationError(FareWatchError):
    """The notifier could not attempt delivery at all."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.DISPATCH_FAILED):
        super().__init__(message, code=code)


class StoreReadError(FareWatchError):
    """Reading candidate trips from the alert store failed."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.STORE_READ_FAILED):
        super().__init__(message, code=code)


class StoreWriteError(FareWatchError):
    """Persisting a fare snapshot or notified flags failed."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.STORE_WRITE_FAILED):
        super().__init__(message, code=code)


class ConfigurationError(FareWatchError):
    """Required collaborators or settings are missing."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.CONFIGURATION_ERROR):
        super().__init__(message, code=code)
