"""Custom exceptions for payctl."""

from typing import Any


class PayctlError(Exception):
    """Base exception for all payctl errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class ConfigError(PayctlError):
    """Configuration-related errors."""

    pass


class ValidationError(PayctlError):
    """Input validation errors."""

    pass


class AuthenticationError(PayctlError):
    """Authentication/authorization errors."""

    pass


class BuildError(PayctlError):
    """Project build errors."""

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.exit_code = exit_code


class PayaraError(PayctlError):
    """Payara admin API errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code


class TimeoutError(PayctlError):
    """Operation timeout errors."""

    def __init__(
        self,
        message: str,
        timeout_seconds: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.timeout_seconds = timeout_seconds
