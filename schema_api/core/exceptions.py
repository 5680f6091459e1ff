"""Structured exception hierarchy for consistent error handling.

Key components:
- **ErrorCode enum**: Standardized error identifiers for programmatic handling
- **Severity enum**: Error classification for logging and alerting
- **SchemaApiError**: Base exception with context, cause chaining and fingerprint
- **Specialized exceptions**: Configuration, parameter validation and token errors

Configuration errors are programmer errors raised at setup time and must abort
startup. Parameter validation errors are recovered locally by the pipelines
(client envelope with status 600, server 400). A token payload that fails its
schema is fatal and always propagates to the caller.
"""

import hashlib
import traceback
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for the toolkit."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """The API configuration is inconsistent and cannot be compiled."""

    DUPLICATE_PATH = "DUPLICATE_PATH"
    """Two resources register the same literal path."""

    PATH_PARAMS_MISMATCH = "PATH_PARAMS_MISMATCH"
    """Path placeholders and the URL params schema keys differ."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Parameters failed validation against their declared schema."""

    INVALID_TOKEN_SCHEMA = "INVALID_TOKEN_SCHEMA"
    """A fetched bearer token does not match its declared schema."""


class Severity(Enum):
    """Severity levels used to pick log levels and alerting."""

    LOW = "LOW"
    """Expected errors caused by caller input."""

    MEDIUM = "MEDIUM"
    """Errors that affect a single call but not the integration."""

    HIGH = "HIGH"
    """Errors indicating a broken integration with an upstream service."""

    CRITICAL = "CRITICAL"
    """Errors that must abort startup."""


class SchemaApiError(Exception):
    """Base exception class for all toolkit exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        # Capture stack trace at creation time, excluding this frame
        self.stack_trace = traceback.format_stack()[:-1]
        self.fingerprint = self._generate_fingerprint()

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def _generate_fingerprint(self) -> str:
        """Generate a fingerprint for grouping similar errors in logs.

        Returns:
            str: A hash built from the error type, code and raising location
        """
        max_frames = 5
        relevant_frames = self.stack_trace[-max_frames:]

        fingerprint_data = f"{self.__class__.__name__}:{self.error_code}"
        for frame in relevant_frames:
            if "site-packages" not in frame and "schema_api" in frame:
                lines = frame.strip().split("\n")
                if lines:
                    fingerprint_data += f":{lines[0]}"

        return hashlib.sha256(fingerprint_data.encode()).hexdigest()[:16]

    @property
    def is_expected(self) -> bool:
        """Whether the error is part of normal operation (LOW or MEDIUM)."""
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ConfigurationError(SchemaApiError):
    """Exception raised when an API configuration cannot be compiled.

    Args:
        message: Description of the inconsistency
        error_code: Error code (defaults to CONFIGURATION_ERROR)
        context: Additional context, typically the resource name and path
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.CONFIGURATION_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.CRITICAL, context, cause)


class ParamsValidationError(SchemaApiError):
    """Exception describing a parameter group that failed schema validation.

    Args:
        group: Parameter group that failed (url_params, search_params, headers, body)
        errors: Structured validation errors reported by the schema engine
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        group: str,
        errors: list[dict[str, Any]] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.group = group
        self.errors = errors or []
        super().__init__(
            ErrorCode.VALIDATION_ERROR,
            f"Invalid {group}",
            Severity.LOW,
            {"group": group, "errors": self.errors},
            cause,
        )


class InvalidTokenSchemaError(SchemaApiError):
    """Exception raised when a token endpoint returns a malformed payload."""

    def __init__(
        self,
        message: str = "Token schema is invalid - unable to parse token data",
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            ErrorCode.INVALID_TOKEN_SCHEMA, message, Severity.HIGH, context, cause
        )
