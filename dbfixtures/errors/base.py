"""Custom exception hierarchy for dbfixtures.

Every error raised by dbfixtures itself inherits from DbFixturesError and
carries:
- error_code: A unique ErrorCode enum for categorization
- context: ErrorContext with driver/target/operation details
- suggestions: List of actionable steps to resolve the issue

Exceptions raised by the backend client libraries (redis, pymongo,
confluent-kafka) are not wrapped: they reach the caller unchanged.

Example:
    try:
        await fixtures.load_fixtures(["users"], {"users": [...]})
    except ConfigurationError as e:
        print(f"Error: {e}")
        print(f"Suggestions: {e.suggestions}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for dbfixtures.

    Error codes are organized by category:
    - E1xx: Configuration errors
    - E2xx: Backend errors
    - E3xx: Fixture file errors
    - E9xx: Unknown/internal errors
    """

    # Configuration errors (E1xx)
    INVALID_CONFIG = "E101"
    UNDECLARED_KEY = "E102"
    UNKNOWN_BACKEND = "E103"

    # Backend errors (E2xx)
    BACKEND_FAILED = "E201"
    INSERT_FAILED = "E202"
    DELIVERY_FAILED = "E203"
    FLUSH_TIMEOUT = "E204"

    # Fixture file errors (E3xx)
    FIXTURE_LOAD_FAILED = "E301"

    # Unknown/internal errors (E9xx)
    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 200:
            return "configuration"
        elif code_num < 300:
            return "backend"
        elif code_num < 400:
            return "fixtures"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Structured context for error logging and debugging.

    Attributes:
        driver: Name of the driver that raised the error.
        target: Collection, key or topic the operation targeted.
        operation: Driver operation (truncate, insert_fixtures, close).
        extra: Additional context-specific information.
        timestamp: When the error occurred.
    """

    driver: str | None = None
    target: str | None = None
    operation: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "driver": self.driver,
            "target": self.target,
            "operation": self.operation,
            "extra": self.extra,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.driver:
            parts.append(f"driver={self.driver}")
        if self.operation:
            parts.append(f"operation={self.operation}")
        if self.target:
            parts.append(f"target={self.target}")
        return " > ".join(parts) if parts else "unknown location"


class DbFixturesError(Exception):
    """Base exception for all dbfixtures errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with execution details
        suggestions: List of actionable steps to resolve the issue
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [f"Error [{self.error_code.value}]: {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.cause is not None:
            lines.append(f"Cause: {self.cause!r}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigurationError(DbFixturesError):
    """Driver or coordinator misconfiguration.

    Raised before any backend call is attempted, e.g. when a Redis key has
    no declared type or a backend is selected without its connection
    settings. Never retried.
    """

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid configuration"
    default_suggestions = [
        "Check the dbfixtures YAML file and DBFIXTURES_* environment variables",
        "Run 'dbfixtures check' to list the configured backends",
    ]


class UndeclaredKeyError(ConfigurationError):
    """A Redis key was used without a declared key type."""

    error_code = ErrorCode.UNDECLARED_KEY
    default_message = "Key has no declared type"
    default_suggestions = [
        "Add the key to redis_key_types with one of: string, list, set, hash, stream",
    ]

    def __init__(self, key: str, **kwargs: Any) -> None:
        self.key = key
        kwargs.setdefault(
            "message",
            f"The key '{key}' doesn't have a declared type in the key types "
            "provided to this driver",
        )
        super().__init__(**kwargs)


class UnknownBackendError(ConfigurationError):
    """No driver is registered under the requested backend name."""

    error_code = ErrorCode.UNKNOWN_BACKEND
    default_message = "Unknown backend"


class BackendError(DbFixturesError):
    """A backend reported a failure through its reply.

    Exceptions raised by the client libraries are re-raised as they are;
    this error covers failures the drivers detect themselves.
    """

    error_code = ErrorCode.BACKEND_FAILED
    default_message = "Backend operation failed"
    default_suggestions = [
        "Verify the backend is reachable and accepts writes",
        "Re-run with --verbose to see the backend calls issued",
    ]


class InsertFailedError(BackendError):
    """The backend refused to store a fixture."""

    error_code = ErrorCode.INSERT_FAILED
    default_message = "Insert failed"


class DeliveryError(BackendError):
    """A produced message was not acknowledged by the broker."""

    error_code = ErrorCode.DELIVERY_FAILED
    default_message = "Message delivery failed"


class FlushTimeoutError(BackendError):
    """Outstanding messages remained after the flush timeout."""

    error_code = ErrorCode.FLUSH_TIMEOUT
    default_message = "Timed out waiting for the producer to flush"

    def __init__(self, message: str | None = None, remaining: int = 0, **kwargs: Any) -> None:
        self.remaining = remaining
        super().__init__(message=message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["remaining"] = self.remaining
        return result


class FixtureLoadError(DbFixturesError):
    """Error loading a fixture file."""

    error_code = ErrorCode.FIXTURE_LOAD_FAILED
    default_message = "Failed to load fixture file"
    default_suggestions = [
        "Fixture files map each target name to a list of payloads",
        "Supported formats are .yaml, .yml and .json",
    ]
