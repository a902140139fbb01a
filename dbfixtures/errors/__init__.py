"""Error hierarchy for dbfixtures."""

from dbfixtures.errors.base import (
    BackendError,
    ConfigurationError,
    DbFixturesError,
    DeliveryError,
    ErrorCode,
    ErrorContext,
    FixtureLoadError,
    FlushTimeoutError,
    InsertFailedError,
    UndeclaredKeyError,
    UnknownBackendError,
)

__all__ = [
    "BackendError",
    "ConfigurationError",
    "DbFixturesError",
    "DeliveryError",
    "ErrorCode",
    "ErrorContext",
    "FixtureLoadError",
    "FlushTimeoutError",
    "InsertFailedError",
    "UndeclaredKeyError",
    "UnknownBackendError",
]
