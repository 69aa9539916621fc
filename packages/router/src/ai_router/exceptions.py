"""
Custom exceptions for the task router.

Only illegal construction parameters, backend loading and persistence
file failures raise. Routine bad input (unknown actions, malformed
import entries) is reported through return values and warning logs.
"""

from typing import Any


class RouterError(Exception):
    """Base exception for all router errors."""

    error_code: str = "ROUTER_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.context = context or {}
        self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for callers that forward errors."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# Configuration Errors
class ConfigurationError(RouterError):
    """Configuration-related errors."""
    error_code = "CONFIGURATION_ERROR"


class InvalidConfigError(ConfigurationError):
    """Configuration value is invalid."""
    error_code = "INVALID_CONFIG"


# Backend Errors
class BackendLoadError(RouterError):
    """Scoring backend could not be imported or is not a valid backend."""
    error_code = "BACKEND_LOAD_ERROR"


# Persistence Errors
class PersistenceError(RouterError):
    """Persisted Q-table could not be read or written."""
    error_code = "PERSISTENCE_ERROR"
