"""
Custom exception hierarchy for anchor.

Only schema and registration problems are raised. Per-value failures are
collected as ``validation.errors.ValidationError`` records instead.
"""
from typing import Any, Dict, List, Optional


class AnchorError(Exception):
    """Base exception for all anchor errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'details': self.details
        }


# Definition Exceptions
class DefinitionError(AnchorError):
    """Raised when a custom type, rule or descriptor is malformed."""
    pass


class UnknownTypeError(DefinitionError):
    """Raised when a type name is not bound in the registry."""
    pass


# Configuration Exceptions
class ConfigurationError(AnchorError):
    """Raised when configuration is invalid."""
    pass


# Enforcement Exceptions
class ValidationFailed(AnchorError):
    """Raised by strict enforcement when a value has violations."""

    def __init__(
        self,
        message: str,
        violations: Optional[List[Any]] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.violations = list(violations or [])
        details = dict(details or {})
        details.setdefault('violations', [v.to_dict() for v in self.violations])
        super().__init__(message, error_code=error_code, details=details)


class UndeclaredAttributeError(ValidationFailed):
    """Raised when a value carries an attribute its rule map does not declare."""
    pass
