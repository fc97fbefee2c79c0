"""
Utility modules for anchor.
"""
from .logging_config import get_logger, LoggerFactory, StructuredFormatter
from .exceptions import (
    AnchorError,
    DefinitionError,
    UnknownTypeError,
    ConfigurationError,
    ValidationFailed,
    UndeclaredAttributeError
)
from .error_handlers import (
    guard_predicate,
    ErrorContext
)

__all__ = [
    'get_logger',
    'LoggerFactory',
    'StructuredFormatter',
    'AnchorError',
    'DefinitionError',
    'UnknownTypeError',
    'ConfigurationError',
    'ValidationFailed',
    'UndeclaredAttributeError',
    'guard_predicate',
    'ErrorContext',
]
