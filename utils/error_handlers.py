"""
Error handling utilities and decorators.
"""
import functools
from typing import Any, Callable, Optional
from .logging_config import get_logger
from .exceptions import AnchorError


logger = get_logger(__name__)


def guard_predicate(func: Callable[..., Any], name: Optional[str] = None) -> Callable[..., bool]:
    """
    Wrap a user predicate so that raising counts as a failed check.

    Args:
        func: Predicate returning a truthy value on success
        name: Name used in log messages, defaults to the function name

    Returns:
        Callable returning a strict bool
    """
    label = name or getattr(func, '__name__', repr(func))

    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> bool:
        try:
            return bool(func(*args, **kwargs))
        except AnchorError:
            raise
        except Exception as e:
            logger.debug(f"Predicate '{label}' raised {type(e).__name__}: {e}")
            return False

    return wrapper


class ErrorContext:
    """Context manager that logs the start, end and failure of an operation."""

    def __init__(self, operation_name: str):
        self.operation_name = operation_name
        self.logger = get_logger(__name__)

    def __enter__(self):
        self.logger.debug(f"Starting operation: {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.logger.error(
                f"Error in operation {self.operation_name}: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb)
            )
        else:
            self.logger.debug(f"Completed operation: {self.operation_name}")
        return False
