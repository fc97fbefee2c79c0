"""
Violation records produced by the matcher.

These are data, not exceptions: a failing value yields an ordered list of
them and nothing is raised.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Tuple, Union

PathSegment = Union[str, int]


@dataclass(frozen=True)
class ValidationError:
    """A single reported violation."""

    rule: str
    value: Any
    path: Tuple[PathSegment, ...] = field(default_factory=tuple)

    def prefixed(self, segment: PathSegment) -> 'ValidationError':
        """Return a copy located one level deeper under ``segment``."""
        return replace(self, path=(segment,) + self.path)

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape: ``{rule, value, path?}``."""
        data = {'rule': self.rule, 'value': self.value}
        if self.path:
            data['path'] = list(self.path)
        return data


class TypeMismatchError(ValidationError):
    """Value does not satisfy its declared type, or a rule's input type."""


class ConstraintError(ValidationError):
    """Value has the right type but violates a rule."""


class UnknownRuleError(ValidationError):
    """Rule or type name is not registered."""
