"""
Schema facade: wrap a value and check it against a rule set.
"""
import inspect
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Union

from utils.logging_config import get_logger
from utils.exceptions import UndeclaredAttributeError, ValidationFailed
from .descriptors import ObjectSchema, RuleSet
from .errors import ValidationError
from .match import DEFAULT_MAX_DEPTH, Matcher
from .rules import RuleEvaluator
from .types import Predicate, TypeRegistry, default_registry

logger = get_logger(__name__)


class Schema:
    """
    Check one value against rule sets.

    A facade holds only the value; build a fresh one per check.
    """

    def __init__(
        self,
        data: Any,
        types: Optional[TypeRegistry] = None,
        rules: Optional[RuleEvaluator] = None,
        max_depth: int = DEFAULT_MAX_DEPTH
    ):
        """
        Initialize schema facade.

        Args:
            data: The value to check
            types: Type registry, defaults to the process-wide one
            rules: Rule evaluator, defaults to the built-in rules
            max_depth: Nesting beyond this depth is treated as satisfied
        """
        if inspect.isroutine(data):
            raise NotImplementedError("Checking functions is not supported")
        self.data = data
        self.types = types if types is not None else default_registry
        self.rules = rules
        self.max_depth = max_depth

    def _matcher(self) -> Matcher:
        return Matcher(self.types, self.rules, max_depth=self.max_depth)

    def to(self, ruleset: RuleSet) -> Optional[List[ValidationError]]:
        """
        Check the value against ``ruleset``.

        Returns:
            None when the value conforms, otherwise the ordered violations.
        """
        errors = self._matcher().match_ruleset(self.data, ruleset)
        if errors:
            return errors
        return None

    has_errors = to

    def hurl(self, attribute_rules: Mapping) -> Any:
        """
        Enforce a per-attribute rule map on a mapping value.

        Raises:
            UndeclaredAttributeError: the value has an attribute the map
                does not declare
            ValidationFailed: the value has violations

        Returns:
            The value, unchanged.
        """
        if isinstance(self.data, Mapping):
            for attr in self.data:
                if attr not in attribute_rules:
                    raise UndeclaredAttributeError(
                        f"Validation error: Attribute \"{attr}\" is not in the ruleset.",
                        details={'attribute': attr}
                    )

        errors = self._matcher().match(self.data, ObjectSchema(dict(attribute_rules)))
        if errors:
            raise ValidationFailed(
                f"Validation error: {len(errors)} violation(s)",
                violations=errors
            )
        return self.data

    def define(
        self,
        name: Union[str, Dict[str, Predicate]],
        predicate: Optional[Predicate] = None
    ) -> 'Schema':
        """Register a custom type into this facade's registry. Chainable."""
        self.types.define(name, predicate)
        return self


def anchor(data: Any, **kwargs) -> Schema:
    """Wrap ``data`` for checking."""
    return Schema(data, **kwargs)


def define(
    name: Union[str, Dict[str, Predicate]],
    predicate: Optional[Predicate] = None
) -> TypeRegistry:
    """Register a custom type process-wide."""
    return default_registry.define(name, predicate)
