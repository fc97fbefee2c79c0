"""
Deep matching of values against type descriptors and rule sets.
"""
from collections.abc import Mapping
from typing import Any, List, Optional

from utils.logging_config import get_logger
from utils.exceptions import UnknownTypeError
from utils.error_handlers import guard_predicate
from .descriptors import (
    ANY,
    ArrayOf,
    ObjectSchema,
    Primitive,
    RuleSet,
    attribute_rules,
    to_descriptor,
)
from .errors import ConstraintError, TypeMismatchError, UnknownRuleError, ValidationError
from .rules import RuleEvaluator
from .types import TypeRegistry, default_registry, is_array

logger = get_logger(__name__)

DEFAULT_MAX_DEPTH = 50


class Matcher:
    """
    Recursive matcher.

    Violations come back as a flat list in declaration order: the type
    check first, then rules in the order the rule set lists them; array
    elements by index; object attributes in the order the schema declares
    them. Nothing is reordered or deduplicated.

    Nesting deeper than ``max_depth`` is treated as satisfied, which keeps
    self-referential schemas finite.
    """

    def __init__(
        self,
        types: Optional[TypeRegistry] = None,
        rules: Optional[RuleEvaluator] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        strict: bool = False
    ):
        self.types = types if types is not None else default_registry
        self.rules = rules if rules is not None else RuleEvaluator(self.types)
        self.max_depth = max_depth
        self.strict = strict

    def match_ruleset(self, value: Any, ruleset: RuleSet, depth: int = 0) -> List[ValidationError]:
        """Check ``value`` against a full rule set (type plus rules)."""
        if depth > self.max_depth:
            return []

        errors: List[ValidationError] = []
        if 'type' in ruleset:
            errors.extend(self.match(value, ruleset['type'], depth))

        for name, arg in ruleset.items():
            if name == 'type':
                continue
            error = self.rules.evaluate(value, name, arg)
            if error is not None:
                errors.append(error)
        return errors

    def match(self, value: Any, descriptor: Any, depth: int = 0) -> List[ValidationError]:
        """Check ``value`` against a type descriptor or descriptor literal."""
        if depth > self.max_depth:
            return []

        descriptor = to_descriptor(descriptor)

        if descriptor is ANY:
            return []
        if isinstance(descriptor, Primitive):
            return self._match_primitive(value, descriptor, depth)
        if isinstance(descriptor, ArrayOf):
            return self._match_array(value, descriptor, depth)
        if isinstance(descriptor, ObjectSchema):
            return self._match_object(value, descriptor, depth)
        raise TypeError(f"Unhandled descriptor: {descriptor!r}")

    def _match_primitive(self, value: Any, descriptor: Primitive, depth: int) -> List[ValidationError]:
        # Alias hops stay at the current depth; a name seen twice never
        # reaches a predicate
        seen = set()
        while True:
            if descriptor.name in seen:
                logger.warning(f"Alias cycle through type: {descriptor.name}")
                return [UnknownRuleError(rule='type', value=value)]
            seen.add(descriptor.name)
            try:
                entry = self.types.resolve(descriptor.name)
            except UnknownTypeError:
                logger.warning(f"Unknown type: {descriptor.name}")
                return [UnknownRuleError(rule='type', value=value)]
            if callable(entry):
                break
            if not isinstance(entry, Primitive):
                return self.match(value, entry, depth)
            descriptor = entry

        if guard_predicate(entry, descriptor.name)(value):
            return []
        return [TypeMismatchError(rule='type', value=value)]

    def _match_array(self, value: Any, descriptor: ArrayOf, depth: int) -> List[ValidationError]:
        if not is_array(value):
            return [TypeMismatchError(rule='type', value=value)]

        errors: List[ValidationError] = []
        for index, element in enumerate(value):
            for error in self.match(element, descriptor.inner, depth + 1):
                errors.append(error.prefixed(index))
        return errors

    def _match_object(self, value: Any, descriptor: ObjectSchema, depth: int) -> List[ValidationError]:
        if not isinstance(value, Mapping):
            return [TypeMismatchError(rule='type', value=value)]

        errors: List[ValidationError] = []
        for name, ruleset in attribute_rules(descriptor):
            for error in self.match_ruleset(value.get(name), ruleset, depth + 1):
                errors.append(error.prefixed(name))

        if self.strict:
            for name in value:
                if name not in descriptor.attributes:
                    errors.append(ConstraintError(rule='undeclared', value=value[name], path=(name,)))
        return errors
