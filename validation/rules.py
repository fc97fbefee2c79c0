"""
Rule evaluation: every non-``type`` key of a rule set.

A rule is a callable ``(value, arg) -> bool``. Rules that need a particular
input type raise ``RuleInputError`` so the evaluator can report a type
mismatch instead of a plain constraint violation.
"""
import re
import threading
from typing import Any, Callable, Dict, Mapping, Optional, Union

import numpy as np

from utils.logging_config import get_logger
from utils.exceptions import AnchorError, DefinitionError
from utils.error_handlers import guard_predicate
from .errors import ConstraintError, TypeMismatchError, UnknownRuleError, ValidationError
from .types import TypeRegistry, default_registry, is_number, parse_date

logger = get_logger(__name__)

Rule = Callable[[Any, Any], bool]

UNKNOWN_RULE_POLICIES = ('report', 'ignore', 'raise')


class RuleInputError(Exception):
    """The value is not of the kind a rule can judge."""


def _require_number(value: Any, rule: str):
    if not is_number(value):
        raise RuleInputError(f"'{rule}' needs a number, got {type(value).__name__}")


def _size_of(value: Any, rule: str) -> int:
    if isinstance(value, np.ndarray):
        return int(value.size)
    if isinstance(value, (str, bytes, list, tuple, Mapping)):
        return len(value)
    raise RuleInputError(f"'{rule}' needs a sized value, got {type(value).__name__}")


def _require_string(value: Any, rule: str):
    if not isinstance(value, str):
        raise RuleInputError(f"'{rule}' needs a string, got {type(value).__name__}")


def _search(value: Any, pattern: Any) -> bool:
    if isinstance(pattern, re.Pattern):
        return pattern.search(value) is not None
    return re.search(pattern, value) is not None


def _dates(value: Any, arg: Any, rule: str):
    when, bound = parse_date(value), parse_date(arg)
    if when is None:
        raise RuleInputError(f"'{rule}' needs a date, got {value!r}")
    if bound is None:
        raise DefinitionError(
            f"Definition error: '{rule}' needs a date argument, got {arg!r}",
            details={'rule': rule}
        )
    return when, bound


# ---------------------------------------------------------------------------
# Built-in rules
# ---------------------------------------------------------------------------

def rule_required(value: Any, arg: Any) -> bool:
    return value is not None and not (isinstance(value, str) and value == '')


def rule_in(value: Any, arg: Any) -> bool:
    return any(value == item for item in arg)


def rule_not_in(value: Any, arg: Any) -> bool:
    return not rule_in(value, arg)


def rule_min(value: Any, arg: Any) -> bool:
    _require_number(value, 'min')
    return value >= arg


def rule_max(value: Any, arg: Any) -> bool:
    _require_number(value, 'max')
    return value <= arg


def rule_length(value: Any, arg: Any) -> bool:
    """``arg`` is ``{'min', 'max'}``, ``[min, max]`` or an exact length."""
    size = _size_of(value, 'length')
    if isinstance(arg, Mapping):
        low, high = arg.get('min'), arg.get('max')
    elif isinstance(arg, (list, tuple)):
        low, high = (list(arg) + [None, None])[:2]
    else:
        low = high = arg
    if low is not None and size < low:
        return False
    if high is not None and size > high:
        return False
    return True


def rule_min_length(value: Any, arg: Any) -> bool:
    return _size_of(value, 'minLength') >= arg


def rule_max_length(value: Any, arg: Any) -> bool:
    return _size_of(value, 'maxLength') <= arg


def rule_regex(value: Any, arg: Any) -> bool:
    _require_string(value, 'regex')
    return _search(value, arg)


def rule_not_regex(value: Any, arg: Any) -> bool:
    _require_string(value, 'notRegex')
    return not _search(value, arg)


def rule_equals(value: Any, arg: Any) -> bool:
    return value == arg


def rule_contains(value: Any, arg: Any) -> bool:
    try:
        return arg in value
    except TypeError as e:
        raise RuleInputError(str(e))


def rule_not_contains(value: Any, arg: Any) -> bool:
    return not rule_contains(value, arg)


def rule_after(value: Any, arg: Any) -> bool:
    when, bound = _dates(value, arg, 'after')
    try:
        return when > bound
    except TypeError as e:
        raise RuleInputError(str(e))


def rule_before(value: Any, arg: Any) -> bool:
    when, bound = _dates(value, arg, 'before')
    try:
        return when < bound
    except TypeError as e:
        raise RuleInputError(str(e))


def rule_custom(value: Any, arg: Any) -> bool:
    if not callable(arg):
        raise DefinitionError(
            "Definition error: 'custom' needs a callable argument",
            details={'rule': 'custom'}
        )
    return guard_predicate(arg)(value)


BUILTIN_RULES: Dict[str, Rule] = {
    'required': rule_required,
    'in': rule_in,
    'notIn': rule_not_in,
    'min': rule_min,
    'max': rule_max,
    'length': rule_length,
    'len': rule_length,
    'minLength': rule_min_length,
    'maxLength': rule_max_length,
    'regex': rule_regex,
    'pattern': rule_regex,
    'is': rule_regex,
    'notRegex': rule_not_regex,
    'not': rule_not_regex,
    'equals': rule_equals,
    'contains': rule_contains,
    'notContains': rule_not_contains,
    'after': rule_after,
    'before': rule_before,
    'custom': rule_custom,
}


class RuleEvaluator:
    """
    Evaluates one rule against one value.

    Lookup order for a rule name: registered rules, then type names (the
    argument switches the type check on), then a callable argument used as
    an ad hoc predicate. Anything else is an unknown rule and is handled
    according to ``unknown_rules``.
    """

    def __init__(
        self,
        types: Optional[TypeRegistry] = None,
        rules: Optional[Dict[str, Rule]] = None,
        unknown_rules: str = 'report'
    ):
        if unknown_rules not in UNKNOWN_RULE_POLICIES:
            raise DefinitionError(
                f"Unknown rule policy: {unknown_rules}",
                details={'allowed': list(UNKNOWN_RULE_POLICIES)}
            )
        self.types = types if types is not None else default_registry
        self._rules: Dict[str, Rule] = dict(BUILTIN_RULES if rules is None else rules)
        self.unknown_rules = unknown_rules
        self._lock = threading.Lock()
        self.logger = get_logger(self.__class__.__name__)

    def define(
        self,
        name: Union[str, Mapping[str, Rule]],
        rule: Optional[Rule] = None
    ) -> 'RuleEvaluator':
        """Register a rule ``(value, arg) -> bool``, or a mapping of them."""
        entries = name if isinstance(name, Mapping) else {name: rule}
        for key, fn in entries.items():
            if not isinstance(key, str) or not key or key == 'type':
                raise DefinitionError(
                    f"Definition error: \"{key}\" is not a valid rule name",
                    details={'name': repr(key)}
                )
            if not callable(fn):
                raise DefinitionError(
                    f"Definition error: \"{key}\" does not have a definition",
                    details={'name': key}
                )
        with self._lock:
            self._rules.update(entries)
        self.logger.debug(f"Defined rules: {list(entries)}")
        return self

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def evaluate(self, value: Any, name: str, arg: Any) -> Optional[ValidationError]:
        """
        Check ``value`` against rule ``name`` with argument ``arg``.

        Returns:
            None when the rule holds, otherwise one violation.
        """
        if arg is False:
            return None

        rule = self._rules.get(name)
        if rule is not None:
            return self._apply(rule, value, name, arg)

        predicate = self.types.get(name)
        if callable(predicate):
            if guard_predicate(predicate, name)(value):
                return None
            return TypeMismatchError(rule=name, value=value)

        if callable(arg):
            if guard_predicate(arg, name)(value):
                return None
            return ConstraintError(rule=name, value=value)

        return self._unknown(value, name)

    def _apply(self, rule: Rule, value: Any, name: str, arg: Any) -> Optional[ValidationError]:
        try:
            passed = rule(value, arg)
        except RuleInputError as e:
            self.logger.debug(f"Rule '{name}' rejected input: {e}")
            return TypeMismatchError(rule=name, value=value)
        except AnchorError:
            raise
        except Exception as e:
            self.logger.debug(f"Rule '{name}' raised {type(e).__name__}: {e}")
            passed = False
        if passed:
            return None
        return ConstraintError(rule=name, value=value)

    def _unknown(self, value: Any, name: str) -> Optional[ValidationError]:
        if self.unknown_rules == 'ignore':
            self.logger.debug(f"Ignoring unknown rule: {name}")
            return None
        if self.unknown_rules == 'raise':
            raise DefinitionError(f"Unknown rule: {name}", details={'rule': name})
        self.logger.warning(f"Unknown rule: {name}")
        return UnknownRuleError(rule=name, value=value)
