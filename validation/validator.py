"""
Model-level validation: apply a per-attribute rule map to a bag of values.
"""
import threading
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from utils.logging_config import get_logger
from utils.error_handlers import ErrorContext
from .descriptors import RuleSet, to_ruleset, type_name
from .errors import ValidationError
from .match import DEFAULT_MAX_DEPTH, Matcher
from .rules import RuleEvaluator
from .types import Predicate, TypeRegistry, default_registry, is_boolean

logger = get_logger(__name__)

# Attribute keys that describe storage, not validity
SCHEMA_ONLY_KEYS = frozenset({
    'defaultsTo',
    'primaryKey',
    'autoIncrement',
    'unique',
    'index',
    'columnName',
})

DEFAULT_MAX_WORKERS = 4

ValidationResult = Optional[Dict[str, Dict[str, List[ValidationError]]]]


class ValidatorState(Enum):
    IDLE = 'idle'
    BUILT = 'built'
    RUNNING = 'running'
    COMPLETED = 'completed'


class Validator:
    """
    Validates attribute values for a model.

    ``initialize`` turns attribute definitions into rule sets once;
    ``validate`` can then run any number of times. Each attribute is
    checked independently and the results are joined before the callback
    fires.

    ``validate`` may be called from several threads at once. ``state``
    stays RUNNING while any call is in flight and becomes COMPLETED when
    the last one finishes.
    """

    def __init__(
        self,
        types: Optional[TypeRegistry] = None,
        rules: Optional[RuleEvaluator] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        strict: bool = False,
        unknown_rules: str = 'report',
        max_workers: int = DEFAULT_MAX_WORKERS
    ):
        self.types = types if types is not None else default_registry
        if rules is None:
            rules = RuleEvaluator(self.types, unknown_rules=unknown_rules)
        self.matcher = Matcher(self.types, rules, max_depth=max_depth, strict=strict)
        self.max_workers = max_workers
        self.validations: Dict[str, Dict[str, Any]] = {}
        self.state = ValidatorState.IDLE
        self._running = 0
        self._lock = threading.Lock()
        self.logger = get_logger(self.__class__.__name__)

    @classmethod
    def from_config(cls, config: Any, types: Optional[TypeRegistry] = None) -> 'Validator':
        """Build a validator from an object exposing ``get(key, default)``."""
        return cls(
            types=types,
            max_depth=config.get('max_depth', DEFAULT_MAX_DEPTH),
            strict=config.get('strict_objects', False),
            unknown_rules=config.get('unknown_rules', 'report'),
            max_workers=config.get('max_workers', DEFAULT_MAX_WORKERS)
        )

    def initialize(
        self,
        attrs: Mapping[str, Any],
        custom_types: Optional[Mapping[str, Predicate]] = None
    ):
        """
        Build the attribute validation map.

        Schema-only keys are dropped and ``enum`` becomes the ``in`` rule:

            {'name': {'type': 'string', 'enum': ['a', 'b'], 'unique': True}}
            -> {'name': {'type': 'string', 'in': ['a', 'b']}}

        Args:
            attrs: attribute name -> attribute definition
            custom_types: extra types merged into the registry first
        """
        if custom_types:
            self.types.define(custom_types)

        validations: Dict[str, Dict[str, Any]] = {}
        for attr, definition in attrs.items():
            validation = validations[attr] = {}
            for prop, arg in to_ruleset(definition).items():
                if prop in SCHEMA_ONLY_KEYS:
                    continue
                if prop == 'enum':
                    validation['in'] = arg
                else:
                    validation[prop] = arg

        self.validations = validations
        self.state = ValidatorState.BUILT
        self.logger.debug(f"Built validations for {len(validations)} attributes")

    def _check(self, attr: str, values: Mapping[str, Any]) -> List[ValidationError]:
        ruleset: RuleSet = self.validations[attr]
        value = values.get(attr)
        required = ruleset.get('required')

        # Optional and absent is valid
        if not required and (value is None or (isinstance(value, str) and value == '')):
            return []

        declared = type_name(ruleset)
        if declared == 'text':
            return []

        # String-encoded booleans from external input
        if required and declared == 'boolean':
            if is_boolean(value) or str(value) in ('true', 'false'):
                return []

        return self.matcher.match_ruleset(value, ruleset)

    def _begin(self):
        with self._lock:
            self._running += 1
            self.state = ValidatorState.RUNNING

    def _finish(self):
        with self._lock:
            self._running -= 1
            if self._running == 0:
                self.state = ValidatorState.COMPLETED

    def validate(
        self,
        values: Mapping[str, Any],
        present_only: bool = False,
        callback: Optional[Callable[[ValidationResult], Any]] = None
    ) -> ValidationResult:
        """
        Validate ``values`` against the attribute validation map.

        Args:
            values: attribute name -> value
            present_only: only check attributes present in ``values``
            callback: called exactly once with the result

        Returns:
            None when every attribute passes, otherwise
            ``{'ValidationError': {attr: [violations]}}``.
        """
        names = list(self.validations)
        if present_only:
            names = [name for name in names if name in values]

        self._begin()
        outcomes: List[Any] = []
        try:
            with ErrorContext(f"validate {len(names)} attributes"):
                if names:
                    workers = max(1, min(self.max_workers, len(names)))
                    with ThreadPoolExecutor(max_workers=workers) as pool:
                        futures = [(name, pool.submit(self._check, name, values)) for name in names]
                        outcomes = [(name, future.result()) for name, future in futures]
        finally:
            self._finish()

        errors = {name: found for name, found in outcomes if found}

        result: ValidationResult = None
        if errors:
            result = {'ValidationError': errors}
            self.logger.info(f"Validation failed for attributes: {list(errors)}")
        else:
            self.logger.debug(f"Validation passed for {len(names)} attributes")

        if callback is not None:
            callback(result)
        return result
