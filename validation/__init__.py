"""
Declarative value validation.
"""
from .descriptors import (
    ANY,
    AnyType,
    ArrayOf,
    ObjectSchema,
    Primitive,
    to_descriptor,
    to_ruleset
)
from .errors import (
    ValidationError,
    TypeMismatchError,
    ConstraintError,
    UnknownRuleError
)
from .types import (
    TypeRegistry,
    default_registry
)
from .rules import RuleEvaluator
from .match import Matcher, DEFAULT_MAX_DEPTH
from .schema import (
    Schema,
    anchor,
    define
)
from .validator import (
    Validator,
    ValidatorState,
    SCHEMA_ONLY_KEYS
)

__all__ = [
    'ANY',
    'AnyType',
    'ArrayOf',
    'ObjectSchema',
    'Primitive',
    'to_descriptor',
    'to_ruleset',
    'ValidationError',
    'TypeMismatchError',
    'ConstraintError',
    'UnknownRuleError',
    'TypeRegistry',
    'default_registry',
    'RuleEvaluator',
    'Matcher',
    'DEFAULT_MAX_DEPTH',
    'Schema',
    'anchor',
    'define',
    'Validator',
    'ValidatorState',
    'SCHEMA_ONLY_KEYS',
]
