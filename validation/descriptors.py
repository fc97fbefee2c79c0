"""
Type descriptors and rule-set literal coercion.

A descriptor is one of ``Primitive``, ``ArrayOf``, ``ObjectSchema`` or
``ANY``. Schemas arrive as plain data (strings, one-element lists, dicts)
and are coerced here, one level at a time, as the matcher descends.
"""
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Union
from utils.exceptions import DefinitionError

RuleSet = Mapping[str, Any]


@dataclass(frozen=True)
class Primitive:
    """A leaf type resolved by name through the type registry."""
    name: str


@dataclass(frozen=True)
class ArrayOf:
    """A sequence whose every element matches ``inner``."""
    inner: Any


@dataclass(frozen=True, eq=False)
class ObjectSchema:
    """
    A mapping whose declared attributes each match their own rule set.

    ``attributes`` keeps the raw literals so that a schema may refer to
    itself; they are coerced lazily by ``attribute_rules``.
    """
    attributes: Dict[str, Any]


class AnyType:
    """Descriptor that every value satisfies."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'ANY'


ANY = AnyType()

TypeDescriptor = Union[Primitive, ArrayOf, ObjectSchema, AnyType]

_DESCRIPTOR_CLASSES = (Primitive, ArrayOf, ObjectSchema, AnyType)


def is_descriptor(obj: Any) -> bool:
    return isinstance(obj, _DESCRIPTOR_CLASSES)


def to_descriptor(literal: Any) -> TypeDescriptor:
    """
    Coerce a type literal into a descriptor.

    Args:
        literal: a descriptor, a type name, a list/tuple of zero or one
            element (array-of), or a mapping (object schema)

    Returns:
        The corresponding descriptor. Nested literals are left raw.
    """
    if is_descriptor(literal):
        return literal

    if isinstance(literal, str):
        if not literal:
            raise DefinitionError("Definition error: empty type name")
        if literal == 'any':
            return ANY
        return Primitive(literal)

    if isinstance(literal, (list, tuple)):
        if len(literal) == 0:
            return ArrayOf(ANY)
        if len(literal) == 1:
            return ArrayOf(literal[0])
        raise DefinitionError(
            "Definition error: an array type takes exactly one element descriptor",
            details={'literal': repr(literal)}
        )

    if isinstance(literal, Mapping):
        return ObjectSchema(dict(literal))

    raise DefinitionError(
        f"Definition error: {literal!r} is not a valid type descriptor",
        details={'literal': repr(literal)}
    )


def to_ruleset(literal: Any) -> RuleSet:
    """
    Coerce an attribute literal of an object schema into a rule set.

    A mapping is taken as the rule set itself; anything else is shorthand
    for ``{'type': literal}``.
    """
    if isinstance(literal, Mapping):
        return literal
    return {'type': literal}


def attribute_rules(schema: ObjectSchema):
    """Yield ``(name, ruleset)`` pairs in declaration order."""
    for name, literal in schema.attributes.items():
        yield name, to_ruleset(literal)


def type_name(ruleset: RuleSet) -> Any:
    """Return the declared type name of a rule set, if it is a plain name."""
    declared = ruleset.get('type')
    if isinstance(declared, Primitive):
        return declared.name
    if isinstance(declared, str):
        return declared
    return None
