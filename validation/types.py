"""
Type registry and built-in leaf types.

Every built-in is a one-argument predicate. None of them recurse into
containers; descending into arrays and objects is the matcher's job.
"""
import json
import numbers
import re
import threading
import uuid
import ipaddress
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Union
from urllib.parse import urlparse

import numpy as np

from utils.logging_config import get_logger
from utils.exceptions import DefinitionError, UnknownTypeError
from .descriptors import TypeDescriptor, to_descriptor

logger = get_logger(__name__)

Predicate = Callable[[Any], bool]
TypeEntry = Union[Predicate, TypeDescriptor]

EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$"
)
HEX_PATTERN = re.compile(r'^(0x)?[0-9a-fA-F]+$')
HEX_COLOR_PATTERN = re.compile(r'^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')
URL_SCHEMES = ('http', 'https', 'ftp')


# ---------------------------------------------------------------------------
# Built-in predicates
# ---------------------------------------------------------------------------

def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_boolean(value: Any) -> bool:
    return isinstance(value, (bool, np.bool_))


def is_number(value: Any) -> bool:
    """Real numbers, numpy scalars included; booleans are not numbers."""
    if is_boolean(value):
        return False
    return isinstance(value, (numbers.Real, Decimal))


def is_integer(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not is_boolean(value)


def is_float(value: Any) -> bool:
    return isinstance(value, (float, np.floating))


def is_decimal(value: Any) -> bool:
    return isinstance(value, Decimal)


def is_finite(value: Any) -> bool:
    if not is_number(value):
        return False
    if isinstance(value, numbers.Integral):
        return True
    if isinstance(value, Decimal):
        return value.is_finite()
    return bool(np.isfinite(float(value)))


def parse_date(value: Any) -> Optional[datetime]:
    """Return ``value`` as a datetime, or None when it is not date-like."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


def is_date(value: Any) -> bool:
    return parse_date(value) is not None


def is_email(value: Any) -> bool:
    return isinstance(value, str) and EMAIL_PATTERN.match(value) is not None


def is_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return parsed.scheme in URL_SCHEMES and bool(parsed.netloc)


def _ip_version(value: Any) -> Optional[int]:
    if not isinstance(value, str):
        return None
    try:
        return ipaddress.ip_address(value).version
    except ValueError:
        return None


def is_ip(value: Any) -> bool:
    return _ip_version(value) is not None


def is_ipv4(value: Any) -> bool:
    return _ip_version(value) == 4


def is_ipv6(value: Any) -> bool:
    return _ip_version(value) == 6


def _uuid_version(value: Any) -> Optional[int]:
    if isinstance(value, uuid.UUID):
        return value.version or 0
    if not isinstance(value, str):
        return None
    try:
        return uuid.UUID(value).version or 0
    except ValueError:
        return None


def is_uuid(value: Any) -> bool:
    return _uuid_version(value) is not None


def is_uuidv3(value: Any) -> bool:
    return _uuid_version(value) == 3


def is_uuidv4(value: Any) -> bool:
    return _uuid_version(value) == 4


def is_alpha(value: Any) -> bool:
    return isinstance(value, str) and value.isalpha()


def is_numeric(value: Any) -> bool:
    """Strings of digits, optionally signed."""
    return isinstance(value, str) and re.fullmatch(r'[-+]?[0-9]+', value) is not None


def is_alphanumeric(value: Any) -> bool:
    return isinstance(value, str) and value.isalnum()


def is_hexadecimal(value: Any) -> bool:
    return isinstance(value, str) and HEX_PATTERN.match(value) is not None


def is_hex_color(value: Any) -> bool:
    return isinstance(value, str) and HEX_COLOR_PATTERN.match(value) is not None


def is_lowercase(value: Any) -> bool:
    return isinstance(value, str) and value == value.lower()


def is_uppercase(value: Any) -> bool:
    return isinstance(value, str) and value == value.upper()


def is_creditcard(value: Any) -> bool:
    """Luhn checksum over the digits; spaces and dashes are ignored."""
    if not isinstance(value, str):
        return False
    digits = re.sub(r'[\s-]', '', value)
    if not digits.isdigit() or not 12 <= len(digits) <= 19:
        return False
    total = 0
    for i, ch in enumerate(reversed(digits)):
        d = int(ch)
        if i % 2 == 1:
            d *= 2
            if d > 9:
                d -= 9
        total += d
    return total % 10 == 0


def is_object(value: Any) -> bool:
    return isinstance(value, Mapping)


def is_json(value: Any) -> bool:
    """True when ``value`` serializes to JSON without a fallback."""
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return False
    return True


def is_array(value: Any) -> bool:
    if isinstance(value, np.ndarray):
        return value.ndim > 0
    return isinstance(value, (list, tuple))


def is_binary(value: Any) -> bool:
    return isinstance(value, (bytes, bytearray, memoryview))


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, np.ndarray):
        return value.size == 0
    try:
        return len(value) == 0
    except TypeError:
        return False


def is_not_empty(value: Any) -> bool:
    return not is_empty(value)


def is_null(value: Any) -> bool:
    return value is None


def is_not_null(value: Any) -> bool:
    return value is not None


def is_truthy(value: Any) -> bool:
    return bool(value)


def is_falsey(value: Any) -> bool:
    return not value


BUILTIN_TYPES: Dict[str, Predicate] = {
    'string': is_string,
    'number': is_number,
    'integer': is_integer,
    'float': is_float,
    'decimal': is_decimal,
    'boolean': is_boolean,
    'date': is_date,
    'email': is_email,
    'url': is_url,
    'ip': is_ip,
    'ipv4': is_ipv4,
    'ipv6': is_ipv6,
    'uuid': is_uuid,
    'uuidv3': is_uuidv3,
    'uuidv4': is_uuidv4,
    'alpha': is_alpha,
    'numeric': is_numeric,
    'alphanumeric': is_alphanumeric,
    'hexadecimal': is_hexadecimal,
    'hexColor': is_hex_color,
    'lowercase': is_lowercase,
    'uppercase': is_uppercase,
    'creditcard': is_creditcard,
    'object': is_object,
    'json': is_json,
    'array': is_array,
    'binary': is_binary,
    'finite': is_finite,
    'empty': is_empty,
    'notEmpty': is_not_empty,
    'null': is_null,
    'notNull': is_not_null,
    'truthy': is_truthy,
    'falsey': is_falsey,
}

BUILTIN_ALIASES: Dict[str, str] = {
    'int': 'integer',
    'bool': 'boolean',
    'text': 'string',
    'datetime': 'date',
    'dict': 'object',
    'list': 'array',
}


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TypeRegistry:
    """
    Extensible name -> type table.

    Entries are either leaf predicates or composite descriptors (aliases).
    Writes are serialized; reads take no lock and are expected to start
    once registration is done.
    """

    def __init__(self, entries: Optional[Dict[str, TypeEntry]] = None):
        self._entries: Dict[str, TypeEntry] = dict(entries or {})
        self._lock = threading.Lock()
        self.logger = get_logger(self.__class__.__name__)

    @classmethod
    def with_builtins(cls) -> 'TypeRegistry':
        """Create a registry holding the built-in types and aliases."""
        registry = cls(BUILTIN_TYPES)
        for name, target in BUILTIN_ALIASES.items():
            registry.alias(name, target)
        return registry

    def define(
        self,
        name: Union[str, Mapping[str, Predicate]],
        predicate: Optional[Predicate] = None
    ) -> 'TypeRegistry':
        """
        Register one leaf type, or a mapping of them.

        Args:
            name: type name, or a mapping of name -> predicate
            predicate: callable ``(value) -> bool`` when ``name`` is a string

        Returns:
            The registry, for chaining.
        """
        if isinstance(name, Mapping):
            if predicate is not None:
                raise DefinitionError(
                    "Definition error: pass either a mapping or a name and a predicate"
                )
            for key, fn in name.items():
                if not callable(fn):
                    raise DefinitionError(
                        f"Definition error: \"{key}\" does not have a definition",
                        details={'name': key}
                    )
                self._check_bindable(key, alias=False)
            with self._lock:
                self._entries.update(name)
            self.logger.debug(f"Defined {len(name)} types: {list(name)}")
            return self

        if not isinstance(name, str) or not name:
            raise DefinitionError(
                f"Definition error: \"{name}\" is not a valid definition.",
                details={'name': repr(name)}
            )
        if not callable(predicate):
            raise DefinitionError(
                f"Definition error: \"{name}\" is not a valid definition.",
                details={'name': name}
            )
        self._check_bindable(name, alias=False)
        with self._lock:
            self._entries[name] = predicate
        self.logger.debug(f"Defined type: {name}")
        return self

    def alias(self, name: str, descriptor: Any) -> 'TypeRegistry':
        """Register ``name`` as a composite descriptor (e.g. ``['string']``)."""
        if not isinstance(name, str) or not name:
            raise DefinitionError(
                f"Definition error: \"{name}\" is not a valid alias name.",
                details={'name': repr(name)}
            )
        resolved = to_descriptor(descriptor)
        self._check_bindable(name, alias=True)
        with self._lock:
            self._entries[name] = resolved
        self.logger.debug(f"Defined alias: {name} -> {resolved!r}")
        return self

    def _check_bindable(self, name: str, alias: bool):
        current = self._entries.get(name)
        if current is None:
            return
        if callable(current) == alias:
            kind = 'a predicate' if callable(current) else 'an alias'
            raise DefinitionError(
                f"Definition error: \"{name}\" is already bound to {kind}",
                details={'name': name}
            )

    def resolve(self, name: str) -> TypeEntry:
        """Return the predicate or descriptor bound to ``name``."""
        entry = self._entries.get(name)
        if entry is None:
            raise UnknownTypeError(
                f"Unknown type: {name}",
                details={'available_types': sorted(self._entries)}
            )
        return entry

    def get(self, name: str) -> Optional[TypeEntry]:
        return self._entries.get(name)

    def names(self) -> List[str]:
        return list(self._entries)

    def copy(self) -> 'TypeRegistry':
        """Independent registry with the same entries."""
        return self.__class__(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)


# Process-wide registry used when none is passed explicitly
default_registry = TypeRegistry.with_builtins()
