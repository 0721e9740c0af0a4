"""
Avro Parsing Canonical Form (PCF).

Rewrites a decoded Avro schema tree into its Parsing Canonical Form as
described in the Avro specification:

- Only the attributes ``name``, ``type``, ``fields``, ``symbols``, ``items``,
  ``values`` and ``size`` survive, emitted in that order.
- Names of named types are qualified with the enclosing namespace.
- Type references starting with an uppercase letter are qualified with the
  enclosing namespace.
- Primitive schemas in object form (``{"type": "int"}``) collapse to ``"int"``.
- String sizes are converted to numbers.
- No whitespace is emitted.

The canonicalizer is a pure function of the tree; it neither logs nor
performs I/O.
"""

import json
import math
import re
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

SchemaValue = Union[Dict[str, 'SchemaValue'], List['SchemaValue'], str, float]

# Attributes kept in the canonical form and their output precedence
FIELD_ORDER: Mapping[str, int] = MappingProxyType({
    'name': 1,
    'type': 2,
    'fields': 3,
    'symbols': 4,
    'items': 5,
    'values': 6,
    'size': 7,
})

TYPE_POSITION_KEYS = frozenset(['type', 'items', 'values'])

# Maximum nesting depth of a schema tree (prevents stack overflow)
MAX_CANONICALIZE_DEPTH = 250

SIZE_PATTERN = re.compile(r'[0-9]+')
MAX_SIZE = 2**64 - 1
INTEGER_FORMAT_LIMIT = 1e16


class PCFError(Exception):
    """
    Exception raised when a schema cannot be brought into canonical form.

    Attributes:
        message: Human-readable error description
        context: Optional context about where the error occurred
    """

    def __init__(self, message: str, context: Optional[str] = None) -> None:
        self.message = message
        self.context = context
        full_message = message
        if context:
            full_message = f"{message} (context: {context})"
        super().__init__(full_message)


class InvalidSchemaTypeError(PCFError):
    """Raised for a schema value that is not an object, array, string or number."""

    def __init__(self, value: Any, context: Optional[str] = None) -> None:
        self.value = value
        super().__init__(
            "cannot parse schema with invalid schema type; ought to be object, array, "
            f"string or number; received: {type(value).__name__}: {value!r}",
            context)


class InvalidSizeValueError(PCFError):
    """Raised when a string ``size`` is not a base-10 unsigned integer."""

    def __init__(self, value: str, context: Optional[str] = None) -> None:
        self.value = value
        super().__init__(f"Fixed size ought to be number greater than zero: {value!r}", context)


class MaxDepthExceededError(PCFError):
    """Raised when a schema is nested deeper than the configured limit."""

    def __init__(self, max_depth: int, context: Optional[str] = None) -> None:
        self.max_depth = max_depth
        super().__init__(f"Maximum schema nesting depth ({max_depth}) exceeded", context)


@dataclass(frozen=True)
class Context:
    """
    Position of a schema value within the tree.

    Every recursive call receives its own instance; children get a modified
    copy so nothing set below is ever visible above or beside it.
    """
    namespace: Optional[str] = None
    is_field_name: bool = False
    is_type: bool = False
    depth: int = 0
    max_depth: int = MAX_CANONICALIZE_DEPTH

    def has_namespace(self) -> bool:
        return bool(self.namespace)

    def descend(self, **changes: Any) -> 'Context':
        """Returns the context for a child value."""
        return replace(self, depth=self.depth + 1, **changes)


def to_parsing_canonical_form(schema: SchemaValue, max_depth: int = MAX_CANONICALIZE_DEPTH) -> str:
    """
    Returns the Parsing Canonical Form of a decoded Avro schema.

    :param schema: The schema as produced by a JSON decoder.
    :param max_depth: Maximum nesting depth accepted.
    :return: The canonical form as a compact JSON string.
    """
    return canonicalize(schema, Context(max_depth=max_depth))


def canonicalize(value: Any, ctx: Context) -> str:
    """Canonicalizes one schema value under the given context."""
    if ctx.depth > ctx.max_depth:
        raise MaxDepthExceededError(ctx.max_depth, context=ctx.namespace)
    match value:
        case dict():
            return _canonicalize_object(value, ctx)
        case list():
            return _canonicalize_array(value, ctx)
        case str():
            return _canonicalize_string(value, ctx)
        case bool():
            raise InvalidSchemaTypeError(value, context=ctx.namespace)
        case float() | int():
            return _canonicalize_number(value, ctx)
        case _:
            raise InvalidSchemaTypeError(value, context=ctx.namespace)


def _canonicalize_number(value: Union[int, float], ctx: Context) -> str:
    try:
        number = float(value)
    except OverflowError as e:
        raise InvalidSchemaTypeError(value, context=ctx.namespace) from e
    if not math.isfinite(number):
        raise InvalidSchemaTypeError(value, context=ctx.namespace)
    if number.is_integer() and abs(number) < INTEGER_FORMAT_LIMIT:
        if number == 0 and math.copysign(1.0, number) < 0:
            return '-0'
        return str(int(number))
    return repr(number)


def _canonicalize_string(value: str, ctx: Context) -> str:
    if ctx.is_type and value[:1].isupper() and ctx.has_namespace():
        value = f"{ctx.namespace}.{value}"
    return f'"{value}"'


def _canonicalize_array(values: List[Any], ctx: Context) -> str:
    # union branches keep their declared order
    child_ctx = ctx.descend()
    items = []
    for value in values:
        items.append(canonicalize(value, child_ctx))
    return '[' + ','.join(items) + ']'


def _parse_size(size: str, ctx: Context) -> float:
    if not SIZE_PATTERN.fullmatch(size):
        raise InvalidSizeValueError(size, context=ctx.namespace)
    parsed = int(size)
    if parsed > MAX_SIZE:
        raise InvalidSizeValueError(size, context=ctx.namespace)
    return float(parsed)


def _canonicalize_object(schema: Dict[str, Any], ctx: Context) -> str:
    namespace = schema.get('namespace')
    if isinstance(namespace, str):
        ctx = replace(ctx, namespace=namespace)

    if len(schema) == 1 and isinstance(schema.get('type'), str):
        return f'"{schema["type"]}"'

    object_type = schema.get('type')
    pairs: List[Tuple[str, str]] = []
    for key, value in schema.items():
        if key not in FIELD_ORDER:
            continue

        if key == 'name' and ctx.has_namespace() and not ctx.is_field_name:
            if isinstance(value, str) and '.' not in value:
                value = f"{ctx.namespace}.{value}"

        if key == 'size' and isinstance(value, str):
            value = _parse_size(value, ctx)

        canonical_key = _canonicalize_string(key, ctx)
        child_ctx = ctx.descend(is_field_name=key == 'fields', is_type=key in TYPE_POSITION_KEYS)
        canonical_value = canonicalize(value, child_ctx)

        # named types other than record and enum drop their name in a type position
        if ctx.is_type and key == 'name' and isinstance(object_type, str) \
                and object_type not in ('record', 'enum'):
            continue
        pairs.append((key, f"{canonical_key}:{canonical_value}"))

    pairs.sort(key=lambda pair: FIELD_ORDER[pair[0]])
    return '{' + ','.join(pair for _, pair in pairs) + '}'


def _reject_constant(constant: str) -> Any:
    raise InvalidSchemaTypeError(constant)


def parse_schema_text(schema_json: str) -> SchemaValue:
    """
    Decodes Avro schema text into a schema tree.

    JSON numbers are decoded as floats; ``NaN`` and ``Infinity`` are rejected.

    Args:
        schema_json: The Avro schema as JSON text

    Returns:
        The decoded schema tree
    """
    return json.loads(schema_json, parse_int=float, parse_constant=_reject_constant)


def transform_to_pcf(schema_json: str, max_depth: int = MAX_CANONICALIZE_DEPTH) -> str:
    """
    Transforms an Avro schema into its Parsing Canonical Form (PCF).

    :param schema_json: The Avro schema as a JSON string.
    :param max_depth: Maximum nesting depth accepted.
    :return: The Parsing Canonical Form (PCF) as a JSON string.
    """
    return to_parsing_canonical_form(parse_schema_text(schema_json), max_depth=max_depth)
