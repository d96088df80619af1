"""
Value model for rule evaluation.

A value is any JSON-compatible Python object: ``None``, ``bool``, ``int`` or
``float``, ``str``, ``list`` and ``dict`` with string keys. Documents and
rule literals both use this representation. ``value_kind`` is the tag of the
union and every comparison dispatches on it, so ``True`` is a boolean and
never the number ``1``.
"""

import math
from typing import Any, Dict, List, Union

JsonValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any]]

NULL = "null"
BOOLEAN = "boolean"
NUMBER = "number"
STRING = "string"
ARRAY = "array"
OBJECT = "object"


def value_kind(value: Any) -> str:
    """Return the JSON type name of a value."""
    if value is None:
        return NULL
    # bool must be checked before int: bool is an int subclass
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, (int, float)):
        return NUMBER
    if isinstance(value, str):
        return STRING
    if isinstance(value, list):
        return ARRAY
    if isinstance(value, dict):
        return OBJECT
    raise ValueError(f"unsupported value type {type(value).__name__}")


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def to_value(obj: Any) -> JsonValue:
    """Validate ``obj`` into the value model and return a detached copy.

    Tuples are accepted as sequences. Non-finite floats, non-string mapping
    keys and any other Python type raise ``ValueError``.
    """
    if obj is None or isinstance(obj, (bool, str)):
        return obj
    if isinstance(obj, int):
        try:
            float(obj)
        except OverflowError as exc:
            raise ValueError(f"number {obj} is out of range") from exc
        return obj
    if isinstance(obj, float):
        if not math.isfinite(obj):
            raise ValueError(f"non-finite number {obj!r} is not a valid value")
        return obj
    if isinstance(obj, (list, tuple)):
        return [to_value(item) for item in obj]
    if isinstance(obj, dict):
        result = {}
        for key, item in obj.items():
            if not isinstance(key, str):
                raise ValueError(f"mapping key {key!r} is not a string")
            result[key] = to_value(item)
        return result
    raise ValueError(f"unsupported value type {type(obj).__name__}")


def values_equal(left: Any, right: Any) -> bool:
    """Deep, type-exact equality with no coercion.

    Numbers compare as double-precision floats regardless of int/float
    representation.
    """
    kind = value_kind(left)
    if kind != value_kind(right):
        return False

    if kind == ARRAY:
        if len(left) != len(right):
            return False
        return all(values_equal(a, b) for a, b in zip(left, right))

    if kind == OBJECT:
        if left.keys() != right.keys():
            return False
        return all(values_equal(item, right[key]) for key, item in left.items())

    if kind == NUMBER:
        return float(left) == float(right)

    return left == right
