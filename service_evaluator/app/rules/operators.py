"""
Comparison operators and their type-checked application.
"""

import operator as _op
from enum import Enum
from typing import Any, Dict

from .errors import TypeMismatchError
from .values import ARRAY, is_number, value_kind, values_equal


class Operator(str, Enum):
    """Closed set of comparison operators, valued by canonical wire name."""
    EQUAL = "equal"
    NOT_EQUAL = "notEqual"
    GREATER = "greater"
    LESS = "less"
    GREATER_EQUAL = "greaterEqual"
    LESS_EQUAL = "lessEqual"
    CONTAINS = "contains"

    @property
    def display_name(self) -> str:
        """Name used in error messages, e.g. ``GreaterEqual``."""
        return self.value[0].upper() + self.value[1:]

    @classmethod
    def parse(cls, text: str) -> "Operator":
        """Look up an operator by canonical name or symbolic alias."""
        if isinstance(text, str):
            found = _BY_NAME.get(text)
            if found is not None:
                return found
        raise ValueError(f"unknown operator {text!r}")


_ALIASES: Dict[str, Operator] = {
    "==": Operator.EQUAL,
    "!=": Operator.NOT_EQUAL,
    ">": Operator.GREATER,
    "<": Operator.LESS,
    ">=": Operator.GREATER_EQUAL,
    "<=": Operator.LESS_EQUAL,
    "in": Operator.CONTAINS,
}

_BY_NAME: Dict[str, Operator] = {member.value: member for member in Operator}
_BY_NAME.update(_ALIASES)

_ORDERING = {
    Operator.GREATER: _op.gt,
    Operator.LESS: _op.lt,
    Operator.GREATER_EQUAL: _op.ge,
    Operator.LESS_EQUAL: _op.le,
}


def apply(operator: Operator, value: Any, target: Any) -> bool:
    """Apply ``operator`` with the document value on the left.

    Raises ``TypeMismatchError`` when the operands do not suit the operator.
    """
    if operator == Operator.EQUAL:
        return values_equal(value, target)

    if operator == Operator.NOT_EQUAL:
        return not values_equal(value, target)

    if operator in _ORDERING:
        if not (is_number(value) and is_number(target)):
            raise TypeMismatchError(value_kind(value), value_kind(target), operator.display_name)
        return _ORDERING[operator](float(value), float(target))

    if operator == Operator.CONTAINS:
        if value_kind(value) != ARRAY:
            raise TypeMismatchError(value_kind(value), value_kind(target), operator.display_name)
        return any(values_equal(item, target) for item in value)

    raise ValueError(f"unsupported operator {operator!r}")
