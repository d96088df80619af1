"""
JSON wire encoding of predicates and rules.

A raw predicate is ``{"path": ..., "operator": ..., "value": ...}``; a compound
predicate is a single-key object ``{"not": p}``, ``{"any": [...]}``,
``{"all": [...]}`` or ``{"none": [...]}``. A rule is
``{"id": ..., "message": ..., "predicate": ...}``. Unknown keys are rejected.
"""

from typing import Any, Dict, List

from .errors import InvalidPathError, InvalidPredicateError
from .models import (
    AllPredicate, AnyPredicate, NonePredicate, NotPredicate, Predicate,
    RawPredicate, Rule
)
from .operators import Operator
from .paths import FieldPath
from .values import to_value

_RAW_KEYS = frozenset({"path", "operator", "value"})
_RULE_KEYS = frozenset({"id", "message", "predicate"})
_LIST_CONNECTIVES = {
    "any": AnyPredicate,
    "all": AllPredicate,
    "none": NonePredicate,
}


def predicate_from_wire(data: Any, location: str = "predicate") -> Predicate:
    """Build a predicate tree from its JSON form."""
    if not isinstance(data, dict):
        raise InvalidPredicateError(location, "expected an object")

    keys = set(data)
    if keys & _RAW_KEYS:
        return _raw_from_wire(data, location)

    if len(keys) != 1:
        raise InvalidPredicateError(
            location,
            "expected a raw predicate or exactly one of not, any, all, none"
        )

    (key,) = keys
    body = data[key]

    if key == "not":
        return NotPredicate(predicate_from_wire(body, f"{location}.not"))

    connective = _LIST_CONNECTIVES.get(key)
    if connective is None:
        raise InvalidPredicateError(location, f"unknown key `{key}`")
    if not isinstance(body, list):
        raise InvalidPredicateError(f"{location}.{key}", "expected an array")

    return connective(tuple(
        predicate_from_wire(child, f"{location}.{key}[{index}]")
        for index, child in enumerate(body)
    ))


def _raw_from_wire(data: Dict[str, Any], location: str) -> RawPredicate:
    unknown = set(data) - _RAW_KEYS
    if unknown:
        raise InvalidPredicateError(location, f"unknown keys {sorted(unknown)}")
    missing = _RAW_KEYS - set(data)
    if missing:
        raise InvalidPredicateError(location, f"missing keys {sorted(missing)}")

    try:
        path = FieldPath.parse(data["path"])
    except InvalidPathError as exc:
        raise InvalidPredicateError(f"{location}.path", exc.message) from exc

    try:
        operator = Operator.parse(data["operator"])
    except ValueError as exc:
        raise InvalidPredicateError(f"{location}.operator", str(exc)) from exc

    try:
        value = to_value(data["value"])
    except ValueError as exc:
        raise InvalidPredicateError(f"{location}.value", str(exc)) from exc

    return RawPredicate(path=path, operator=operator, value=value)


def predicate_to_wire(predicate: Predicate) -> Dict[str, Any]:
    """Render a predicate tree as JSON-ready data."""
    if isinstance(predicate, RawPredicate):
        return {
            "path": str(predicate.path),
            "operator": predicate.operator.value,
            "value": to_value(predicate.value),
        }
    if isinstance(predicate, NotPredicate):
        return {"not": predicate_to_wire(predicate.predicate)}
    if isinstance(predicate, AnyPredicate):
        return {"any": [predicate_to_wire(p) for p in predicate.predicates]}
    if isinstance(predicate, AllPredicate):
        return {"all": [predicate_to_wire(p) for p in predicate.predicates]}
    if isinstance(predicate, NonePredicate):
        return {"none": [predicate_to_wire(p) for p in predicate.predicates]}
    raise TypeError(f"not a predicate: {predicate!r}")


def rule_from_wire(data: Any, location: str = "rule") -> Rule:
    """Build a rule from its JSON form."""
    if not isinstance(data, dict):
        raise InvalidPredicateError(location, "expected an object")

    unknown = set(data) - _RULE_KEYS
    if unknown:
        raise InvalidPredicateError(location, f"unknown keys {sorted(unknown)}")
    missing = _RULE_KEYS - set(data)
    if missing:
        raise InvalidPredicateError(location, f"missing keys {sorted(missing)}")

    rule_id = data["id"]
    if not isinstance(rule_id, str) or not rule_id:
        raise InvalidPredicateError(f"{location}.id", "expected a non-empty string")
    message = data["message"]
    if not isinstance(message, str):
        raise InvalidPredicateError(f"{location}.message", "expected a string")

    return Rule(
        rule_id=rule_id,
        message=message,
        predicate=predicate_from_wire(data["predicate"], f"{location}.predicate")
    )


def rule_to_wire(rule: Rule) -> Dict[str, Any]:
    """Render a rule as JSON-ready data."""
    return {
        "id": rule.rule_id,
        "message": rule.message,
        "predicate": predicate_to_wire(rule.predicate),
    }


def rules_from_wire(data: Any) -> List[Rule]:
    """Build a list of rules from a JSON array."""
    if not isinstance(data, list):
        raise InvalidPredicateError("rules", "expected an array")
    return [rule_from_wire(item, f"rules[{index}]") for index, item in enumerate(data)]
