"""
Error taxonomy of the rule engine and rule store.
"""

from typing import Any, Dict, Optional

from shared.errors import ConflictError, NotFoundError, ServiceException, ValidationError


class EvaluationError(ServiceException):
    """A predicate could not be evaluated against a document."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(code, message, details, status_code=400)


class FieldAccessError(EvaluationError):
    """A path tried to descend through a value that is not a mapping."""

    def __init__(self, field: str, kind: str):
        self.field = field
        self.kind = kind
        super().__init__(
            "FIELD_ACCESS_ERROR",
            f"cannot read field `{field}` of type {kind}",
            {"field": field, "kind": kind}
        )


class TypeMismatchError(EvaluationError):
    """An operator was applied to operands of incompatible types."""

    def __init__(self, lhs: str, rhs: str, operator: str):
        self.lhs = lhs
        self.rhs = rhs
        self.operator = operator
        super().__init__(
            "TYPE_MISMATCH",
            f"cannot compare {lhs} with {rhs} using operator {operator}",
            {"lhs": lhs, "rhs": rhs, "operator": operator}
        )


class RuleEvaluationError(ServiceException):
    """A rule in a batch failed to evaluate; the batch is aborted."""

    def __init__(self, rule_id: str, cause: EvaluationError):
        self.rule_id = rule_id
        self.cause = cause
        super().__init__(
            "RULE_EVALUATION_ERROR",
            f"failed to evaluate rule {rule_id}: {cause.message}",
            {"rule": rule_id, "cause": cause.code, **cause.details},
            status_code=400
        )


class InvalidPathError(ValidationError):
    """A field path string is empty or contains an empty segment."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"invalid field path `{path}`", {"path": path})


class InvalidPredicateError(ValidationError):
    """A predicate or rule document does not match the wire format."""

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"invalid {location}: {reason}", {"location": location})


class RuleNotFoundError(NotFoundError):
    """No rule is stored under the requested id."""

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(f"a rule with id {rule_id} does not exist", {"rule": rule_id})


class DuplicateRuleError(ConflictError):
    """A rule is already stored under the requested id."""

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(f"a rule with id {rule_id} already exists", {"rule": rule_id})
