"""
Rule data models for the Evaluator Service.
"""

from typing import Any, Dict, List, Optional, Tuple, Union
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .operators import Operator
from .paths import FieldPath


class Verdict(str, Enum):
    """Outcome of a rule or of a batch."""
    PASS = "PASS"
    FAIL = "FAIL"

    @classmethod
    def of(cls, passed: bool) -> "Verdict":
        return cls.PASS if passed else cls.FAIL


@dataclass(frozen=True)
class RawPredicate:
    """Leaf condition: ``<path> <operator> <value>``."""
    path: FieldPath
    operator: Operator
    value: Any


@dataclass(frozen=True)
class NotPredicate:
    predicate: "Predicate"


@dataclass(frozen=True)
class AnyPredicate:
    predicates: Tuple["Predicate", ...]


@dataclass(frozen=True)
class AllPredicate:
    predicates: Tuple["Predicate", ...]


@dataclass(frozen=True)
class NonePredicate:
    predicates: Tuple["Predicate", ...]


Predicate = Union[RawPredicate, NotPredicate, AnyPredicate, AllPredicate, NonePredicate]


@dataclass(frozen=True)
class Rule:
    """A named predicate with the requirement reported to callers."""
    rule_id: str
    message: str
    predicate: Predicate


@dataclass(frozen=True)
class Reason:
    """Per-rule outcome of a batch evaluation."""
    rule_id: str
    message: str
    evaluation: Verdict


@dataclass
class EvaluationOutcome:
    """Result of evaluating a batch of rules against one document."""
    result: Verdict
    reasons: List[Reason] = field(default_factory=list)
    evaluation_time_ms: float = 0.0


class RuleRequest(BaseModel):
    """Request body for creating or replacing a rule."""
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1, description="Unique rule identifier")
    message: str = Field(..., description="Requirement reported with the verdict")
    predicate: Dict[str, Any] = Field(..., description="Predicate tree")


class RuleResponse(BaseModel):
    """Wire form of a stored rule."""
    id: str
    message: str
    predicate: Dict[str, Any]


class RuleListResponse(BaseModel):
    """Response model for rule list."""
    rules: List[RuleResponse]
    total: int


class RuleDeleteResponse(BaseModel):
    """Response model for rule deletion."""
    success: bool = True
    deleted: Optional[RuleResponse] = None


class ReasonResponse(BaseModel):
    """Wire form of a Reason."""
    rule: str
    requirement: str
    evaluation: Verdict


class EvaluationResponse(BaseModel):
    """Response model for a batch evaluation."""
    result: Verdict
    reasons: List[ReasonResponse]
