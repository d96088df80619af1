"""
Rule evaluation engine for the Evaluator Service.
"""

import time
from typing import Any, Sequence

from shared.logging import get_logger
from .errors import EvaluationError, RuleEvaluationError
from .models import (
    AllPredicate, AnyPredicate, EvaluationOutcome, NonePredicate, NotPredicate,
    Predicate, RawPredicate, Reason, Rule, Verdict
)
from .operators import apply
from .paths import resolve


def evaluate_predicate(predicate: Predicate, document: Any) -> bool:
    """Evaluate a predicate tree against a document.

    Children of ``any``/``all``/``none`` are evaluated in order and stop at
    the first deciding result. The first ``EvaluationError`` raised by a leaf
    propagates unchanged; a later child is never consulted to recover from it.
    """
    if isinstance(predicate, RawPredicate):
        value = resolve(document, predicate.path)
        return apply(predicate.operator, value, predicate.value)

    if isinstance(predicate, NotPredicate):
        return not evaluate_predicate(predicate.predicate, document)

    if isinstance(predicate, AnyPredicate):
        return _any(predicate.predicates, document)

    if isinstance(predicate, AllPredicate):
        for child in predicate.predicates:
            if not evaluate_predicate(child, document):
                return False
        return True

    if isinstance(predicate, NonePredicate):
        return not _any(predicate.predicates, document)

    raise TypeError(f"not a predicate: {predicate!r}")


def _any(predicates: Sequence[Predicate], document: Any) -> bool:
    for child in predicates:
        if evaluate_predicate(child, document):
            return True
    return False


class RuleEngine:
    """Rule evaluation engine."""

    def __init__(self):
        self.logger = get_logger("evaluator.rule_engine")

    def evaluate_rule(self, rule: Rule, document: Any) -> bool:
        """Evaluate a single rule."""
        return evaluate_predicate(rule.predicate, document)

    def evaluate_batch(self, rules: Sequence[Rule], document: Any) -> EvaluationOutcome:
        """Evaluate rules in order; the first failing rule aborts the batch."""
        start_time = time.time()
        reasons = []

        for rule in rules:
            try:
                passed = self.evaluate_rule(rule, document)
            except EvaluationError as exc:
                self.logger.info(
                    "Rule evaluation failed",
                    rule_id=rule.rule_id,
                    code=exc.code,
                    error=exc.message
                )
                raise RuleEvaluationError(rule.rule_id, exc) from exc

            reasons.append(Reason(
                rule_id=rule.rule_id,
                message=rule.message,
                evaluation=Verdict.of(passed)
            ))

        result = Verdict.of(all(reason.evaluation == Verdict.PASS for reason in reasons))
        outcome = EvaluationOutcome(
            result=result,
            reasons=reasons,
            evaluation_time_ms=(time.time() - start_time) * 1000
        )

        self.logger.debug(
            "Rule batch evaluated",
            rule_ids=[rule.rule_id for rule in rules],
            result=result.value,
            evaluation_time_ms=outcome.evaluation_time_ms
        )

        return outcome
