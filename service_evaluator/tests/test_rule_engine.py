"""
Unit tests for the predicate evaluator and batch aggregation.
"""

import pytest
from unittest.mock import patch

from service_evaluator.app.rules import engine as engine_module
from service_evaluator.app.rules.codec import predicate_from_wire, rule_from_wire
from service_evaluator.app.rules.engine import RuleEngine, evaluate_predicate
from service_evaluator.app.rules.errors import (
    FieldAccessError, RuleEvaluationError, TypeMismatchError
)
from service_evaluator.app.rules.models import (
    AllPredicate, AnyPredicate, NonePredicate, NotPredicate, Verdict
)

TRUE = {"path": "flag", "operator": "==", "value": True}
FALSE = {"path": "flag", "operator": "==", "value": False}
TYPE_ERROR = {"path": "name", "operator": ">", "value": 5}
ACCESS_ERROR = {"path": "missing.child", "operator": "==", "value": 1}

DOCUMENT = {"flag": True, "name": "bob"}


def p(data):
    return predicate_from_wire(data)


def height_rule():
    return rule_from_wire({
        "id": "waterpark_height_rule",
        "message": "Riders must be at least 5 feet 2 inches tall",
        "predicate": {
            "any": [
                {"path": "height.feet", "operator": ">", "value": 5},
                {"all": [
                    {"path": "height.feet", "operator": "==", "value": 5},
                    {"path": "height.inches", "operator": ">=", "value": 2},
                ]},
            ]
        }
    })


def age_rule():
    return rule_from_wire({
        "id": "waterpark_age_rule",
        "message": "Riders must be at least 12 years old",
        "predicate": {"path": "age", "operator": ">=", "value": 12}
    })


def make_document(age, feet, inches):
    return {"age": age, "height": {"feet": feet, "inches": inches}}


class TestEvaluatePredicate:
    """Test cases for evaluate_predicate."""

    def test_raw(self):
        """Test a leaf condition."""
        assert evaluate_predicate(p({"path": "foo", "operator": "==", "value": 10}), {"foo": 10}) is True
        assert evaluate_predicate(p({"path": "foo", "operator": "<", "value": 25}), {"foo": 30}) is False
        assert evaluate_predicate(p({"path": "foo", "operator": "contains", "value": "bar"}), {"foo": ["bar"]}) is True

    def test_missing_field_compares_as_null(self):
        """Test a missing terminal field is evaluated as null."""
        assert evaluate_predicate(p({"path": "age", "operator": "==", "value": None}), {}) is True
        with pytest.raises(TypeMismatchError):
            evaluate_predicate(p({"path": "age", "operator": ">=", "value": 12}), {})

    def test_not(self):
        """Test negation."""
        predicate = p({"not": {"path": "foo", "operator": "==", "value": 10}})
        assert evaluate_predicate(predicate, {"foo": 10}) is False
        assert evaluate_predicate(predicate, {"foo": 15}) is True

    @pytest.mark.parametrize("inner", [TRUE, FALSE, {"any": [FALSE, TRUE]}, {"all": []}])
    def test_double_negation(self, inner):
        """Test not(not(p)) evaluates like p."""
        predicate = p(inner)
        doubled = NotPredicate(NotPredicate(predicate))
        assert evaluate_predicate(doubled, DOCUMENT) == evaluate_predicate(predicate, DOCUMENT)

    def test_vacuous_connectives(self):
        """Test empty any/all/none."""
        assert evaluate_predicate(AllPredicate(()), DOCUMENT) is True
        assert evaluate_predicate(AnyPredicate(()), DOCUMENT) is False
        assert evaluate_predicate(NonePredicate(()), DOCUMENT) is True

    @pytest.mark.parametrize("color, expected", [("red", True), ("blue", True), ("", False), ("green", False)])
    def test_any(self, color, expected):
        """Test any passes when at least one child passes."""
        predicate = p({"any": [
            {"path": "color", "operator": "==", "value": "red"},
            {"path": "color", "operator": "==", "value": "blue"},
        ]})
        assert evaluate_predicate(predicate, {"color": color}) is expected

    @pytest.mark.parametrize("fizz, buzz, expected", [(3, 5, True), (5, 3, False), (4, 5, False), (3, 6, False)])
    def test_all(self, fizz, buzz, expected):
        """Test all passes only when every child passes."""
        predicate = p({"all": [
            {"path": "fizz", "operator": "==", "value": 3},
            {"path": "buzz", "operator": "==", "value": 5},
        ]})
        assert evaluate_predicate(predicate, {"fizz": fizz, "buzz": buzz}) is expected

    @pytest.mark.parametrize("color, expected", [("green", True), ("red", False), ("blue", False)])
    def test_none(self, color, expected):
        """Test none passes when no child passes."""
        predicate = p({"none": [
            {"path": "color", "operator": "==", "value": "red"},
            {"path": "color", "operator": "==", "value": "blue"},
        ]})
        assert evaluate_predicate(predicate, {"color": color}) is expected

    @pytest.mark.parametrize("age, feet, inches, expected", [
        (12, 5, 2, True),
        (12, 5, 3, True),
        (12, 5, 12, True),
        (12, 6, 0, True),
        (12, 6, 11, True),
        (12, 5, 1, False),
        (12, 5, 0, False),
        (12, 3, 1, False),
        (11, 6, 0, False),
    ])
    def test_nested_tree(self, age, feet, inches, expected):
        """Test a nested all/any tree over nested fields."""
        predicate = AllPredicate((age_rule().predicate, height_rule().predicate))
        assert evaluate_predicate(predicate, make_document(age, feet, inches)) is expected


class TestErrorPropagation:
    """Test cases for fail-fast error propagation."""

    def test_any_error_before_true_propagates(self):
        """Test a later passing child cannot recover an earlier error."""
        with pytest.raises(TypeMismatchError):
            evaluate_predicate(p({"any": [TYPE_ERROR, TRUE]}), DOCUMENT)

    def test_any_true_before_error_short_circuits(self):
        """Test children after the first pass are not evaluated."""
        assert evaluate_predicate(p({"any": [TRUE, TYPE_ERROR]}), DOCUMENT) is True

    def test_all_false_before_error_short_circuits(self):
        """Test children after the first failure are not evaluated."""
        assert evaluate_predicate(p({"all": [FALSE, ACCESS_ERROR]}), DOCUMENT) is False

    def test_all_error_propagates(self):
        """Test an error inside all propagates unchanged."""
        with pytest.raises(FieldAccessError):
            evaluate_predicate(p({"all": [TRUE, ACCESS_ERROR, FALSE]}), DOCUMENT)

    def test_none_error_propagates(self):
        """Test none propagates errors exactly like any."""
        with pytest.raises(TypeMismatchError):
            evaluate_predicate(p({"none": [FALSE, TYPE_ERROR, TRUE]}), DOCUMENT)
        assert evaluate_predicate(p({"none": [TRUE, TYPE_ERROR]}), DOCUMENT) is False

    def test_not_error_propagates(self):
        """Test negation never masks an error."""
        with pytest.raises(FieldAccessError):
            evaluate_predicate(p({"not": ACCESS_ERROR}), DOCUMENT)

    def test_evaluation_order(self):
        """Test children are visited in list order and evaluation stops early."""
        predicate = p({"any": [FALSE, TRUE, TYPE_ERROR]})
        with patch.object(engine_module, "apply", wraps=engine_module.apply) as spy:
            assert evaluate_predicate(predicate, DOCUMENT) is True

        assert spy.call_count == 2


class TestRuleEngine:
    """Test cases for RuleEngine.evaluate_batch."""

    @pytest.fixture
    def rule_engine(self):
        """Create RuleEngine instance."""
        return RuleEngine()

    def test_all_pass(self, rule_engine):
        """Test a document that satisfies every rule."""
        outcome = rule_engine.evaluate_batch([height_rule(), age_rule()], make_document(24, 7, 10))

        assert outcome.result == Verdict.PASS
        assert [(r.rule_id, r.evaluation) for r in outcome.reasons] == [
            ("waterpark_height_rule", Verdict.PASS),
            ("waterpark_age_rule", Verdict.PASS),
        ]
        assert outcome.reasons[1].message == "Riders must be at least 12 years old"

    def test_one_fails(self, rule_engine):
        """Test a single failing rule fails the batch but keeps every reason."""
        outcome = rule_engine.evaluate_batch([height_rule(), age_rule()], make_document(11, 5, 10))

        assert outcome.result == Verdict.FAIL
        assert [r.evaluation for r in outcome.reasons] == [Verdict.PASS, Verdict.FAIL]

    def test_reasons_follow_request_order(self, rule_engine):
        """Test reasons are reported in the order rules were given."""
        outcome = rule_engine.evaluate_batch([age_rule(), height_rule()], make_document(24, 7, 10))
        assert [r.rule_id for r in outcome.reasons] == ["waterpark_age_rule", "waterpark_height_rule"]

    def test_empty_batch_passes(self, rule_engine):
        """Test an empty batch is a vacuous pass."""
        outcome = rule_engine.evaluate_batch([], {})
        assert outcome.result == Verdict.PASS
        assert outcome.reasons == []

    def test_error_aborts_batch(self, rule_engine):
        """Test the first failing rule aborts the remaining rules."""
        document = {"age": 24, "height": {"feet": "7 feet", "inches": 10}}

        with patch.object(rule_engine, "evaluate_rule", wraps=rule_engine.evaluate_rule) as spy:
            with pytest.raises(RuleEvaluationError) as exc_info:
                rule_engine.evaluate_batch([height_rule(), age_rule()], document)

        assert spy.call_count == 1
        assert exc_info.value.rule_id == "waterpark_height_rule"
        assert isinstance(exc_info.value.cause, TypeMismatchError)
        assert exc_info.value.message == (
            "failed to evaluate rule waterpark_height_rule: "
            "cannot compare string with number using operator Greater"
        )

    def test_error_after_passing_rules(self, rule_engine):
        """Test earlier passing rules do not produce a partial result."""
        document = {"age": 24, "height": None}

        with pytest.raises(RuleEvaluationError) as exc_info:
            rule_engine.evaluate_batch([age_rule(), height_rule()], document)

        assert exc_info.value.message == (
            "failed to evaluate rule waterpark_height_rule: cannot read field `feet` of type null"
        )
