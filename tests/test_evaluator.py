"""RuleEvaluator unit tests — outcomes and every operator.

Operator reference (from RuleEvaluator.compare):
    equals, not_equals         — strict equality / inequality
    contains, not_contains     — membership in a list answer
    greater_than, less_than    — numeric comparison (strings coerced)

Unknown operators and odd answer shapes never raise; they read as
"condition not met".
"""

import logging

import pytest

from awv_visits.evaluator import RuleEvaluator, RuleOutcome, is_answered
from awv_visits.models.skip_logic import SkipAction

from helpers.builders import hide_if


@pytest.fixture
def evaluator():
    return RuleEvaluator()


# =====================================================================
# Outcomes
# =====================================================================


class TestOutcomes:
    """The three-way result of evaluating a rule."""

    def test_unanswered_source_is_not_applicable(self, evaluator):
        """No answer for the source question → NOT_APPLICABLE, rule does not fire."""
        result = evaluator.evaluate(hide_if("r1", "q1", "equals", "no"), {})
        assert result.outcome == RuleOutcome.NOT_APPLICABLE
        assert result.fired is False

    def test_none_answer_counts_as_unanswered(self, evaluator):
        """A stored None is the same as no answer."""
        result = evaluator.evaluate(hide_if("r1", "q1", "equals", None), {"q1": None})
        assert result.outcome == RuleOutcome.NOT_APPLICABLE

    def test_condition_true_carries_action(self, evaluator):
        """A met condition reports the rule's action."""
        result = evaluator.evaluate(hide_if("r1", "q1", "equals", "no"), {"q1": "no"})
        assert result.outcome == RuleOutcome.CONDITION_TRUE
        assert result.action == SkipAction.HIDE
        assert result.fired is True

    def test_condition_false(self, evaluator):
        """An unmet condition carries no action."""
        result = evaluator.evaluate(hide_if("r1", "q1", "equals", "no"), {"q1": "yes"})
        assert result.outcome == RuleOutcome.CONDITION_FALSE
        assert result.action is None
        assert result.fired is False

    def test_rule_without_action_does_not_fire(self, evaluator):
        """A met condition on a rule with no action is not decisive."""
        rule = hide_if("r1", "q1", "equals", "no", action=None)
        result = evaluator.evaluate(rule, {"q1": "no"})
        assert result.outcome == RuleOutcome.CONDITION_TRUE
        assert result.fired is False

    def test_lowercase_action_is_normalised(self, evaluator):
        """Authored 'hide' is accepted as HIDE."""
        rule = hide_if("r1", "q1", "equals", "no", action="hide")
        assert rule.action == SkipAction.HIDE

    def test_is_answered(self):
        """Falsy but real answers still count as answered."""
        assert is_answered({"q1": 0}, "q1") is True
        assert is_answered({"q1": False}, "q1") is True
        assert is_answered({"q1": []}, "q1") is True
        assert is_answered({}, "q1") is False


# =====================================================================
# Operators
# =====================================================================


class TestOperators:
    """One positive and one negative case per operator."""

    def test_equals(self):
        assert RuleEvaluator.compare("equals", "yes", "yes") is True
        assert RuleEvaluator.compare("equals", "yes", "no") is False

    def test_equals_is_strict(self):
        """No type coercion: the string "5" does not equal 5."""
        assert RuleEvaluator.compare("equals", "5", 5) is False

    def test_not_equals(self):
        assert RuleEvaluator.compare("not_equals", "yes", "no") is True
        assert RuleEvaluator.compare("not_equals", "yes", "yes") is False

    def test_contains(self):
        assert RuleEvaluator.compare("contains", ["a", "b"], "b") is True
        assert RuleEvaluator.compare("contains", ["a"], "b") is False

    def test_contains_on_non_list_is_false(self):
        """contains against a scalar answer is simply false — never raises."""
        assert RuleEvaluator.compare("contains", "abc", "a") is False
        assert RuleEvaluator.compare("contains", 12, 1) is False
        assert RuleEvaluator.compare("contains", {"a": 1}, "a") is False

    def test_not_contains(self):
        assert RuleEvaluator.compare("not_contains", ["a"], "b") is True
        assert RuleEvaluator.compare("not_contains", ["a", "b"], "b") is False

    def test_not_contains_on_non_list_is_true(self):
        """A scalar answer cannot contain the value."""
        assert RuleEvaluator.compare("not_contains", "abc", "a") is True

    def test_greater_than(self):
        assert RuleEvaluator.compare("greater_than", 10, 5) is True
        assert RuleEvaluator.compare("greater_than", 5, 10) is False

    def test_greater_than_coerces_strings(self):
        """Numeric strings compare numerically."""
        assert RuleEvaluator.compare("greater_than", "140", "90") is True

    def test_less_than(self):
        assert RuleEvaluator.compare("less_than", 3, 5) is True
        assert RuleEvaluator.compare("less_than", 5, 5) is False

    @pytest.mark.parametrize("answer", ["abc", None, True, float("nan"), [1]])
    def test_numeric_operator_with_non_numeric_answer_is_false(self, answer):
        """Non-numeric operands (including booleans and NaN) never satisfy a comparison."""
        assert RuleEvaluator.compare("greater_than", answer, 0) is False
        assert RuleEvaluator.compare("less_than", answer, 1000) is False

    def test_unknown_operator_is_false_and_logged(self, caplog):
        """An unknown operator reads as 'condition not met' with a warning."""
        with caplog.at_level(logging.WARNING, logger="awv_visits.evaluator"):
            assert RuleEvaluator.compare("matches", "abc", "a") is False
        assert "Unknown skip-logic operator" in caplog.text
