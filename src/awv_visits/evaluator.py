"""RuleEvaluator — evaluates a single skip-logic rule against current answers.

Every evaluation has one of three outcomes:

  - **NOT_APPLICABLE**: the source question has not been answered yet, so the
    rule cannot fire (this is not an error)
  - **CONDITION_FALSE**: the condition does not hold, or the rule data is
    malformed (unknown operator, non-numeric operand for a numeric operator)
  - **CONDITION_TRUE**: the condition holds; the rule's action applies

No operator raises on unexpected input: every odd shape degrades to
"condition not met".
"""

from __future__ import annotations

import enum
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from awv_visits.models.skip_logic import Operator, SkipAction, SkipLogicRule

logger = logging.getLogger(__name__)


class RuleOutcome(str, enum.Enum):
    NOT_APPLICABLE = "not_applicable"
    CONDITION_FALSE = "condition_false"
    CONDITION_TRUE = "condition_true"


@dataclass(frozen=True)
class RuleEvaluation:
    """Result of evaluating one rule.  ``action`` is set only when the condition holds."""

    rule_id: str
    outcome: RuleOutcome
    action: SkipAction | None = None

    @property
    def fired(self) -> bool:
        """True if the condition holds and the rule carries an action."""
        return self.outcome == RuleOutcome.CONDITION_TRUE and self.action is not None


def is_answered(responses: Mapping[str, Any], qid: str) -> bool:
    """A question counts as answered once it has a non-None stored value."""
    return responses.get(qid) is not None


class RuleEvaluator:
    """Pure evaluator for skip-logic rules."""

    def evaluate(self, rule: SkipLogicRule, responses: Mapping[str, Any]) -> RuleEvaluation:
        """Evaluate ``rule`` against ``responses`` (qid → raw answer)."""
        source_qid = rule.condition.question_id
        if not is_answered(responses, source_qid):
            return RuleEvaluation(rule.id, RuleOutcome.NOT_APPLICABLE)

        answer = responses.get(source_qid)
        met = self.compare(rule.condition.operator, answer, rule.condition.value)

        logger.debug(
            "rule %s: %s=%r %s %r -> %s (action=%s)",
            rule.id, source_qid, answer, rule.condition.operator,
            rule.condition.value, met, rule.action,
        )

        if not met:
            return RuleEvaluation(rule.id, RuleOutcome.CONDITION_FALSE)
        return RuleEvaluation(rule.id, RuleOutcome.CONDITION_TRUE, rule.action)

    @staticmethod
    def compare(operator: str, answer: Any, value: Any) -> bool:
        """Apply ``operator`` to an answer and the rule's literal value."""
        try:
            op = Operator(operator)
        except ValueError:
            logger.warning("Unknown skip-logic operator: %r", operator)
            return False

        if op == Operator.EQUALS:
            return answer == value

        if op == Operator.NOT_EQUALS:
            return answer != value

        # --- Array membership ---
        if op == Operator.CONTAINS:
            return isinstance(answer, (list, tuple)) and value in answer

        if op == Operator.NOT_CONTAINS:
            return not isinstance(answer, (list, tuple)) or value not in answer

        # --- Numeric comparisons ---
        lhs = _to_number(answer)
        rhs = _to_number(value)
        if lhs is None or rhs is None:
            return False

        if op == Operator.GREATER_THAN:
            return lhs > rhs
        return lhs < rhs


def _to_number(raw: Any) -> float | None:
    """Coerce ``raw`` to float; None when it is not numeric or is NaN."""
    # bool is an int subclass; "yes"/"no" answers must not compare as 1/0
    if isinstance(raw, bool):
        return None
    try:
        num = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(num):
        return None
    return num
