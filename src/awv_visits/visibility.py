"""VisibilityResolver — decides which questions and sections are hidden.

Question visibility:
    Only the question's own rules are scanned, skipping section-level ones.
    The first rule whose condition holds *and* that carries an action decides
    (HIDE hides, SHOW shows).  With no such rule the question is visible.

Section visibility:
    Every question in the section is scanned, in order, for section-level
    rules.  The first one whose condition holds and whose
    ``target_section_id`` is this section decides.  Section-level rules that
    name a different section are ignored here.

Rule lists are evaluated in declaration order; conflicting rules are not
reconciled beyond that order.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from awv_visits.evaluator import RuleEvaluator
from awv_visits.models.question import Question
from awv_visits.models.skip_logic import SkipAction
from awv_visits.models.template import Section, Template

logger = logging.getLogger(__name__)


class VisibilityResolver:
    """Applies skip-logic rules to questions and sections."""

    def __init__(self, evaluator: RuleEvaluator | None = None) -> None:
        self._evaluator = evaluator or RuleEvaluator()

    # ------------------------------------------------------------------
    # Questions
    # ------------------------------------------------------------------

    def is_question_hidden(self, question: Question, responses: Mapping[str, Any]) -> bool:
        """True if the question's own rules hide it under ``responses``."""
        for rule in question.skip_logic_rules:
            if rule.is_section_rule:
                continue
            result = self._evaluator.evaluate(rule, responses)
            if result.fired:
                hidden = result.action == SkipAction.HIDE
                logger.debug(
                    "question %s %s by rule %s",
                    question.id, "hidden" if hidden else "shown", rule.id,
                )
                return hidden
        return False

    def visible_questions(
        self, section: Section, responses: Mapping[str, Any]
    ) -> list[Question]:
        """Questions of ``section`` that should be rendered, in order."""
        return [q for q in section.questions if not self.is_question_hidden(q, responses)]

    def hidden_question_ids(
        self, section: Section, responses: Mapping[str, Any]
    ) -> list[str]:
        """Ids of questions in ``section`` suppressed by skip logic."""
        return [q.id for q in section.questions if self.is_question_hidden(q, responses)]

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def is_section_hidden(
        self, template: Template, index: int, responses: Mapping[str, Any]
    ) -> bool:
        """True if section ``index`` should be bypassed during navigation.

        Out-of-range indexes are never hidden.
        """
        if index < 0 or index >= len(template.sections):
            return False
        section = template.sections[index]

        for question in section.questions:
            for rule in question.skip_logic_rules:
                if not rule.is_section_rule:
                    continue
                result = self._evaluator.evaluate(rule, responses)
                if not result.fired or rule.target_section_id != section.id:
                    continue
                hidden = result.action == SkipAction.HIDE
                logger.debug(
                    "section %d (%s) %s by rule %s",
                    index, section.id, "hidden" if hidden else "shown", rule.id,
                )
                return hidden
        return False

    def hidden_section_indexes(
        self, template: Template, responses: Mapping[str, Any]
    ) -> list[int]:
        """Indexes of every section currently bypassed by skip logic."""
        return [
            i for i in range(len(template.sections))
            if self.is_section_hidden(template, i, responses)
        ]
