"""RecommendationExtractor — builds a personalised plan from visit responses.

The extractor walks every recorded answer and collects recommendation texts
from, in order:

  1. ``response["recommendations"]``            → ``template-{qid}-{i}``
  2. ``response["selectedAnswers"][a]["recommendations"]``
                                                 → ``answer-{qid}-{a}-{r}``
  3. template option recommendations for the selected option id(s)
                                                 → ``option-{qid}-{opt}-{i}``
  4. the question's ``default_recommendations`` → ``default-{qid}-{i}``
  5. free-text answers that read like advice    → ``text-{qid}``
  6. risk heuristics (tobacco, excess alcohol, BMI, systolic BP)
                                                 → ``risk-{qid}-{kind}``

Texts are trimmed and de-duplicated (first occurrence wins).  A missing
category is inferred from keywords.  When nothing is found the default
recommendations are returned so a plan is never empty.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from awv_visits.constants import (
    BMI_OBESE_THRESHOLD,
    CATEGORY_PRIORITY,
    DEFAULT_RECOMMENDATIONS,
    RECOMMENDATION_PHRASES,
    SYSTOLIC_BP_THRESHOLD,
)
from awv_visits.models.question import Question, QuestionType
from awv_visits.models.recommendation import Recommendation
from awv_visits.models.template import Template

logger = logging.getLogger(__name__)


def is_recommendation_like(text: str) -> bool:
    """True if ``text`` contains any advice-like phrase."""
    lower = text.lower()
    return any(phrase in lower for phrase in RECOMMENDATION_PHRASES)


def category_from_text(text: str) -> str:
    """Infer a plan category from keywords in the recommendation text."""
    lower = text.lower()
    if "exercise" in lower or "physical activity" in lower:
        return "Exercise"
    if "diet" in lower or "nutrition" in lower:
        return "Nutrition"
    if "follow up" in lower or "appointment" in lower:
        return "Follow-up"
    if "medication" in lower:
        return "Medication"
    return "Lifestyle"


def default_recommendations() -> list[Recommendation]:
    return [
        Recommendation(source="Default recommendation", **raw)
        for raw in DEFAULT_RECOMMENDATIONS
    ]


def group_by_category(
    recommendations: Iterable[Recommendation],
) -> dict[str, list[Recommendation]]:
    """Group recommendations by category in display order.

    Preventive Care and Follow-up come first; the rest sort alphabetically.
    """
    groups: dict[str, list[Recommendation]] = {}
    for rec in recommendations:
        groups.setdefault(rec.category or "Other", []).append(rec)

    def _key(category: str) -> tuple[int, str]:
        if category in CATEGORY_PRIORITY:
            return (CATEGORY_PRIORITY.index(category), "")
        return (len(CATEGORY_PRIORITY), category)

    return {cat: groups[cat] for cat in sorted(groups, key=_key)}


class RecommendationExtractor:
    """Extracts recommendations from responses, using the template for option lookups.

    Args:
        template: the visit's template, or None to skip template-driven sources
    """

    def __init__(self, template: Template | None = None) -> None:
        self._template = template

    def extract(self, responses: Mapping[str, Any] | None) -> list[Recommendation]:
        if not responses:
            return default_recommendations()

        self._seen: set[str] = set()
        self._found: list[Recommendation] = []

        for qid, response in responses.items():
            if response is None or response == "" or response == []:
                continue
            question = self._template.find_question(qid) if self._template else None

            if isinstance(response, dict):
                self._from_embedded(qid, response)
            if question is not None:
                self._from_options(qid, question, response)
                self._from_defaults(qid, question)
            if isinstance(response, dict):
                self._from_text(qid, response.get("text"))
            elif isinstance(response, str) and question is not None \
                    and question.question_type == QuestionType.FREE_TEXT:
                self._from_text(qid, response)
            if question is not None:
                self._from_risks(qid, question, response)

        logger.info("Extracted %d recommendations from %d responses",
                    len(self._found), len(responses))
        return self._found or default_recommendations()

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    def _from_embedded(self, qid: str, response: dict) -> None:
        for i, rec in enumerate(_as_list(response.get("recommendations"))):
            self._add_raw(rec, f"template-{qid}-{i}", f"From template question: {qid}")

        for a, answer in enumerate(_as_list(response.get("selectedAnswers"))):
            if not isinstance(answer, dict):
                continue
            for r, rec in enumerate(_as_list(answer.get("recommendations"))):
                self._add_raw(
                    rec, f"answer-{qid}-{a}-{r}",
                    f"From selected answer in question: {qid}",
                )

    def _from_options(self, qid: str, question: Question, response: Any) -> None:
        if not question.options:
            return
        if isinstance(response, (list, tuple)):
            selected = list(response)
        elif isinstance(response, str):
            selected = [response]
        else:
            return

        for option_id in selected:
            option = question.find_option(option_id)
            if option is None:
                continue
            for i, rec in enumerate(option.recommendations):
                self._add(
                    rec.text, rec.category,
                    f"option-{qid}-{option_id}-{i}",
                    f"From selected option: {option.text}",
                )

    def _from_defaults(self, qid: str, question: Question) -> None:
        for i, rec in enumerate(question.default_recommendations):
            self._add(rec.text, rec.category, f"default-{qid}-{i}",
                      f"Default for question: {question.text}")

    def _from_text(self, qid: str, text: Any) -> None:
        if isinstance(text, str) and is_recommendation_like(text):
            self._add(text, None, f"text-{qid}", f"From text response to question: {qid}")

    def _from_risks(self, qid: str, question: Question, response: Any) -> None:
        """Heuristics keyed on the question wording and the answer."""
        wording = question.text.lower()
        affirmative = response is True or (
            isinstance(response, str) and response.strip().lower() in ("yes", "y", "true")
        )

        if affirmative and ("smoke" in wording or "tobacco" in wording):
            self._add(
                "Consider smoking cessation program or counseling", "Lifestyle",
                f"risk-{qid}-tobacco", f"Risk factor: {question.text}", priority="high",
            )
        if affirmative and "alcohol" in wording and "excess" in wording:
            self._add(
                "Consider reducing alcohol consumption; aim for no more than 1-2 drinks per day",
                "Lifestyle", f"risk-{qid}-alcohol", f"Risk factor: {question.text}",
            )

        bmi = _number(response.get("bmi")) if isinstance(response, dict) else (
            _number(response) if "bmi" in wording else None
        )
        if bmi is not None and bmi > BMI_OBESE_THRESHOLD:
            self._add(
                "Weight management program recommended; aim for 5-10% weight loss",
                "Nutrition", f"risk-{qid}-bmi", f"BMI {bmi}", priority="high",
            )

        systolic = _number(response.get("bloodPressureSystolic")) \
            if isinstance(response, dict) else (
                _number(response) if "blood pressure" in wording else None
            )
        if systolic is not None and systolic > SYSTOLIC_BP_THRESHOLD:
            self._add(
                "Monitor blood pressure regularly; consider dietary modifications",
                "Follow-up", f"risk-{qid}-bp", f"Systolic blood pressure {systolic:g}",
                priority="high",
            )

    # ------------------------------------------------------------------
    # Accumulation
    # ------------------------------------------------------------------

    def _add_raw(self, raw: Any, rec_id: str, source: str) -> None:
        if isinstance(raw, dict) and isinstance(raw.get("text"), str):
            self._add(raw["text"], raw.get("category"), rec_id, source)

    def _add(
        self,
        text: str,
        category: str | None,
        rec_id: str,
        source: str,
        *,
        priority: str = "medium",
    ) -> None:
        text = text.strip()
        if not text or text in self._seen:
            return
        self._seen.add(text)
        self._found.append(Recommendation(
            id=rec_id,
            text=text,
            category=category or category_from_text(text),
            source=source,
            priority=priority,
        ))


def _as_list(raw: Any) -> list:
    return raw if isinstance(raw, list) else []


def _number(raw: Any) -> float | None:
    if isinstance(raw, bool):
        return None
    try:
        return float(raw)
    except (TypeError, ValueError):
        return None
