"""Question models for assessment templates.

Authored templates carry a free-form ``type`` tag (``"radio"``,
``"multiple_choice"``, ``"phq-9"``, ...).  Every tag is resolved once into the
closed :class:`QuestionType` enumeration so the rest of the SDK matches on
enum members instead of strings:

  Simple inputs:
    - free_text, numeric, date, yes_no
    - single_choice / multi_choice: pick one / several option ids
    - scoring_scale: single_choice over a 0-3 scale (default options supplied)

  Composite instruments (answer is a structured dict):
    - bmi, vital_signs, phq9, phq2, mmse

An unrecognised tag never fails the template: it resolves to
``single_choice`` when the question has options, otherwise to ``free_text``
with a warning that renderers show next to the input.
"""

from __future__ import annotations

import enum
from typing import Any, List, Optional

from pydantic import Field

from .skip_logic import CamelModel, SkipLogicRule


class QuestionType(str, enum.Enum):
    """Closed set of question kinds the SDK knows how to handle."""

    FREE_TEXT = "free_text"
    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"
    NUMERIC = "numeric"
    DATE = "date"
    YES_NO = "yes_no"
    SCORING_SCALE = "scoring_scale"
    BMI = "bmi"
    VITAL_SIGNS = "vital_signs"
    PHQ9 = "phq9"
    PHQ2 = "phq2"
    MMSE = "mmse"


# Question types whose answer is a structured dict scored by ``instruments``.
COMPOSITE_TYPES: frozenset[QuestionType] = frozenset({
    QuestionType.BMI,
    QuestionType.VITAL_SIGNS,
    QuestionType.PHQ9,
    QuestionType.PHQ2,
    QuestionType.MMSE,
})

# Maps authored type tags (lower-cased) → QuestionType.
TYPE_ALIASES: dict[str, QuestionType] = {
    # single choice
    "single_choice": QuestionType.SINGLE_CHOICE,
    "single_select": QuestionType.SINGLE_CHOICE,
    "multiple_choice": QuestionType.SINGLE_CHOICE,
    "multiplechoice": QuestionType.SINGLE_CHOICE,
    "choice": QuestionType.SINGLE_CHOICE,
    "select": QuestionType.SINGLE_CHOICE,
    "radio": QuestionType.SINGLE_CHOICE,
    # multi choice
    "multi_choice": QuestionType.MULTI_CHOICE,
    "multi_select": QuestionType.MULTI_CHOICE,
    "checkboxes": QuestionType.MULTI_CHOICE,
    "checkbox": QuestionType.MULTI_CHOICE,
    "multiselect": QuestionType.MULTI_CHOICE,
    "multi": QuestionType.MULTI_CHOICE,
    # free text
    "free_text": QuestionType.FREE_TEXT,
    "freetext": QuestionType.FREE_TEXT,
    "text": QuestionType.FREE_TEXT,
    "textarea": QuestionType.FREE_TEXT,
    "string": QuestionType.FREE_TEXT,
    # numeric
    "numeric": QuestionType.NUMERIC,
    "number": QuestionType.NUMERIC,
    "integer": QuestionType.NUMERIC,
    # date
    "date": QuestionType.DATE,
    "calendar": QuestionType.DATE,
    # yes / no
    "yes_no": QuestionType.YES_NO,
    "yesno": QuestionType.YES_NO,
    "boolean": QuestionType.YES_NO,
    "yes/no": QuestionType.YES_NO,
    "true/false": QuestionType.YES_NO,
    # scoring scale
    "scoring_scale": QuestionType.SCORING_SCALE,
    "scoringscale": QuestionType.SCORING_SCALE,
    # composite instruments
    "bmi": QuestionType.BMI,
    "bmi_calculator": QuestionType.BMI,
    "vital_signs": QuestionType.VITAL_SIGNS,
    "vitalsigns": QuestionType.VITAL_SIGNS,
    "phq9": QuestionType.PHQ9,
    "phq-9": QuestionType.PHQ9,
    "phq2": QuestionType.PHQ2,
    "phq-2": QuestionType.PHQ2,
    "mmse": QuestionType.MMSE,
    "mini-mental": QuestionType.MMSE,
}


def resolve_question_type(
    raw: str | None, *, has_options: bool = False
) -> tuple[QuestionType, str | None]:
    """Resolve an authored type tag to ``(QuestionType, warning)``.

    ``warning`` is ``None`` for recognised tags and for unknown tags that can
    fall back to a choice list.  Unknown tags without options fall back to
    free text and return a human-readable warning.
    """
    key = (raw or "").strip().lower()
    qtype = TYPE_ALIASES.get(key)
    if qtype is not None:
        return qtype, None
    if has_options:
        return QuestionType.SINGLE_CHOICE, None
    return (
        QuestionType.FREE_TEXT,
        f'Unrecognized question type "{raw}" - using text input as fallback',
    )


# --- Options ---

class OptionRecommendation(CamelModel):
    """A recommendation attached to a selectable option (or a question)."""

    id: Optional[str] = None
    text: str
    category: Optional[str] = None


class Option(CamelModel):
    """A selectable option.  ``value`` is a display/scoring value, ``id`` is stored."""

    id: str
    text: str
    value: Optional[Any] = None
    recommendations: List[OptionRecommendation] = Field(default_factory=list)


# --- Question ---

class Question(CamelModel):
    """A single template question as authored."""

    id: str
    text: str
    type: str = "free_text"
    required: bool = False
    options: List[Option] = Field(default_factory=list)
    skip_logic_rules: List[SkipLogicRule] = Field(default_factory=list)
    default_recommendations: List[OptionRecommendation] = Field(default_factory=list)

    @property
    def question_type(self) -> QuestionType:
        """The resolved :class:`QuestionType` for this question."""
        return resolve_question_type(self.type, has_options=bool(self.options))[0]

    @property
    def type_warning(self) -> str | None:
        """Warning to surface when the authored type tag was not recognised."""
        return resolve_question_type(self.type, has_options=bool(self.options))[1]

    @property
    def is_composite(self) -> bool:
        return self.question_type in COMPOSITE_TYPES

    def find_option(self, option_id: Any) -> Option | None:
        """Return the option whose id equals ``option_id``, if any."""
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None
