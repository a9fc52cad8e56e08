"""Skip-logic rule models for assessment templates.

A rule is attached to a question and references a *source* question whose
answer decides whether the rule fires:

  - question-level rules (``target_type`` absent or ``QUESTION``) show or hide
    the question that carries them
  - section-level rules (``target_type: SECTION``) show or hide the section
    named by ``target_section_id``

``operator`` is a raw string rather than a ``Literal``: templates with an
operator the evaluator does not know still load, and the evaluator treats
such rules as "condition not met".
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class Operator(str, enum.Enum):
    """Comparison operators understood by the rule evaluator."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"


class SkipAction(str, enum.Enum):
    """Visibility action applied when a rule's condition holds."""

    SHOW = "SHOW"
    HIDE = "HIDE"


class TargetType(str, enum.Enum):
    """What a rule acts on: the question carrying it, or a whole section."""

    QUESTION = "QUESTION"
    SECTION = "SECTION"


class CamelModel(BaseModel):
    """Base for template models: accepts snake_case and camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SkipCondition(CamelModel):
    """``<answer of question_id> <operator> <value>``."""

    question_id: str
    operator: str
    value: Any = None


class SkipLogicRule(CamelModel):
    """A single show/hide rule attached to a question."""

    id: str
    condition: SkipCondition
    action: Optional[SkipAction] = None
    target_type: Optional[TargetType] = None
    target_section_id: Optional[str] = None

    @field_validator("action", "target_type", mode="before")
    @classmethod
    def _upper(cls, v: Any) -> Any:
        # Authoring tools have emitted both "HIDE" and "hide"
        if isinstance(v, str):
            return v.strip().upper() or None
        return v

    @property
    def is_section_rule(self) -> bool:
        """True if the rule targets a whole section."""
        return self.target_type == TargetType.SECTION
