"""Required-field validation for the current section.

Only *visible* required questions are checked: a question hidden by skip
logic is excluded from validation as well as from rendering.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from awv_visits.constants import MSG_REQUIRED, MSG_SELECT_ONE
from awv_visits.models.template import Section
from awv_visits.visibility import VisibilityResolver


def missing_answer_message(answer: Any) -> str | None:
    """Return the inline error for an unusable answer, or None if it is fine."""
    if answer is None or answer == "":
        return MSG_REQUIRED
    if isinstance(answer, (list, tuple)) and len(answer) == 0:
        return MSG_SELECT_ONE
    return None


def validate_section(
    section: Section,
    responses: Mapping[str, Any],
    resolver: VisibilityResolver | None = None,
) -> dict[str, str]:
    """Validate the required questions of ``section``.

    Returns:
        ``{qid: message}`` for every failing question, in section order.
        An empty dict means the section may be left.
    """
    resolver = resolver or VisibilityResolver()
    errors: dict[str, str] = {}
    for question in resolver.visible_questions(section, responses):
        if not question.required:
            continue
        message = missing_answer_message(responses.get(question.id))
        if message is not None:
            errors[question.id] = message
    return errors
