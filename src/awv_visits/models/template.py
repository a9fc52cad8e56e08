"""Section and template models.

A template is authored once and is read-only while a visit is conducted.
Section order is the navigation order; question order within a section is the
rendering order and also the order in which section-level rules are scanned.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .question import Question
from .skip_logic import CamelModel


class Section(CamelModel):
    """An ordered group of questions shown together on one page."""

    id: str
    title: str
    description: Optional[str] = None
    questions: List[Question] = Field(default_factory=list)


class Template(CamelModel):
    """A reusable assessment template."""

    id: str
    name: str
    description: Optional[str] = None
    sections: List[Section] = Field(default_factory=list)

    # --- Metadata ---
    is_active: bool = True
    version: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def section_count(self) -> int:
        return len(self.sections)

    @property
    def question_count(self) -> int:
        return sum(len(s.questions) for s in self.sections)

    def find_question(self, qid: str) -> Question | None:
        """Return the question with id ``qid`` from any section, if present."""
        for section in self.sections:
            for question in section.questions:
                if question.id == qid:
                    return question
        return None

    def section_index(self, section_id: str) -> int:
        """Return the position of the section with ``section_id``.

        Raises:
            KeyError: if no section has that id.
        """
        for i, section in enumerate(self.sections):
            if section.id == section_id:
                return i
        raise KeyError(section_id)

    def question_ids(self) -> list[str]:
        """All question ids in template order."""
        return [q.id for s in self.sections for q in s.questions]
