"""NavigationController — moves between template sections, skipping hidden ones.

The controller owns only the current section index; the template and the
:class:`ResponseStore` are passed in explicitly so every decision is based on
the latest answers.

  - ``advance()``: validate the current section, then move forward past any
    hidden sections.  If every remaining section is hidden, land on the last
    section.  At the last section it does nothing.
  - ``retreat()``: move backward past hidden sections (no validation).  If
    every earlier section is hidden, land on the first section.
  - ``settle()``: after an answer changes, step off the current section if
    skip logic has just hidden it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from awv_visits.models.template import Section, Template
from awv_visits.responses import ResponseStore
from awv_visits.validation import validate_section
from awv_visits.visibility import VisibilityResolver

logger = logging.getLogger(__name__)


@dataclass
class NavigationResult:
    """Outcome of a navigation attempt."""

    index: int
    moved: bool
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def blocked(self) -> bool:
        return bool(self.errors)


class NavigationController:
    """Tracks and moves the current section index of a visit.

    Args:
        template: the template being conducted (read-only)
        store: the visit's response store
        current_index: section index to start from (clamped into range)
    """

    def __init__(
        self,
        template: Template,
        store: ResponseStore,
        current_index: int = 0,
        resolver: VisibilityResolver | None = None,
    ) -> None:
        self._template = template
        self._store = store
        self._resolver = resolver or VisibilityResolver()
        last = max(len(template.sections) - 1, 0)
        self._index = min(max(current_index, 0), last)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def index(self) -> int:
        return self._index

    @property
    def section_count(self) -> int:
        return len(self._template.sections)

    @property
    def current_section(self) -> Section | None:
        if not self._template.sections:
            return None
        return self._template.sections[self._index]

    @property
    def is_first(self) -> bool:
        return self._index == 0

    @property
    def is_last(self) -> bool:
        return self._index >= self.section_count - 1

    @property
    def progress_percentage(self) -> int:
        if self.section_count == 0:
            return 0
        return round((self._index + 1) / self.section_count * 100)

    def is_hidden(self, index: int) -> bool:
        return self._resolver.is_section_hidden(self._template, index, self._store)

    def validate_current(self) -> dict[str, str]:
        """Required-field errors for the current section ({} when valid)."""
        section = self.current_section
        if section is None:
            return {}
        return validate_section(section, self._store, self._resolver)

    # ------------------------------------------------------------------
    # Moves
    # ------------------------------------------------------------------

    def advance(self) -> NavigationResult:
        """Move to the next visible section if the current one validates."""
        errors = self.validate_current()
        if errors:
            logger.info(
                "advance blocked at section %d: %d unanswered required question(s)",
                self._index, len(errors),
            )
            return NavigationResult(self._index, moved=False, errors=errors)

        if self.is_last:
            return NavigationResult(self._index, moved=False)

        return self._move_forward()

    def retreat(self) -> NavigationResult:
        """Move to the previous visible section."""
        if self._index <= 0:
            return NavigationResult(self._index, moved=False)

        target = self._index - 1
        while target >= 0 and self.is_hidden(target):
            target -= 1
        if target < 0:
            # Every earlier section is hidden
            target = 0

        moved = target != self._index
        self._index = target
        return NavigationResult(target, moved=moved)

    def settle(self) -> NavigationResult:
        """Leave the current section if skip logic now hides it."""
        if not self.is_hidden(self._index) or self.is_last:
            return NavigationResult(self._index, moved=False)
        logger.debug("section %d hidden after answer change, moving on", self._index)
        return self._move_forward()

    def _move_forward(self) -> NavigationResult:
        last = self.section_count - 1
        target = self._index + 1
        while target <= last and self.is_hidden(target):
            target += 1
        if target > last:
            # Every remaining section is hidden
            target = last

        moved = target != self._index
        self._index = target
        return NavigationResult(target, moved=moved)
