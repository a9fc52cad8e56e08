"""TemplateStore — loads assessment templates from YAML into typed models.

The store is loaded once at startup and is read-only afterwards: templates
never change while a visit is being conducted.

Usage::

    store = TemplateStore()         # defaults to templates/ relative to repo root
    store.load()                    # parse every *.yaml / *.yml file

    template = store.get_template("awv-standard")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from awv_visits.constants import AWV_TEMPLATE_DIR
from awv_visits.models.template import Template

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def find_repo_root(start: Optional[Path] = None) -> Path:
    """Walk upwards from *start* to find the repo root (dir with pyproject.toml or .git).

    Falls back to cwd if no marker is found.
    """
    p = (start or Path(__file__).resolve()).parent
    for parent in [p, *p.parents]:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent
    return Path.cwd()


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def lint_template(template: Template) -> list[str]:
    """Return human-readable problems with the template's skip-logic wiring.

    Rules referencing a question or section that does not exist are kept
    (they simply never fire) but are worth flagging to the author.
    """
    qids = set(template.question_ids())
    section_ids = {s.id for s in template.sections}
    problems: list[str] = []

    for section in template.sections:
        for question in section.questions:
            for rule in question.skip_logic_rules:
                if rule.condition.question_id not in qids:
                    problems.append(
                        f"rule {rule.id} on {question.id}: unknown source question "
                        f"{rule.condition.question_id!r}"
                    )
                if rule.is_section_rule and rule.target_section_id not in section_ids:
                    problems.append(
                        f"rule {rule.id} on {question.id}: unknown target section "
                        f"{rule.target_section_id!r}"
                    )
    return problems


# ---------------------------------------------------------------------------
# TemplateStore
# ---------------------------------------------------------------------------

class TemplateStore:
    """Loads all template YAML from a directory and provides lookup by id.

    Each YAML file holds either a single template mapping or a list of them.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = AWV_TEMPLATE_DIR or find_repo_root() / "templates"
        self._base = Path(template_dir)

        # Populated by load(); insertion order is file order
        self.templates: dict[str, Template] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Parse every template file under the directory.

        Raises:
            FileNotFoundError: if the directory does not exist.
            ValueError: if two templates share an id.
        """
        if not self._base.is_dir():
            raise FileNotFoundError(f"Missing template directory: {self._base}")

        paths = sorted([*self._base.glob("*.yaml"), *self._base.glob("*.yml")])
        for path in paths:
            raw = load_yaml(path)
            if raw is None:
                logger.warning("Empty template file skipped: %s", path.name)
                continue
            for entry in raw if isinstance(raw, list) else [raw]:
                self.add(Template(**entry), source=path.name)

        logger.info(
            "TemplateStore loaded: %d templates from %d files (%s)",
            len(self.templates), len(paths), self._base,
        )

    def add(self, template: Template, source: str = "<memory>") -> None:
        """Register a template, warning about dangling skip-logic references."""
        if template.id in self.templates:
            raise ValueError(f"Template '{template.id}' already exists ({source})")
        for problem in lint_template(template):
            logger.warning("Template %s: %s", template.id, problem)
        for section in template.sections:
            for question in section.questions:
                if question.type_warning:
                    logger.warning("Template %s: %s: %s",
                                   template.id, question.id, question.type_warning)
        self.templates[template.id] = template

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_template(self, template_id: str) -> Template:
        """Return the template with ``template_id``.

        Raises:
            KeyError: if no such template is loaded.
        """
        try:
            return self.templates[template_id]
        except KeyError:
            raise KeyError(f"Template '{template_id}' not found") from None

    def has_template(self, template_id: str) -> bool:
        return template_id in self.templates

    def list_templates(self, active_only: bool = False) -> list[Template]:
        return [
            t for t in self.templates.values()
            if t.is_active or not active_only
        ]
