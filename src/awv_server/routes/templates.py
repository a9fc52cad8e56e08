"""Template endpoints — browse the loaded assessment templates.

Templates are read-only at runtime; they are loaded from YAML at startup.
"""

from fastapi import APIRouter, Depends, Query

from awv_visits.models.template import Template
from awv_visits.templates import TemplateStore

from awv_server.dependencies import get_store, get_user_id

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("")
def list_templates(
    active_only: bool = Query(True),
    _user_id: str = Depends(get_user_id),
    store: TemplateStore = Depends(get_store),
) -> list[dict]:
    """Summaries of the loaded templates (active ones by default)."""
    return [
        {
            "id": t.id,
            "name": t.name,
            "description": t.description,
            "version": t.version,
            "isActive": t.is_active,
            "sectionCount": t.section_count,
            "questionCount": t.question_count,
        }
        for t in store.list_templates(active_only=active_only)
    ]


@router.get("/{template_id}")
def get_template(
    template_id: str,
    _user_id: str = Depends(get_user_id),
    store: TemplateStore = Depends(get_store),
) -> Template:
    """Full template with sections, questions and skip-logic rules.

    Raises 404 if the template is not loaded.
    """
    return store.get_template(template_id)
