"""Public model re-exports for awv_visits.

Consumers should import from ``awv_visits.models`` rather than reaching into
sub-modules directly.
"""

# --- Skip logic ---
from awv_visits.models.skip_logic import (
    Operator,
    SkipAction,
    SkipCondition,
    SkipLogicRule,
    TargetType,
)

# --- Questions ---
from awv_visits.models.question import (
    COMPOSITE_TYPES,
    Option,
    OptionRecommendation,
    Question,
    QuestionType,
    resolve_question_type,
)

# --- Templates ---
from awv_visits.models.template import Section, Template

# --- Recommendations ---
from awv_visits.models.recommendation import Recommendation

# --- Visit / step ---
from awv_visits.models.visit import (
    CompletionStep,
    QuestionPayload,
    SectionStep,
    StepResult,
    VisitInfo,
    VisitResponses,
)

__all__ = [
    # Skip logic
    "Operator",
    "SkipAction",
    "SkipCondition",
    "SkipLogicRule",
    "TargetType",
    # Questions
    "COMPOSITE_TYPES",
    "Option",
    "OptionRecommendation",
    "Question",
    "QuestionType",
    "resolve_question_type",
    # Templates
    "Section",
    "Template",
    # Recommendations
    "Recommendation",
    # Visit
    "CompletionStep",
    "QuestionPayload",
    "SectionStep",
    "StepResult",
    "VisitInfo",
    "VisitResponses",
]
