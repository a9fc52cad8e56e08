"""awv_visits — Annual Wellness Visit conduct SDK.

Public API:
    VisitEngine             — async orchestrator for conducting a visit
    TemplateStore           — loads YAML templates into typed models
    RuleEvaluator           — evaluates one skip-logic rule against answers
    VisibilityResolver      — decides which questions / sections are hidden
    NavigationController    — moves between sections, skipping hidden ones
    ResponseStore           — explicit in-memory answer store for a visit
    RecommendationExtractor — builds the personalised prevention plan

Step models:
    SectionStep     — step: render the current section
    CompletionStep  — step: the visit was completed
    StepResult      — union of both
    VisitInfo       — public view of visit state
"""

from awv_visits.engine import VisitEngine
from awv_visits.evaluator import RuleEvaluation, RuleEvaluator, RuleOutcome
from awv_visits.models.recommendation import Recommendation
from awv_visits.models.template import Section, Template
from awv_visits.models.visit import (
    CompletionStep,
    QuestionPayload,
    SectionStep,
    StepResult,
    VisitInfo,
    VisitResponses,
)
from awv_visits.navigation import NavigationController, NavigationResult
from awv_visits.recommendations import RecommendationExtractor, group_by_category
from awv_visits.responses import ResponseStore
from awv_visits.templates import TemplateStore
from awv_visits.validation import validate_section
from awv_visits.visibility import VisibilityResolver

__all__ = [
    # Engine & store
    "VisitEngine",
    "TemplateStore",
    # Skip logic
    "RuleEvaluator",
    "RuleEvaluation",
    "RuleOutcome",
    "VisibilityResolver",
    "NavigationController",
    "NavigationResult",
    "validate_section",
    # Answers & plan
    "ResponseStore",
    "RecommendationExtractor",
    "Recommendation",
    "group_by_category",
    # Templates
    "Section",
    "Template",
    # Visit / step
    "CompletionStep",
    "QuestionPayload",
    "SectionStep",
    "StepResult",
    "VisitInfo",
    "VisitResponses",
]
