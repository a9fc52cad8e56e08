"""Constants shared across the visit-conduct SDK.

These values are referenced by the validator, the instrument scorers and the
recommendation extractor.  Clinical thresholds can be overridden via
environment variables so deployments can adjust them without code changes.
"""

import os

# Validation messages surfaced inline next to a required question.
MSG_REQUIRED = "This question requires an answer"
MSG_SELECT_ONE = "Please select at least one option"

# Template directory; when unset the store uses templates/ under the repo root.
AWV_TEMPLATE_DIR = os.getenv("AWV_TEMPLATE_DIR")

# --- Instruments ---

# BMI uses imperial units: weight (lb) / height (in)^2 * 703.
BMI_IMPERIAL_FACTOR = 703

PHQ9_ITEM_COUNT = 9
PHQ2_ITEM_COUNT = 2
# PHQ-2 total at or above this is a positive screen.
PHQ2_POSITIVE_THRESHOLD = int(os.getenv("PHQ2_POSITIVE_THRESHOLD", "3"))

# (domain name, max points): totals to 30.
MMSE_DOMAINS: list[tuple[str, int]] = [
    ("Orientation to Time", 5),
    ("Orientation to Place", 5),
    ("Registration", 3),
    ("Attention and Calculation", 5),
    ("Recall", 3),
    ("Language", 8),
    ("Visual Construction", 1),
]

VITAL_SIGN_FIELDS: tuple[str, ...] = (
    "bloodPressureSystolic",
    "bloodPressureDiastolic",
    "heartRate",
    "respiratoryRate",
    "temperature",
    "oxygenSaturation",
    "height",
    "weight",
)

# Default options for a scoring_scale question authored without options.
DEFAULT_SCALE_OPTIONS: list[dict] = [
    {"id": "0", "text": "0 - None", "value": "0"},
    {"id": "1", "text": "1 - Mild", "value": "1"},
    {"id": "2", "text": "2 - Moderate", "value": "2"},
    {"id": "3", "text": "3 - Severe", "value": "3"},
]

# --- Recommendations ---

# Risk heuristics: numeric thresholds above which a recommendation is derived.
BMI_OBESE_THRESHOLD = float(os.getenv("BMI_OBESE_THRESHOLD", "30"))
SYSTOLIC_BP_THRESHOLD = float(os.getenv("SYSTOLIC_BP_THRESHOLD", "140"))

# Phrases that make a free-text answer look like a recommendation.
RECOMMENDATION_PHRASES: tuple[str, ...] = (
    "recommend", "should", "advised", "suggest", "consider", "try",
    "increase", "decrease", "reduce", "avoid", "limit", "follow up",
    "schedule", "consult", "visit", "appointment", "check", "monitor",
)

# Category display order for grouped plans; everything else sorts by name.
CATEGORY_PRIORITY: list[str] = ["Preventive Care", "Follow-up"]

DEFAULT_RECOMMENDATIONS: list[dict] = [
    {
        "id": "default-1",
        "text": "Schedule a follow-up appointment with your primary care provider",
        "category": "Follow-up",
    },
    {
        "id": "default-2",
        "text": "Maintain a balanced diet rich in fruits, vegetables, and whole grains",
        "category": "Nutrition",
    },
    {
        "id": "default-3",
        "text": "Aim for at least 150 minutes of moderate physical activity each week",
        "category": "Exercise",
    },
]

# Options rendered for a yes_no question authored without options.
YES_NO_OPTIONS: list[dict] = [
    {"id": "yes", "text": "Yes", "value": "yes"},
    {"id": "no", "text": "No", "value": "no"},
]
