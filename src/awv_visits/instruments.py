"""Scoring for composite clinical instruments.

Composite questions store a structured dict rather than a scalar.  When such
an answer is recorded the engine passes it through :func:`score_composite`,
which fills in the derived fields so the stored answer is self-describing:

  - bmi:          {height, weight, bmi, classification}
  - vital_signs:  {bloodPressureSystolic, ..., weight}   (numeric coercion only)
  - phq9:         {answers[9], total, severity}
  - phq2:         {answers[2], total, result, positive}
  - mmse:         {scores[7], total, interpretation}

Malformed input never raises: unparseable items score 0 and unusable
height/weight leave the BMI empty.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from awv_visits.constants import (
    BMI_IMPERIAL_FACTOR,
    MMSE_DOMAINS,
    PHQ2_ITEM_COUNT,
    PHQ2_POSITIVE_THRESHOLD,
    PHQ9_ITEM_COUNT,
    VITAL_SIGN_FIELDS,
)
from awv_visits.models.question import QuestionType

logger = logging.getLogger(__name__)


# ------------------------------------------------------------------
# Coercion helpers
# ------------------------------------------------------------------

def _to_float(raw: Any) -> float | None:
    """Parse a finite float; anything else (including inf and NaN) is None."""
    if isinstance(raw, bool) or raw is None or raw == "":
        return None
    try:
        num = float(raw)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


def _to_int(raw: Any) -> int:
    """Lenient integer parse: anything unparseable counts as 0."""
    num = _to_float(raw)
    if num is None:
        return 0
    return int(num)


def _items(value: Any, key: str, count: int) -> list[int]:
    """Extract ``count`` integer items from ``value[key]`` (or a bare list), padding with 0."""
    raw = value.get(key) if isinstance(value, dict) else value
    if not isinstance(raw, (list, tuple)):
        raw = []
    items = [_to_int(v) for v in raw[:count]]
    return items + [0] * (count - len(items))


# ------------------------------------------------------------------
# BMI
# ------------------------------------------------------------------

def bmi_classification(bmi: float) -> str:
    if bmi < 18.5:
        return "Underweight"
    if bmi < 25:
        return "Normal weight"
    if bmi < 30:
        return "Overweight"
    return "Obese"


def score_bmi(value: Any) -> dict:
    """Compute BMI from height (inches) and weight (pounds)."""
    data = dict(value) if isinstance(value, dict) else {}
    height = _to_float(data.get("height"))
    weight = _to_float(data.get("weight"))
    for name in ("height", "weight"):
        # JSONB cannot store inf / NaN
        if isinstance(data.get(name), float) and not math.isfinite(data[name]):
            data[name] = None

    bmi = None
    if height is not None and weight is not None and height > 0 and weight > 0:
        # Tiny or huge heights under- or overflow when squared
        squared = height * height
        if squared > 0 and math.isfinite(squared):
            bmi = weight / squared * BMI_IMPERIAL_FACTOR

    if bmi is not None and math.isfinite(bmi):
        data["bmi"] = round(bmi, 1)
        data["classification"] = bmi_classification(bmi)
    else:
        data["bmi"] = None
        data["classification"] = None
    return data


# ------------------------------------------------------------------
# Vital signs
# ------------------------------------------------------------------

def normalize_vital_signs(value: Any) -> dict:
    """Coerce known vital-sign fields to numbers; blanks become None."""
    data = dict(value) if isinstance(value, dict) else {}
    for name in VITAL_SIGN_FIELDS:
        if name in data:
            data[name] = _to_float(data[name])
    return data


# ------------------------------------------------------------------
# PHQ-9 / PHQ-2
# ------------------------------------------------------------------

def phq9_severity(total: int) -> str:
    if total >= 20:
        return "Severe depression"
    if total >= 15:
        return "Moderately severe depression"
    if total >= 10:
        return "Moderate depression"
    if total >= 5:
        return "Mild depression"
    return "Minimal or none"


def score_phq9(value: Any) -> dict:
    """Total the nine 0-3 items and attach the severity band."""
    answers = [min(max(a, 0), 3) for a in _items(value, "answers", PHQ9_ITEM_COUNT)]
    total = sum(answers)
    return {"answers": answers, "total": total, "severity": phq9_severity(total)}


def score_phq2(value: Any) -> dict:
    """Total the two 0-3 items; at or above the threshold is a positive screen."""
    answers = [min(max(a, 0), 3) for a in _items(value, "answers", PHQ2_ITEM_COUNT)]
    total = sum(answers)
    positive = total >= PHQ2_POSITIVE_THRESHOLD
    return {
        "answers": answers,
        "total": total,
        "positive": positive,
        "result": (
            "Positive screen - further evaluation recommended"
            if positive else "Negative screen"
        ),
    }


# ------------------------------------------------------------------
# MMSE
# ------------------------------------------------------------------

def mmse_interpretation(total: int) -> str:
    if total >= 24:
        return "Normal cognition"
    if total >= 19:
        return "Mild cognitive impairment"
    if total >= 10:
        return "Moderate cognitive impairment"
    return "Severe cognitive impairment"


def score_mmse(value: Any) -> dict:
    """Clamp each domain score to its maximum and total them (max 30)."""
    raw = _items(value, "scores", len(MMSE_DOMAINS))
    scores = [min(max(s, 0), max_pts) for s, (_, max_pts) in zip(raw, MMSE_DOMAINS)]
    total = sum(scores)
    return {"scores": scores, "total": total, "interpretation": mmse_interpretation(total)}


# ------------------------------------------------------------------
# Dispatch
# ------------------------------------------------------------------

_SCORERS = {
    QuestionType.BMI: score_bmi,
    QuestionType.VITAL_SIGNS: normalize_vital_signs,
    QuestionType.PHQ9: score_phq9,
    QuestionType.PHQ2: score_phq2,
    QuestionType.MMSE: score_mmse,
}


def score_composite(question_type: QuestionType, value: Any) -> Any:
    """Score ``value`` for a composite question; other types pass through unchanged.

    ``None`` is never scored so that clearing an answer stays a clear.
    """
    scorer = _SCORERS.get(question_type)
    if scorer is None or value is None:
        return value
    if not isinstance(value, (dict, list, tuple)):
        logger.warning(
            "%s answer has unexpected shape %s; storing as-is",
            question_type.value, type(value).__name__,
        )
        return value
    return scorer(value)
