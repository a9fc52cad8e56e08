"""Composite instrument scoring tests — BMI, vitals, PHQ-9, PHQ-2, MMSE."""

import json

import pytest

from awv_visits.instruments import (
    bmi_classification,
    mmse_interpretation,
    normalize_vital_signs,
    phq9_severity,
    score_bmi,
    score_composite,
    score_mmse,
    score_phq2,
    score_phq9,
)
from awv_visits.models.question import QuestionType


class TestBMI:

    def test_imperial_formula(self):
        """180 lb at 70 in → 25.8, overweight."""
        result = score_bmi({"height": 70, "weight": 180})
        assert result["bmi"] == 25.8
        assert result["classification"] == "Overweight"
        assert result["height"] == 70, "Inputs must be preserved"

    def test_string_inputs(self):
        assert score_bmi({"height": "64", "weight": "120"})["bmi"] == 20.6

    @pytest.mark.parametrize("data", [
        {}, {"height": 0, "weight": 150}, {"height": "abc", "weight": 150},
        {"height": 70, "weight": -1},
    ])
    def test_unusable_inputs_leave_bmi_empty(self, data):
        result = score_bmi(data)
        assert result["bmi"] is None
        assert result["classification"] is None

    @pytest.mark.parametrize("bmi, label", [
        (17.0, "Underweight"), (18.5, "Normal weight"), (24.9, "Normal weight"),
        (25.0, "Overweight"), (30.0, "Obese"),
    ])
    def test_classification_bands(self, bmi, label):
        assert bmi_classification(bmi) == label


class TestPHQ:

    def test_phq9_total_and_severity(self):
        result = score_phq9({"answers": [3, 3, 2, 2, 1, 1, 0, 0, 0]})
        assert result["total"] == 12
        assert result["severity"] == "Moderate depression"

    def test_phq9_pads_and_clamps(self):
        """Missing items count 0; out-of-range items clamp to 0-3; junk counts 0."""
        result = score_phq9({"answers": [5, -1, "x", "2"]})
        assert result["answers"] == [3, 0, 0, 2, 0, 0, 0, 0, 0]
        assert result["total"] == 5

    @pytest.mark.parametrize("total, label", [
        (0, "Minimal or none"), (5, "Mild depression"), (10, "Moderate depression"),
        (15, "Moderately severe depression"), (20, "Severe depression"),
    ])
    def test_phq9_bands(self, total, label):
        assert phq9_severity(total) == label

    def test_phq2_positive_at_threshold(self):
        result = score_phq2({"answers": [2, 1]})
        assert result["total"] == 3
        assert result["positive"] is True

    def test_phq2_negative(self):
        result = score_phq2([1, 1])
        assert result["positive"] is False
        assert result["result"] == "Negative screen"


class TestMMSE:

    def test_total_is_clamped_per_domain(self):
        """Each domain is capped at its maximum, so the total never exceeds 30."""
        result = score_mmse({"scores": [9, 9, 9, 9, 9, 9, 9]})
        assert result["scores"] == [5, 5, 3, 5, 3, 8, 1]
        assert result["total"] == 30
        assert result["interpretation"] == "Normal cognition"

    @pytest.mark.parametrize("total, label", [
        (24, "Normal cognition"), (19, "Mild cognitive impairment"),
        (10, "Moderate cognitive impairment"), (9, "Severe cognitive impairment"),
    ])
    def test_interpretation_bands(self, total, label):
        assert mmse_interpretation(total) == label


class TestDispatch:

    def test_vital_signs_coerced(self):
        result = normalize_vital_signs({"bloodPressureSystolic": "150", "heartRate": "", "note": "x"})
        assert result == {"bloodPressureSystolic": 150.0, "heartRate": None, "note": "x"}

    def test_non_composite_passes_through(self):
        assert score_composite(QuestionType.FREE_TEXT, "hello") == "hello"

    def test_none_is_never_scored(self):
        assert score_composite(QuestionType.BMI, None) is None

    def test_unexpected_shape_is_stored_as_is(self):
        assert score_composite(QuestionType.PHQ9, "12") == "12"

    def test_composite_is_scored(self):
        assert score_composite(QuestionType.PHQ2, {"answers": [0, 0]})["total"] == 0


class TestNonFiniteInputs:
    """Extreme numbers must neither raise nor produce values JSONB rejects."""

    def test_underflowing_height_leaves_bmi_empty(self):
        result = score_bmi({"height": "1e-200", "weight": 150})
        assert result["bmi"] is None
        assert result["classification"] is None

    @pytest.mark.parametrize("data", [
        {"height": 65, "weight": "inf"},
        {"height": 65, "weight": "1e400"},
        {"height": "nan", "weight": 150},
        {"height": float("inf"), "weight": 150},
    ])
    def test_infinite_inputs_are_json_safe(self, data):
        result = score_bmi(data)
        assert result["bmi"] is None
        json.dumps(result, allow_nan=False)

    def test_overflowing_height_leaves_bmi_empty(self):
        assert score_bmi({"height": "1e200", "weight": 150})["bmi"] is None

    def test_infinite_vital_sign_becomes_none(self):
        result = normalize_vital_signs({"heartRate": "inf", "temperature": "1e400"})
        assert result == {"heartRate": None, "temperature": None}
        json.dumps(result, allow_nan=False)

    def test_infinite_items_score_zero(self):
        assert score_phq9({"answers": ["inf"] + [1] * 8})["total"] == 8
