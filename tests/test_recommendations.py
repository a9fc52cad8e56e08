"""RecommendationExtractor tests — sources, dedupe, risk heuristics, grouping."""

from awv_visits.models import Recommendation
from awv_visits.recommendations import (
    RecommendationExtractor,
    category_from_text,
    default_recommendations,
    group_by_category,
    is_recommendation_like,
)

from helpers.builders import question, section, template


def _ids(recs):
    return [r.id for r in recs]


class TestExtraction:

    def test_empty_responses_give_defaults(self, standard_template):
        recs = RecommendationExtractor(standard_template).extract({})
        assert _ids(recs) == ["default-1", "default-2", "default-3"]

    def test_option_recommendations(self, standard_template):
        """Selected option ids pull in their attached recommendations."""
        recs = RecommendationExtractor(standard_template).extract(
            {"screenings_due": ["colonoscopy", "flu_vaccine"]}
        )
        assert _ids(recs) == [
            "option-screenings_due-colonoscopy-0",
            "option-screenings_due-flu_vaccine-0",
        ]
        assert all(r.category == "Preventive Care" for r in recs)

    def test_single_choice_option(self, standard_template):
        recs = RecommendationExtractor(standard_template).extract({"exercise_frequency": "never"})
        assert recs[0].category == "Exercise"
        assert recs[0].source == "From selected option: Never"

    def test_question_defaults_for_answered_question(self, standard_template):
        recs = RecommendationExtractor(standard_template).extract({"fall_history": "yes"})
        assert _ids(recs) == ["default-fall_history-0"]

    def test_embedded_recommendations(self):
        """Recommendations carried inside a structured response are extracted."""
        responses = {
            "q1": {
                "recommendations": [{"text": "Drink more water"}],
                "selectedAnswers": [
                    {"recommendations": [{"text": "Walk daily", "category": "Exercise"}]},
                ],
            }
        }
        recs = RecommendationExtractor().extract(responses)
        assert _ids(recs) == ["template-q1-0", "answer-q1-0-0"]
        assert recs[0].category == "Lifestyle"

    def test_recommendation_like_free_text(self):
        t = template(section("s1", question("notes", type="textarea")))
        recs = RecommendationExtractor(t).extract(
            {"notes": "Recommend a follow up appointment in 3 months"}
        )
        assert _ids(recs) == ["text-notes"]
        assert recs[0].category == "Follow-up"

    def test_plain_free_text_is_ignored(self):
        t = template(section("s1", question("notes", type="textarea")))
        recs = RecommendationExtractor(t).extract({"notes": "Patient is well"})
        assert _ids(recs) == ["default-1", "default-2", "default-3"]

    def test_duplicates_are_removed_by_text(self):
        responses = {
            "q1": {"recommendations": [{"text": "Walk daily"}, {"text": "  Walk daily "}]},
            "q2": {"recommendations": [{"text": "Walk daily"}]},
        }
        recs = RecommendationExtractor().extract(responses)
        assert _ids(recs) == ["template-q1-0"]
        assert recs[0].text == "Walk daily"


class TestRiskHeuristics:

    def test_tobacco_and_alcohol(self, standard_template):
        recs = RecommendationExtractor(standard_template).extract(
            {"tobacco_use": "yes", "alcohol_excess": "yes"}
        )
        ids = _ids(recs)
        assert "risk-tobacco_use-tobacco" in ids
        assert "risk-alcohol_excess-alcohol" in ids
        tobacco = recs[ids.index("risk-tobacco_use-tobacco")]
        assert tobacco.priority == "high"

    def test_no_risk_for_negative_answers(self, standard_template):
        recs = RecommendationExtractor(standard_template).extract({"tobacco_use": "no"})
        assert not any(r.id.startswith("risk-") for r in recs)

    def test_bmi_and_blood_pressure(self, standard_template):
        responses = {
            "bmi": {"height": 64, "weight": 200, "bmi": 34.3},
            "vital_signs": {"bloodPressureSystolic": 150},
        }
        ids = _ids(RecommendationExtractor(standard_template).extract(responses))
        assert "risk-bmi-bmi" in ids
        assert "risk-vital_signs-bp" in ids

    def test_thresholds_are_exclusive(self, standard_template):
        responses = {
            "bmi": {"bmi": 30},
            "vital_signs": {"bloodPressureSystolic": 140},
        }
        recs = RecommendationExtractor(standard_template).extract(responses)
        assert not any(r.id.startswith("risk-") for r in recs)


class TestHelpers:

    def test_is_recommendation_like(self):
        assert is_recommendation_like("You should exercise more") is True
        assert is_recommendation_like("No complaints") is False

    def test_category_from_text(self):
        assert category_from_text("Improve diet") == "Nutrition"
        assert category_from_text("Review medication list") == "Medication"
        assert category_from_text("Sleep more") == "Lifestyle"

    def test_group_by_category_order(self):
        """Preventive Care, then Follow-up, then the rest alphabetically."""
        recs = [
            Recommendation(id="1", text="a", category="Nutrition"),
            Recommendation(id="2", text="b", category="Follow-up"),
            Recommendation(id="3", text="c", category="Exercise"),
            Recommendation(id="4", text="d", category="Preventive Care"),
        ]
        grouped = group_by_category(recs)
        assert list(grouped) == ["Preventive Care", "Follow-up", "Exercise", "Nutrition"]

    def test_defaults_are_fresh_objects(self):
        first = default_recommendations()
        first[0].selected = False
        assert default_recommendations()[0].selected is True
