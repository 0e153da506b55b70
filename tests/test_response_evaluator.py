"""
Tests for parsing and normalizing evaluator output.
"""
import json

import pytest

from response_evaluator import (
    parse_evaluation,
    score_to_performance_level,
    score_to_recommendation,
)


class TestParseEvaluation:

    def test_full_response(self):
        text = json.dumps({
            "overall_score": 84,
            "performance_level": "Strong",
            "strengths": ["Correct approach", "Mentions complexity"],
            "improvements": ["Discuss edge cases"],
            "detailed_feedback": "A solid answer.",
            "recommendation": "Hire",
            "dimension_scores": {"technical_accuracy": 88, "communication": 80},
        })
        result = parse_evaluation(text)

        assert result.score == 84
        assert result.performance_level == "Strong"
        assert result.strengths == ["Correct approach", "Mentions complexity"]
        assert result.recommendation == "Hire"
        assert result.dimension_scores == {"technical_accuracy": 88.0, "communication": 80.0}

    def test_markdown_fenced_json(self):
        text = 'Here is my grading:\n```json\n{"overall_score": 55, "recommendation": "No Hire"}\n```'
        result = parse_evaluation(text)
        assert result.score == 55
        assert result.recommendation == "No Hire"
        assert result.performance_level == "Needs Improvement"

    def test_score_is_clamped(self):
        assert parse_evaluation('{"overall_score": 140}').score == 100
        assert parse_evaluation('{"overall_score": -5}').score == 0

    def test_missing_fields_get_defaults(self):
        result = parse_evaluation('{"overall_score": "not a number"}')

        assert result.score == 70
        assert result.performance_level == "Good"
        assert result.recommendation == "Hire"
        assert result.strengths == ["Shows understanding"]
        assert result.improvements == ["Add more details"]
        assert result.feedback == "Response processed successfully"

    def test_unknown_labels_derived_from_score(self):
        result = parse_evaluation('{"overall_score": 92, "performance_level": "Amazing", "recommendation": "Yes"}')
        assert result.performance_level == "Excellent"
        assert result.recommendation == "Strong Hire"

    def test_no_json_raises(self):
        with pytest.raises(ValueError):
            parse_evaluation("The candidate did fine.")


@pytest.mark.parametrize("score,level", [
    (95, "Excellent"), (90, "Excellent"), (89.9, "Strong"), (80, "Strong"),
    (70, "Good"), (60, "Satisfactory"), (50, "Needs Improvement"), (49, "Weak"),
])
def test_performance_levels(score, level):
    assert score_to_performance_level(score) == level


@pytest.mark.parametrize("score,recommendation", [
    (80, "Strong Hire"), (79, "Hire"), (60, "Maybe"), (59, "No Hire"),
])
def test_recommendations(score, recommendation):
    assert score_to_recommendation(score) == recommendation
