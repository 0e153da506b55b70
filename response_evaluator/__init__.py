"""
Response Evaluator Agent for grading interview answers.

This module provides functionality to:
1. Grade a combined (speech, text, code) answer against its question with Gemini
2. Normalize the model output into a bounded EvaluationResult
3. Map scores to performance levels and hiring recommendations
"""

from .agent import (
    evaluate_response,
    parse_evaluation,
    EvaluationResult,
    FALLBACK_EVALUATION,
    DIMENSIONS,
    score_to_performance_level,
    score_to_recommendation,
)

__all__ = [
    "evaluate_response",
    "parse_evaluation",
    "EvaluationResult",
    "FALLBACK_EVALUATION",
    "DIMENSIONS",
    "score_to_performance_level",
    "score_to_recommendation",
]
