"""
Interview Generator Agent for producing mock-interview questions.
"""
from .agent import (
    generate_questions,
    parse_questions,
    GeneratedQuestion,
    GeneratedQuestions,
)

__all__ = [
    "generate_questions",
    "parse_questions",
    "GeneratedQuestion",
    "GeneratedQuestions",
]
