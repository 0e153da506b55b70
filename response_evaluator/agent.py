"""
Response Evaluator Agent for grading mock-interview answers.

The answer arrives as one combined string with labeled sections
("Speech: ...", "Text: ...", "Code (python): ..."). Gemini grades it and
returns JSON, which is normalized into an EvaluationResult with the score
clamped to 0-100 and every missing field defaulted.
"""

from google import genai
from google.genai import types
from dataclasses import dataclass, field
from typing import Optional
import json
import logging
import os
import re
import time

logger = logging.getLogger(__name__)

EVALUATION_MODEL = os.environ.get("GEMINI_EVALUATION_MODEL", "gemini-2.5-flash")


# =============================================================================
# Data Classes for Results
# =============================================================================

@dataclass
class EvaluationResult:
    """Normalized evaluation of one answer."""
    score: int                              # 0-100
    performance_level: str                  # Excellent ... Weak
    strengths: list[str]
    improvements: list[str]
    feedback: str
    recommendation: str                     # Strong Hire, Hire, Maybe, No Hire
    dimension_scores: dict[str, float] = field(default_factory=dict)
    raw_response: Optional[str] = None


# Scoring dimensions the model may report alongside the overall score
DIMENSIONS = [
    "technical_accuracy",
    "problem_solving",
    "communication",
    "experience_examples",
    "leadership_collaboration",
    "adaptability_learning",
    "industry_awareness",
]

PERFORMANCE_LEVELS = ["Excellent", "Strong", "Good", "Satisfactory", "Needs Improvement", "Weak"]
RECOMMENDATIONS = ["Strong Hire", "Hire", "Maybe", "No Hire"]

# Shown to the user when the evaluation call fails. Never persisted as a grade.
FALLBACK_EVALUATION = EvaluationResult(
    score=60,
    performance_level="Satisfactory",
    strengths=["Attempted the question"],
    improvements=["Provide more detailed response"],
    feedback="Unable to complete full evaluation due to technical issue.",
    recommendation="Maybe",
)


def score_to_performance_level(score: float) -> str:
    """Convert a numeric score (0-100) to a performance level."""
    if score >= 90:
        return "Excellent"
    if score >= 80:
        return "Strong"
    if score >= 70:
        return "Good"
    if score >= 60:
        return "Satisfactory"
    if score >= 50:
        return "Needs Improvement"
    return "Weak"


def score_to_recommendation(score: float) -> str:
    """Convert a numeric score (0-100) to a hiring recommendation."""
    if score >= 80:
        return "Strong Hire"
    if score >= 70:
        return "Hire"
    if score >= 60:
        return "Maybe"
    return "No Hire"


# =============================================================================
# Prompt
# =============================================================================

INSTRUCTION = """You are an experienced technical interviewer grading a candidate's answer in a mock interview.

The answer may combine several channels, each in its own labeled section:
- "Speech:" a transcript of what the candidate said out loud (expect filler words and transcription noise)
- "Text:" what the candidate typed
- "Code:" or "Code (<language>):" code the candidate wrote

Grade the answer as a whole. Judge correctness, depth, structure and clarity, and calibrate to the
candidate's experience level: an entry-level answer is not expected to match a senior one.

Respond with ONLY a JSON object, no markdown, in exactly this shape:
{
  "overall_score": <integer 0-100>,
  "performance_level": "Excellent" | "Strong" | "Good" | "Satisfactory" | "Needs Improvement",
  "strengths": ["<specific strength>", ...],
  "improvements": ["<specific, actionable improvement>", ...],
  "detailed_feedback": "<2-4 sentences addressed to the candidate>",
  "recommendation": "Strong Hire" | "Hire" | "Maybe" | "No Hire",
  "dimension_scores": {
    "technical_accuracy": <0-100>,
    "problem_solving": <0-100>,
    "communication": <0-100>,
    "experience_examples": <0-100>,
    "leadership_collaboration": <0-100>,
    "adaptability_learning": <0-100>,
    "industry_awareness": <0-100>
  }
}

Give 2-4 strengths and 2-4 improvements. Be specific to this answer, never generic."""


def build_prompt(question: str, answer: str, job_role: str, domain: str, experience_level: str) -> str:
    return f"""## INTERVIEW CONTEXT
Role: {job_role}
Domain: {domain}
Experience level: {experience_level}

## QUESTION
{question}

## CANDIDATE ANSWER
{answer}

Grade this answer as JSON."""


# =============================================================================
# Parsing
# =============================================================================

def _extract_json(response_text: str) -> Optional[dict]:
    """Find the JSON object in the model output, handling markdown code blocks."""
    json_match = re.search(r'```(?:json)?\s*([\s\S]*?)\s*```', response_text)
    if json_match:
        json_str = json_match.group(1)
    else:
        json_match = re.search(r'\{[\s\S]*\}', response_text)
        if not json_match:
            return None
        json_str = json_match.group(0)

    try:
        parsed = json.loads(json_str)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse JSON: {e}\nJSON string: {json_str[:500]}")
        return None
    return parsed if isinstance(parsed, dict) else None


def _string_list(value, default: list[str]) -> list[str]:
    if not isinstance(value, list):
        return list(default)
    items = [str(item).strip() for item in value if str(item).strip()]
    return items or list(default)


def _clamp(value, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def parse_evaluation(response_text: str) -> EvaluationResult:
    """
    Parse and normalize the model output.

    Raises:
        ValueError: If no JSON object can be found in the response
    """
    data = _extract_json(response_text or "")
    if data is None:
        raise ValueError(f"No JSON object in evaluation response: {(response_text or '')[:200]}")

    try:
        score = int(round(float(data.get("overall_score", 70))))
    except (TypeError, ValueError):
        score = 70
    score = int(_clamp(score))

    performance_level = data.get("performance_level")
    if performance_level not in PERFORMANCE_LEVELS:
        performance_level = score_to_performance_level(score)

    recommendation = data.get("recommendation")
    if recommendation not in RECOMMENDATIONS:
        recommendation = score_to_recommendation(score)

    dimension_scores = {}
    raw_dimensions = data.get("dimension_scores")
    if isinstance(raw_dimensions, dict):
        for name in DIMENSIONS:
            value = raw_dimensions.get(name)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                dimension_scores[name] = float(_clamp(value))

    feedback = str(data.get("detailed_feedback") or "").strip() or "Response processed successfully"

    return EvaluationResult(
        score=score,
        performance_level=performance_level,
        strengths=_string_list(data.get("strengths"), ["Shows understanding"]),
        improvements=_string_list(data.get("improvements"), ["Add more details"]),
        feedback=feedback,
        recommendation=recommendation,
        dimension_scores=dimension_scores,
        raw_response=response_text,
    )


# =============================================================================
# Main Evaluation Function
# =============================================================================

async def evaluate_response(
    question: str,
    answer: str,
    job_role: str,
    domain: str,
    experience_level: str = "entry",
    model: Optional[str] = None,
) -> EvaluationResult:
    """
    Grade a candidate answer with Gemini.

    Args:
        question: The interview question
        answer: Combined answer with labeled Speech/Text/Code sections
        job_role: Target role of the interview
        domain: Technical domain of the interview
        experience_level: Candidate level used to calibrate the grade
        model: Gemini model name

    Returns:
        EvaluationResult with the score clamped to 0-100

    Raises:
        ValueError: If question or answer is empty, or the output has no JSON
        google.genai.errors.APIError: If the Gemini call fails
    """
    if not question.strip() or not answer.strip():
        raise ValueError("question and answer are required")

    logger.info(f"[EVALUATION] Starting: role: {job_role}, answer length: {len(answer)}")

    model = model or EVALUATION_MODEL
    t0 = time.perf_counter()
    client = genai.Client()
    response = await client.aio.models.generate_content(
        model=model,
        contents=build_prompt(question, answer, job_role, domain, experience_level),
        config=types.GenerateContentConfig(
            system_instruction=INSTRUCTION,
            temperature=0.3,
            max_output_tokens=1024,
            response_mime_type="application/json",
            thinking_config=types.ThinkingConfig(thinking_budget=0),
        ),
    )
    elapsed = (time.perf_counter() - t0) * 1000
    logger.info(f"⏱️ evaluate_response ({model}): {elapsed:.0f}ms")

    result = parse_evaluation(response.text or "")
    logger.info(f"[EVALUATION] Score {result.score} ({result.performance_level}, {result.recommendation})")
    return result
