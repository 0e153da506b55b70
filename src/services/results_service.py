"""
Results aggregation.

aggregate() is a pure function over the evaluated answers of one interview.
Ungraded answers (score None) are left out of every average. Recomputing over
the same answers always yields the same result.
"""
import logging
import math
from datetime import datetime
from typing import Optional

from response_evaluator import DIMENSIONS, score_to_performance_level, score_to_recommendation
from src.exceptions import NotFoundError
from src.models.enums import PerformanceLevel, Recommendation
from src.models.results import EvaluatedAnswer, InterviewResult, InterviewResultsResponse
from src.repositories.interview_repo import InterviewRepository
from src.repositories.result_repo import ResultRepository

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _unique(items: list[str]) -> list[str]:
    seen = []
    for item in items:
        if item and item not in seen:
            seen.append(item)
    return seen


def latest_recommendation(answers: list[EvaluatedAnswer]) -> Optional[str]:
    """Recommendation of the highest-numbered answer that carries one."""
    for answer in sorted(answers, key=lambda a: a.question_number, reverse=True):
        if answer.recommendation and answer.recommendation != "Pending":
            return answer.recommendation
    return None


def dimension_averages(answers: list[EvaluatedAnswer]) -> dict[str, float]:
    with_dimensions = [a.dimension_scores for a in answers if a.dimension_scores]
    if not with_dimensions:
        return {}
    return {
        name: round_half_up(sum(scores.get(name, 0) for scores in with_dimensions) / len(with_dimensions))
        for name in DIMENSIONS
    }


def build_summary(job_role: str, domain: str, average: float, answers: list[EvaluatedAnswer]) -> str:
    """Personalized summary paragraph for the results page."""
    strengths = _unique([s for a in answers for s in a.strengths])[:3]
    improvements = _unique([i for a in answers for i in a.improvements])[:2]

    if average >= 80:
        tone = "excellent"
    elif average >= 70:
        tone = "strong"
    elif average >= 60:
        tone = "solid"
    else:
        tone = "developing"

    summary = f"Your {job_role} interview for the {domain} domain showed {tone} performance overall."
    if strengths:
        summary += f" You demonstrated particular strength in {' and '.join(strengths[:2])}."
    if improvements:
        summary += f" Focus on enhancing {improvements[0]} to further strengthen your candidacy."

    if average >= 75:
        readiness = "strong readiness"
    elif average >= 60:
        readiness = "good potential"
    else:
        readiness = "developing skills"
    summary += f" Your responses show {readiness} for {job_role} roles in {domain}."
    return summary


def build_overall_feedback(answers: list[EvaluatedAnswer]) -> str:
    strengths = [s for a in answers for s in a.strengths]
    improvements = [i for a in answers for i in a.improvements]
    shown = f"strong {strengths[0]}" if strengths else "good communication skills"
    develop = improvements[0] if improvements else "providing more specific examples"
    return (
        f"Based on your {len(answers)} responses, you demonstrated {shown}. "
        f"Key areas for development include {develop}."
    )


def aggregate(
    interview_id: str,
    answers: list[EvaluatedAnswer],
    job_role: str = "",
    domain: str = "",
    duration_seconds: Optional[int] = None,
) -> InterviewResult:
    """
    Compute the aggregate result of an interview.

    The mean is taken over graded answers only. Without any graded answer the
    result is score 0, "Pending", "Under Review".
    """
    graded = [a for a in answers if a.is_graded]

    if not graded:
        return InterviewResult(
            interview_id=str(interview_id),
            overall_score=0,
            performance_level=PerformanceLevel.PENDING.value,
            recommendation=Recommendation.UNDER_REVIEW.value,
            total_questions=len(answers),
            questions_answered=0,
            average_score=None,
            duration_seconds=duration_seconds,
            summary="Your interview responses are still being processed. Please check back shortly.",
        )

    average = sum(a.score for a in graded) / len(graded)

    return InterviewResult(
        interview_id=str(interview_id),
        overall_score=round_half_up(average),
        performance_level=score_to_performance_level(average),
        recommendation=latest_recommendation(graded) or score_to_recommendation(average),
        total_questions=len(answers),
        questions_answered=len(graded),
        average_score=round(average, 2),
        duration_seconds=duration_seconds,
        dimension_averages=dimension_averages(graded),
        summary=build_summary(job_role, domain, average, answers),
        overall_feedback=build_overall_feedback(answers),
    )


def duration_between(created_at: Optional[datetime], completed_at: Optional[datetime]) -> Optional[int]:
    if not created_at or not completed_at:
        return None
    return max(0, int((completed_at - created_at).total_seconds()))


class ResultsService:
    """Load an interview's answers and compute or store its aggregate result."""

    def __init__(self, interview_repo: InterviewRepository, result_repo: ResultRepository):
        self.interview_repo = interview_repo
        self.result_repo = result_repo

    async def _load(self, interview_id: str):
        interview = await self.interview_repo.get_interview(interview_id)
        if not interview:
            raise NotFoundError("Interview", str(interview_id))
        answers = await self.interview_repo.get_answers(interview_id)
        result = aggregate(
            interview_id,
            answers,
            job_role=interview["job_role"],
            domain=interview["domain"],
            duration_seconds=duration_between(interview["created_at"], interview["completed_at"]),
        )
        return interview, answers, result

    async def get_results(self, interview_id: str) -> InterviewResultsResponse:
        interview, answers, result = await self._load(interview_id)
        return InterviewResultsResponse(
            interview_id=str(interview["id"]),
            job_role=interview["job_role"],
            domain=interview["domain"],
            experience=interview["experience"],
            question_type=interview["question_type"],
            status=interview["status"],
            created_at=interview["created_at"],
            completed_at=interview["completed_at"],
            result=result,
            answers=answers,
        )

    async def compute_and_store(self, interview_id: str) -> InterviewResult:
        interview, _, result = await self._load(interview_id)
        await self.result_repo.upsert(interview["user_id"], result)
        logger.info(
            f"[RESULTS] Interview {interview_id}: {result.overall_score} "
            f"({result.performance_level}, {result.recommendation}), "
            f"{result.questions_answered}/{result.total_questions} graded"
        )
        return result
