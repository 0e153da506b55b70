"""
Evaluation service - grades combined answers and never raises into the session.
"""
import logging
from typing import Awaitable, Callable, Optional

from response_evaluator import EvaluationResult, FALLBACK_EVALUATION, evaluate_response
from src.exceptions import EvaluationError
from src.models.interview import InterviewConfig
from src.utils.result import ServiceResult

logger = logging.getLogger(__name__)

Evaluator = Callable[..., Awaitable[EvaluationResult]]


class EvaluationService:
    """Wrap the response evaluator agent in an explicit ServiceResult."""

    def __init__(self, evaluator: Optional[Evaluator] = None):
        self._evaluate = evaluator or evaluate_response

    async def evaluate(
        self,
        question: str,
        answer: str,
        config: InterviewConfig,
    ) -> ServiceResult[EvaluationResult]:
        """
        Grade an answer for the interview profile in config.

        Returns:
            ServiceResult with the evaluation, or an EvaluationError and the
            generic fallback evaluation (score 60, "Satisfactory", "Maybe")
        """
        try:
            result = await self._evaluate(
                question=question,
                answer=answer,
                job_role=config.job_role,
                domain=config.domain,
                experience_level=config.experience_level or "entry",
            )
        except Exception as e:
            logger.error(f"[EVALUATION] Evaluation failed: {e}")
            return ServiceResult.failure(EvaluationError(f"Evaluation failed: {e}"), fallback=FALLBACK_EVALUATION)

        return ServiceResult.success(result)
