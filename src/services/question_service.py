"""
Question service - generates the questions of a new interview.
"""
import logging
from typing import Awaitable, Callable, Optional

from interview_generator import GeneratedQuestions, generate_questions
from src.config import QUESTIONS_PER_INTERVIEW
from src.exceptions import QuestionGenerationError
from src.models.interview import InterviewConfig
from src.repositories.resume_repo import ResumeRepository
from src.utils.result import ServiceResult

logger = logging.getLogger(__name__)

Generator = Callable[..., Awaitable[GeneratedQuestions]]


class QuestionService:
    """Generate interview questions, personalized with the user's resume summary when present."""

    def __init__(
        self,
        resume_repo: Optional[ResumeRepository] = None,
        generator: Optional[Generator] = None,
        num_questions: int = QUESTIONS_PER_INTERVIEW,
    ):
        self.resume_repo = resume_repo
        self._generate = generator or generate_questions
        self.num_questions = num_questions

    async def _resume_summary(self, user_id: str) -> Optional[str]:
        if self.resume_repo is None:
            return None
        try:
            row = await self.resume_repo.get_summary(user_id)
        except Exception as e:
            logger.warning(f"[QUESTION GEN] Could not load resume summary for {user_id}: {e}")
            return None
        return row["summary_text"] if row else None

    async def generate(self, user_id: str, config: InterviewConfig) -> ServiceResult[GeneratedQuestions]:
        resume_summary = await self._resume_summary(user_id)
        try:
            generated = await self._generate(
                job_role=config.job_role,
                domain=config.domain,
                experience_level=config.experience_level,
                question_type=config.question_type,
                num_questions=self.num_questions,
                additional_constraints=config.additional_constraints,
                resume_summary=resume_summary,
            )
        except Exception as e:
            logger.error(f"[QUESTION GEN] Generation failed: {e}")
            return ServiceResult.failure(QuestionGenerationError(f"Failed to generate questions: {e}"))

        if not generated.questions:
            return ServiceResult.failure(QuestionGenerationError("No questions generated"))

        generated.questions = generated.questions[:self.num_questions]
        return ServiceResult.success(generated)
