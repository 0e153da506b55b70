"""
Interview result repository - one aggregate row per interview.
"""
import asyncpg
import uuid
from typing import Union

from src.models.results import InterviewResult


class ResultRepository:
    """Repository for aggregate interview results."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def upsert(self, user_id: Union[uuid.UUID, str], result: InterviewResult) -> None:
        """Insert or replace the aggregate for result.interview_id."""
        await self.pool.execute(
            """
            INSERT INTO interview_results (
                interview_id, user_id, overall_score, performance_level,
                overall_recommendation, total_questions, questions_answered,
                average_score, duration_seconds
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
            ON CONFLICT (interview_id) DO UPDATE SET
                overall_score = EXCLUDED.overall_score,
                performance_level = EXCLUDED.performance_level,
                overall_recommendation = EXCLUDED.overall_recommendation,
                total_questions = EXCLUDED.total_questions,
                questions_answered = EXCLUDED.questions_answered,
                average_score = EXCLUDED.average_score,
                duration_seconds = EXCLUDED.duration_seconds,
                updated_at = now()
            """,
            result.interview_id,
            user_id,
            result.overall_score,
            result.performance_level,
            result.recommendation,
            result.total_questions,
            result.questions_answered,
            result.average_score,
            result.duration_seconds,
        )
