"""
Interview repository - interviews and their question rows.

Questions are inserted once per session (append-only). Response channels and
evaluations are written onto the question row keyed by
(interview_id, question_number); later writes overwrite earlier ones.
"""
import asyncpg
import json
import uuid
from datetime import datetime, timezone
from typing import Optional, Union

from src.models.interview import InterviewConfig
from src.models.results import EvaluatedAnswer

Id = Union[uuid.UUID, str]


class InterviewRepository:
    """Repository for interview and interview question database operations."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    # =========================================================================
    # Interviews
    # =========================================================================

    async def create_interview(self, user_id: Id, config: InterviewConfig) -> asyncpg.Record:
        """Create an in-progress interview and return its row."""
        return await self.pool.fetchrow(
            """
            INSERT INTO interviews (
                user_id, job_role, domain, experience, question_type,
                additional_constraints, status
            )
            VALUES ($1, $2, $3, $4, $5, $6, 'in_progress')
            RETURNING *
            """,
            user_id,
            config.job_role,
            config.domain,
            config.experience_level,
            config.question_type,
            config.additional_constraints or None,
        )

    async def get_interview(self, interview_id: Id) -> Optional[asyncpg.Record]:
        return await self.pool.fetchrow(
            "SELECT * FROM interviews WHERE id = $1",
            interview_id,
        )

    async def list_for_user(self, user_id: Id, limit: int = 50) -> list[asyncpg.Record]:
        """Interview history, newest first, with the stored overall score if any."""
        return await self.pool.fetch(
            """
            SELECT i.*, r.overall_score
            FROM interviews i
            LEFT JOIN interview_results r ON r.interview_id = i.id
            WHERE i.user_id = $1
            ORDER BY i.created_at DESC
            LIMIT $2
            """,
            user_id,
            limit,
        )

    async def mark_completed(self, interview_id: Id, completed_at: Optional[datetime] = None) -> None:
        await self.pool.execute(
            """
            UPDATE interviews
            SET status = 'completed', completed_at = $2
            WHERE id = $1
            """,
            interview_id,
            completed_at or datetime.now(timezone.utc),
        )

    # =========================================================================
    # Questions
    # =========================================================================

    async def add_questions(self, interview_id: Id, texts: list[str]) -> list[asyncpg.Record]:
        """Insert the generated questions numbered from 1, in one transaction."""
        rows = []
        async with self.pool.acquire() as conn:
            async with conn.transaction():
                for number, text in enumerate(texts, start=1):
                    row = await conn.fetchrow(
                        """
                        INSERT INTO interview_questions (interview_id, question_number, question_text)
                        VALUES ($1, $2, $3)
                        RETURNING id, question_number, question_text
                        """,
                        interview_id,
                        number,
                        text,
                    )
                    rows.append(row)
        return rows

    async def save_response(
        self,
        interview_id: Id,
        question_number: int,
        transcribed_text: str = "",
        text_content: str = "",
        code_content: str = "",
        code_language: str = "",
    ) -> None:
        """Store the raw response channels of a question."""
        await self.pool.execute(
            """
            UPDATE interview_questions
            SET user_response = $3,
                user_text_response = $4,
                user_code_response = $5,
                response_language = $6
            WHERE interview_id = $1 AND question_number = $2
            """,
            interview_id,
            question_number,
            transcribed_text or None,
            text_content or None,
            code_content or None,
            code_language or None,
        )

    async def save_evaluation(
        self,
        interview_id: Id,
        question_number: int,
        score: int,
        feedback: str,
        strengths: list[str],
        improvements: list[str],
        performance_level: str,
        recommendation: str,
        dimension_scores: Optional[dict[str, float]] = None,
    ) -> None:
        """Store (or overwrite) the evaluation of a question."""
        await self.pool.execute(
            """
            UPDATE interview_questions
            SET evaluation_score = $3,
                evaluation_feedback = $4,
                strengths = $5::jsonb,
                improvements = $6::jsonb,
                performance_level = $7,
                recommendation = $8,
                dimension_scores = $9::jsonb
            WHERE interview_id = $1 AND question_number = $2
            """,
            interview_id,
            question_number,
            score,
            feedback,
            json.dumps(strengths),
            json.dumps(improvements),
            performance_level,
            recommendation,
            json.dumps(dimension_scores) if dimension_scores else None,
        )

    async def get_answers(self, interview_id: Id) -> list[EvaluatedAnswer]:
        """All questions of an interview with their responses and grades."""
        rows = await self.pool.fetch(
            """
            SELECT question_number, question_text, user_response, user_text_response,
                   user_code_response, response_language, evaluation_score,
                   evaluation_feedback, strengths, improvements, performance_level,
                   recommendation, dimension_scores
            FROM interview_questions
            WHERE interview_id = $1
            ORDER BY question_number
            """,
            interview_id,
        )
        return [_row_to_answer(row) for row in rows]


def _load_json(value, default):
    if value is None:
        return default
    if isinstance(value, str):
        return json.loads(value)
    return value


def _row_to_answer(row: asyncpg.Record) -> EvaluatedAnswer:
    return EvaluatedAnswer(
        question_number=row["question_number"],
        question_text=row["question_text"],
        transcribed_text=row["user_response"],
        text_content=row["user_text_response"],
        code_content=row["user_code_response"],
        code_language=row["response_language"],
        score=row["evaluation_score"],
        feedback=row["evaluation_feedback"],
        strengths=_load_json(row["strengths"], []),
        improvements=_load_json(row["improvements"], []),
        performance_level=row["performance_level"],
        recommendation=row["recommendation"],
        dimension_scores=_load_json(row["dimension_scores"], None),
    )
