"""
Evaluated answers and aggregate interview results.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class EvaluatedAnswer(BaseModel):
    """A stored question with its response channels and (optional) grade.

    score is None while the question is ungraded: skipped, or the
    evaluation call failed.
    """
    question_number: int
    question_text: str
    transcribed_text: Optional[str] = None
    text_content: Optional[str] = None
    code_content: Optional[str] = None
    code_language: Optional[str] = None
    score: Optional[int] = Field(None, ge=0, le=100)
    feedback: Optional[str] = None
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    performance_level: Optional[str] = None
    recommendation: Optional[str] = None
    dimension_scores: Optional[dict[str, float]] = None

    @property
    def is_graded(self) -> bool:
        return self.score is not None


class InterviewResult(BaseModel):
    """Aggregate outcome of one interview, upserted per interview id."""
    interview_id: str
    overall_score: int
    performance_level: str
    recommendation: str
    total_questions: int
    questions_answered: int
    average_score: Optional[float] = None
    duration_seconds: Optional[int] = None
    dimension_averages: dict[str, float] = Field(default_factory=dict)
    summary: str = ""
    overall_feedback: str = ""


class InterviewResultsResponse(BaseModel):
    """Results page payload: interview profile, aggregate and per-question breakdown."""
    interview_id: str
    job_role: str
    domain: str
    experience: str
    question_type: str
    status: str
    created_at: datetime
    completed_at: Optional[datetime] = None
    result: InterviewResult
    answers: list[EvaluatedAnswer]
