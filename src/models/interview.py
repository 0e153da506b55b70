"""
Interview configuration and live-session models.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from .enums import SessionPhase, InterviewStatus


# =============================================================================
# Interview Configuration
# =============================================================================

class InterviewConfig(BaseModel):
    """Profile the questions are generated for. Fixed for the whole session."""
    job_role: str = Field(..., description="Target role, e.g. 'Backend Engineer'")
    domain: str = Field(..., description="Technical domain, e.g. 'Distributed systems'")
    experience_level: str = Field(..., description="entry, mid, senior, ...")
    question_type: str = Field(..., description="technical, behavioral, mixed, ...")
    additional_constraints: str = ""

    model_config = {"frozen": True}

    @field_validator("job_role", "domain", "experience_level", "question_type")
    @classmethod
    def _required_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


# =============================================================================
# Request Models
# =============================================================================

class StartSessionRequest(BaseModel):
    """Request to create an interview and start its live session."""
    user_id: str
    config: InterviewConfig


class RecordingStartRequest(BaseModel):
    """The browser reports whether microphone capture is available."""
    microphone_granted: bool = True


class TextResponseRequest(BaseModel):
    text: str = ""


class CodeResponseRequest(BaseModel):
    code: str = ""
    language: str = ""


# =============================================================================
# Response Models
# =============================================================================

class QuestionView(BaseModel):
    id: str
    number: int
    text: str


class PendingResponseView(BaseModel):
    """What the user has captured so far for the current question."""
    has_audio: bool = False
    text_content: str = ""
    code_content: str = ""
    code_language: str = ""


class NarrationView(BaseModel):
    """Synthesized question audio for the browser to play."""
    audio_content: str = Field(..., description="Base64 encoded audio")
    content_type: str = "audio/mpeg"


class EvaluationView(BaseModel):
    """Evaluation shown to the user after a submission."""
    question_number: int
    score: int
    performance_level: str
    feedback: str
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    recommendation: str
    graded: bool = Field(True, description="False when the fallback evaluation is shown")


class SessionResponse(BaseModel):
    """Snapshot of a live interview session."""
    session_id: str
    interview_id: str
    phase: SessionPhase
    question_index: int
    total_questions: int
    current_question: Optional[QuestionView] = None
    is_speaking: bool = False
    is_recording: bool = False
    can_submit: bool = False
    pending: PendingResponseView = Field(default_factory=PendingResponseView)
    error: Optional[str] = None
    narration: Optional[NarrationView] = None
    evaluation: Optional[EvaluationView] = None
    resume_personalized: bool = False


class InterviewSummary(BaseModel):
    """One row of a user's interview history."""
    id: str
    job_role: str
    domain: str
    experience: str
    question_type: str
    status: InterviewStatus
    created_at: datetime
    completed_at: Optional[datetime] = None
    overall_score: Optional[int] = None
