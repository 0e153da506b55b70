"""
Interview backend API models.

This module re-exports all model classes for convenient importing.
"""

# Enums
from .enums import (
    SessionPhase,
    InterviewStatus,
    PerformanceLevel,
    Recommendation,
    ResumeSection,
)

# Interview and session models
from .interview import (
    InterviewConfig,
    StartSessionRequest,
    RecordingStartRequest,
    TextResponseRequest,
    CodeResponseRequest,
    QuestionView,
    PendingResponseView,
    NarrationView,
    EvaluationView,
    SessionResponse,
    InterviewSummary,
)

# Results models
from .results import (
    EvaluatedAnswer,
    InterviewResult,
    InterviewResultsResponse,
)

# Resume models
from .resume import (
    PersonalInfo,
    EducationEntry,
    WorkExperienceEntry,
    SkillEntry,
    ProjectEntry,
    PositionEntry,
    AchievementEntry,
    HobbyEntry,
    ResumeItem,
    ResumeResponse,
    ResumeSummaryResponse,
)

__all__ = [
    # Enums
    "SessionPhase",
    "InterviewStatus",
    "PerformanceLevel",
    "Recommendation",
    "ResumeSection",
    # Interview
    "InterviewConfig",
    "StartSessionRequest",
    "RecordingStartRequest",
    "TextResponseRequest",
    "CodeResponseRequest",
    "QuestionView",
    "PendingResponseView",
    "NarrationView",
    "EvaluationView",
    "SessionResponse",
    "InterviewSummary",
    # Results
    "EvaluatedAnswer",
    "InterviewResult",
    "InterviewResultsResponse",
    # Resume
    "PersonalInfo",
    "EducationEntry",
    "WorkExperienceEntry",
    "SkillEntry",
    "ProjectEntry",
    "PositionEntry",
    "AchievementEntry",
    "HobbyEntry",
    "ResumeItem",
    "ResumeResponse",
    "ResumeSummaryResponse",
]
