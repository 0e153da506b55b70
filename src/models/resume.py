"""
Resume builder models.
"""
from datetime import date, datetime
from typing import Any, Optional
from pydantic import BaseModel, Field


# =============================================================================
# Request Models
# =============================================================================

class PersonalInfo(BaseModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    portfolio_url: Optional[str] = None


class EducationEntry(BaseModel):
    institution: str
    degree: Optional[str] = None
    field_of_study: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    grade: Optional[str] = None
    description: Optional[str] = None


class WorkExperienceEntry(BaseModel):
    company_name: str
    position: str
    location: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_current: bool = False
    description: Optional[str] = None


class SkillEntry(BaseModel):
    skill_name: str
    proficiency: Optional[str] = None


class ProjectEntry(BaseModel):
    title: str
    description: Optional[str] = None
    technologies: Optional[str] = None
    project_url: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class PositionEntry(BaseModel):
    title: str
    organization: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    description: Optional[str] = None


class AchievementEntry(BaseModel):
    title: str
    description: Optional[str] = None
    date_achieved: Optional[date] = None


class HobbyEntry(BaseModel):
    activity_name: str
    description: Optional[str] = None


# =============================================================================
# Response Models
# =============================================================================

class ResumeItem(BaseModel):
    """A stored row of any list section."""
    id: str
    data: dict[str, Any] = Field(default_factory=dict)


class ResumeResponse(BaseModel):
    """The complete resume of a user."""
    user_id: str
    personal_info: Optional[PersonalInfo] = None
    sections: dict[str, list[ResumeItem]] = Field(default_factory=dict)
    summary: Optional[str] = None


class ResumeSummaryResponse(BaseModel):
    user_id: str
    summary_text: str
    updated_at: Optional[datetime] = None
