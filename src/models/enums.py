"""
Enums for the interview backend API.
"""
from enum import Enum


class SessionPhase(str, Enum):
    """Lifecycle phase of a live interview session."""
    INITIALIZING = "initializing"
    SPEAKING = "speaking"
    AWAITING_RESPONSE = "awaiting_response"
    PROCESSING = "processing"
    FINISHING = "finishing"
    FINISHED = "finished"
    FAILED = "failed"


class InterviewStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class PerformanceLevel(str, Enum):
    """Score band of a single answer or of a whole interview."""
    EXCELLENT = "Excellent"
    STRONG = "Strong"
    GOOD = "Good"
    SATISFACTORY = "Satisfactory"
    NEEDS_IMPROVEMENT = "Needs Improvement"
    WEAK = "Weak"
    PENDING = "Pending"


class Recommendation(str, Enum):
    STRONG_HIRE = "Strong Hire"
    HIRE = "Hire"
    MAYBE = "Maybe"
    NO_HIRE = "No Hire"
    UNDER_REVIEW = "Under Review"


class ResumeSection(str, Enum):
    """List-style resume sections (personal info is handled separately)."""
    EDUCATION = "education"
    WORK_EXPERIENCE = "work-experience"
    SKILLS = "skills"
    PROJECTS = "projects"
    POSITIONS = "positions-of-responsibility"
    ACHIEVEMENTS = "achievements"
    HOBBIES = "hobbies"
