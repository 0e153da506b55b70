"""
Repository layer for database operations.
"""
from .interview_repo import InterviewRepository
from .result_repo import ResultRepository
from .resume_repo import ResumeRepository, SECTION_TABLES

__all__ = [
    "InterviewRepository",
    "ResultRepository",
    "ResumeRepository",
    "SECTION_TABLES",
]
