"""
FastAPI dependency injection factories.

This module provides dependency factories for repositories, services,
and the session orchestrator used across routers.
"""
import asyncpg
from fastapi import Depends

from src.database import get_db_pool
from src.repositories import InterviewRepository, ResultRepository, ResumeRepository
from src.services import ResultsService, ResumeService
from src.workflows.orchestrator import InterviewOrchestrator, get_orchestrator


# =============================================================================
# Database Dependencies
# =============================================================================

async def get_pool() -> asyncpg.Pool:
    """Get the database connection pool."""
    return await get_db_pool()


# =============================================================================
# Repository Dependencies
# =============================================================================

async def get_interview_repo(
    pool: asyncpg.Pool = Depends(get_pool)
) -> InterviewRepository:
    """Get an InterviewRepository instance."""
    return InterviewRepository(pool)


async def get_result_repo(
    pool: asyncpg.Pool = Depends(get_pool)
) -> ResultRepository:
    """Get a ResultRepository instance."""
    return ResultRepository(pool)


async def get_resume_repo(
    pool: asyncpg.Pool = Depends(get_pool)
) -> ResumeRepository:
    """Get a ResumeRepository instance."""
    return ResumeRepository(pool)


# =============================================================================
# Service Dependencies
# =============================================================================

async def get_results_service(
    interview_repo: InterviewRepository = Depends(get_interview_repo),
    result_repo: ResultRepository = Depends(get_result_repo),
) -> ResultsService:
    """Get a ResultsService instance."""
    return ResultsService(interview_repo, result_repo)


async def get_resume_service(
    repo: ResumeRepository = Depends(get_resume_repo),
) -> ResumeService:
    """Get a ResumeService instance."""
    return ResumeService(repo)


async def get_session_orchestrator() -> InterviewOrchestrator:
    """Get the process-wide interview session orchestrator."""
    return await get_orchestrator()
