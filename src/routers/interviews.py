"""
Interview history and results endpoints.
"""
import logging
from fastapi import APIRouter, Depends, Query

from src.dependencies import get_interview_repo, get_results_service
from src.exceptions import parse_uuid
from src.models import InterviewResult, InterviewResultsResponse, InterviewSummary
from src.repositories import InterviewRepository
from src.services import ResultsService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/interviews", tags=["Interviews"])


@router.get("", response_model=list[InterviewSummary])
async def list_interviews(
    user_id: str = Query(..., description="Owner of the interviews"),
    limit: int = Query(50, ge=1, le=200),
    repo: InterviewRepository = Depends(get_interview_repo),
):
    """Interview history of a user, newest first."""
    user_uuid = parse_uuid(user_id, field="user_id")
    rows = await repo.list_for_user(user_uuid, limit)
    return [
        InterviewSummary(
            id=str(row["id"]),
            job_role=row["job_role"],
            domain=row["domain"],
            experience=row["experience"],
            question_type=row["question_type"],
            status=row["status"],
            created_at=row["created_at"],
            completed_at=row["completed_at"],
            overall_score=row["overall_score"],
        )
        for row in rows
    ]


@router.get("/{interview_id}/results", response_model=InterviewResultsResponse)
async def get_results(
    interview_id: str,
    service: ResultsService = Depends(get_results_service),
):
    """Aggregate result and per-question breakdown, computed from the stored answers."""
    interview_uuid = parse_uuid(interview_id, field="interview_id")
    return await service.get_results(interview_uuid)


@router.post("/{interview_id}/results/calculate", response_model=InterviewResult)
async def calculate_results(
    interview_id: str,
    service: ResultsService = Depends(get_results_service),
):
    """Recompute and store the aggregate result. Safe to call repeatedly."""
    interview_uuid = parse_uuid(interview_id, field="interview_id")
    return await service.compute_and_store(interview_uuid)
