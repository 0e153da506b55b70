"""
Resume builder endpoints.
"""
import logging
from typing import Any
from fastapi import APIRouter, Body, Depends, status
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from src.dependencies import get_resume_service
from src.exceptions import NotFoundError, ValidationError, parse_uuid
from src.models import (
    AchievementEntry,
    EducationEntry,
    HobbyEntry,
    PersonalInfo,
    PositionEntry,
    ProjectEntry,
    ResumeItem,
    ResumeResponse,
    ResumeSection,
    ResumeSummaryResponse,
    SkillEntry,
    WorkExperienceEntry,
)
from src.services import ResumeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users/{user_id}/resume", tags=["Resume"])

SECTION_MODELS: dict[ResumeSection, type[BaseModel]] = {
    ResumeSection.EDUCATION: EducationEntry,
    ResumeSection.WORK_EXPERIENCE: WorkExperienceEntry,
    ResumeSection.SKILLS: SkillEntry,
    ResumeSection.PROJECTS: ProjectEntry,
    ResumeSection.POSITIONS: PositionEntry,
    ResumeSection.ACHIEVEMENTS: AchievementEntry,
    ResumeSection.HOBBIES: HobbyEntry,
}


def _validate_entry(section: ResumeSection, payload: dict[str, Any], partial: bool = False) -> dict[str, Any]:
    """Validate a section payload against its model. Partial updates only check the given fields."""
    model = SECTION_MODELS[section]
    if not partial:
        try:
            return model(**payload).model_dump()
        except PydanticValidationError as e:
            raise ValidationError(str(e))

    unknown = set(payload) - set(model.model_fields)
    if unknown:
        raise ValidationError(f"Unknown fields for {section.value}: {', '.join(sorted(unknown))}")
    if not payload:
        raise ValidationError("No fields to update")

    data = {}
    for name, value in payload.items():
        try:
            data[name] = TypeAdapter(model.model_fields[name].annotation).validate_python(value)
        except PydanticValidationError as e:
            raise ValidationError(str(e), field=name)
    return data


@router.get("", response_model=ResumeResponse)
async def get_resume(user_id: str, service: ResumeService = Depends(get_resume_service)):
    """The complete resume: personal info, every section and the summary."""
    parse_uuid(user_id, field="user_id")
    return await service.get_resume(user_id)


# =============================================================================
# Personal Info
# =============================================================================

@router.get("/personal-info", response_model=PersonalInfo)
async def get_personal_info(user_id: str, service: ResumeService = Depends(get_resume_service)):
    parse_uuid(user_id, field="user_id")
    info = await service.get_personal_info(user_id)
    if info is None:
        raise NotFoundError("Personal info", user_id)
    return info


@router.put("/personal-info", response_model=PersonalInfo)
async def save_personal_info(
    user_id: str,
    info: PersonalInfo,
    service: ResumeService = Depends(get_resume_service),
):
    parse_uuid(user_id, field="user_id")
    return await service.save_personal_info(user_id, info)


# =============================================================================
# Summary
# =============================================================================

@router.get("/summary", response_model=ResumeSummaryResponse)
async def get_summary(user_id: str, service: ResumeService = Depends(get_resume_service)):
    parse_uuid(user_id, field="user_id")
    return await service.get_summary(user_id)


@router.post("/summary", response_model=ResumeSummaryResponse)
async def generate_summary(user_id: str, service: ResumeService = Depends(get_resume_service)):
    """Generate (or regenerate) the professional summary used to personalize questions."""
    parse_uuid(user_id, field="user_id")
    return await service.generate_summary(user_id)


# =============================================================================
# List Sections
# =============================================================================

@router.get("/{section}", response_model=list[ResumeItem])
async def list_items(
    user_id: str,
    section: ResumeSection,
    service: ResumeService = Depends(get_resume_service),
):
    parse_uuid(user_id, field="user_id")
    return await service.list_items(user_id, section)


@router.post("/{section}", response_model=ResumeItem, status_code=status.HTTP_201_CREATED)
async def add_item(
    user_id: str,
    section: ResumeSection,
    payload: dict[str, Any] = Body(...),
    service: ResumeService = Depends(get_resume_service),
):
    parse_uuid(user_id, field="user_id")
    return await service.add_item(user_id, section, _validate_entry(section, payload))


@router.put("/{section}/{item_id}", response_model=ResumeItem)
async def update_item(
    user_id: str,
    section: ResumeSection,
    item_id: str,
    payload: dict[str, Any] = Body(...),
    service: ResumeService = Depends(get_resume_service),
):
    parse_uuid(user_id, field="user_id")
    item_uuid = parse_uuid(item_id, field="item_id")
    data = _validate_entry(section, payload, partial=True)
    return await service.update_item(user_id, section, item_uuid, data)


@router.delete("/{section}/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    user_id: str,
    section: ResumeSection,
    item_id: str,
    service: ResumeService = Depends(get_resume_service),
):
    parse_uuid(user_id, field="user_id")
    item_uuid = parse_uuid(item_id, field="item_id")
    await service.delete_item(user_id, section, item_uuid)
