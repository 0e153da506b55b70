"""
Resume service - assembles the resume builder sections and the generated summary.
"""
import logging
from typing import Any, Awaitable, Callable, Optional

from resume_summarizer import generate_resume_summary
from src.exceptions import NotFoundError, ResumeSummaryError, ValidationError
from src.models.enums import ResumeSection
from src.models.resume import PersonalInfo, ResumeItem, ResumeResponse, ResumeSummaryResponse
from src.repositories.resume_repo import ResumeRepository, SECTION_TABLES, PERSONAL_INFO_COLUMNS

logger = logging.getLogger(__name__)

Summarizer = Callable[[dict], Awaitable[str]]


def _record_to_item(record, columns: tuple[str, ...]) -> ResumeItem:
    return ResumeItem(id=str(record["id"]), data={column: record[column] for column in columns})


class ResumeService:
    """Resume builder operations on top of ResumeRepository."""

    def __init__(self, repo: ResumeRepository, summarizer: Optional[Summarizer] = None):
        self.repo = repo
        self._summarize = summarizer or generate_resume_summary

    # =========================================================================
    # Sections
    # =========================================================================

    async def get_personal_info(self, user_id: str) -> Optional[PersonalInfo]:
        record = await self.repo.get_personal_info(user_id)
        if not record:
            return None
        return PersonalInfo(**{column: record[column] for column in PERSONAL_INFO_COLUMNS})

    async def save_personal_info(self, user_id: str, info: PersonalInfo) -> PersonalInfo:
        record = await self.repo.upsert_personal_info(user_id, info.model_dump())
        return PersonalInfo(**{column: record[column] for column in PERSONAL_INFO_COLUMNS})

    async def list_items(self, user_id: str, section: ResumeSection) -> list[ResumeItem]:
        _, columns, _ = SECTION_TABLES[section]
        records = await self.repo.list_items(user_id, section)
        return [_record_to_item(record, columns) for record in records]

    async def add_item(self, user_id: str, section: ResumeSection, data: dict[str, Any]) -> ResumeItem:
        _, columns, _ = SECTION_TABLES[section]
        record = await self.repo.add_item(user_id, section, data)
        return _record_to_item(record, columns)

    async def update_item(
        self,
        user_id: str,
        section: ResumeSection,
        item_id: str,
        data: dict[str, Any],
    ) -> ResumeItem:
        _, columns, _ = SECTION_TABLES[section]
        record = await self.repo.update_item(user_id, section, item_id, data)
        if not record:
            raise NotFoundError(f"Resume {section.value} item", item_id)
        return _record_to_item(record, columns)

    async def delete_item(self, user_id: str, section: ResumeSection, item_id: str) -> None:
        if not await self.repo.delete_item(user_id, section, item_id):
            raise NotFoundError(f"Resume {section.value} item", item_id)

    async def get_resume(self, user_id: str) -> ResumeResponse:
        sections = {section.value: await self.list_items(user_id, section) for section in ResumeSection}
        summary = await self.repo.get_summary(user_id)
        return ResumeResponse(
            user_id=user_id,
            personal_info=await self.get_personal_info(user_id),
            sections=sections,
            summary=summary["summary_text"] if summary else None,
        )

    # =========================================================================
    # Summary
    # =========================================================================

    async def get_summary(self, user_id: str) -> ResumeSummaryResponse:
        record = await self.repo.get_summary(user_id)
        if not record:
            raise NotFoundError("Resume summary", user_id)
        return ResumeSummaryResponse(
            user_id=str(record["user_id"]),
            summary_text=record["summary_text"],
            updated_at=record["updated_at"],
        )

    async def generate_summary(self, user_id: str) -> ResumeSummaryResponse:
        """
        Summarize the user's resume with the LLM and store the summary.

        Raises:
            ValidationError: If the resume is empty
            ResumeSummaryError: If the LLM call fails
        """
        resume = await self.get_resume(user_id)
        resume_data: dict[str, Any] = {
            name: [item.data for item in items]
            for name, items in resume.sections.items()
        }
        if resume.personal_info:
            resume_data["personal_info"] = resume.personal_info.model_dump(exclude_none=True)

        if not any(resume_data.values()):
            raise ValidationError("Resume is empty, add some sections first", field="user_id")

        try:
            summary_text = await self._summarize(resume_data)
        except Exception as e:
            logger.error(f"[RESUME SUMMARY] Generation failed for {user_id}: {e}")
            raise ResumeSummaryError(f"Failed to generate summary: {e}") from e

        record = await self.repo.upsert_summary(user_id, summary_text.strip())
        return ResumeSummaryResponse(
            user_id=str(record["user_id"]),
            summary_text=record["summary_text"],
            updated_at=record["updated_at"],
        )
