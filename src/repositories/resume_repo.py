"""
Resume repository - structured CV sections and the generated summary.
"""
import asyncpg
import uuid
from typing import Any, Optional, Union

from src.models.enums import ResumeSection

Id = Union[uuid.UUID, str]

PERSONAL_INFO_COLUMNS = (
    "full_name", "email", "phone", "location",
    "linkedin_url", "github_url", "portfolio_url",
)

# Section -> (table, writable columns, ordering)
SECTION_TABLES: dict[ResumeSection, tuple[str, tuple[str, ...], str]] = {
    ResumeSection.EDUCATION: (
        "education",
        ("institution", "degree", "field_of_study", "start_date", "end_date", "grade", "description"),
        "start_date DESC NULLS LAST, created_at",
    ),
    ResumeSection.WORK_EXPERIENCE: (
        "work_experience",
        ("company_name", "position", "location", "start_date", "end_date", "is_current", "description"),
        "is_current DESC, start_date DESC NULLS LAST, created_at",
    ),
    ResumeSection.SKILLS: (
        "resume_skills",
        ("skill_name", "proficiency"),
        "created_at",
    ),
    ResumeSection.PROJECTS: (
        "projects",
        ("title", "description", "technologies", "project_url", "start_date", "end_date"),
        "start_date DESC NULLS LAST, created_at",
    ),
    ResumeSection.POSITIONS: (
        "positions_of_responsibility",
        ("title", "organization", "start_date", "end_date", "description"),
        "start_date DESC NULLS LAST, created_at",
    ),
    ResumeSection.ACHIEVEMENTS: (
        "achievements",
        ("title", "description", "date_achieved"),
        "date_achieved DESC NULLS LAST, created_at",
    ),
    ResumeSection.HOBBIES: (
        "hobbies_activities",
        ("activity_name", "description"),
        "created_at",
    ),
}


class ResumeRepository:
    """Repository for resume builder database operations."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    # =========================================================================
    # Personal info
    # =========================================================================

    async def get_personal_info(self, user_id: Id) -> Optional[asyncpg.Record]:
        return await self.pool.fetchrow(
            "SELECT * FROM personal_info WHERE user_id = $1",
            user_id,
        )

    async def upsert_personal_info(self, user_id: Id, data: dict[str, Any]) -> asyncpg.Record:
        values = [data.get(column) for column in PERSONAL_INFO_COLUMNS]
        placeholders = ", ".join(f"${i}" for i in range(2, len(PERSONAL_INFO_COLUMNS) + 2))
        updates = ", ".join(f"{column} = EXCLUDED.{column}" for column in PERSONAL_INFO_COLUMNS)
        query = f"""
            INSERT INTO personal_info (user_id, {', '.join(PERSONAL_INFO_COLUMNS)})
            VALUES ($1, {placeholders})
            ON CONFLICT (user_id) DO UPDATE SET {updates}, updated_at = now()
            RETURNING *
        """
        return await self.pool.fetchrow(query, user_id, *values)

    # =========================================================================
    # List sections
    # =========================================================================

    async def list_items(self, user_id: Id, section: ResumeSection) -> list[asyncpg.Record]:
        table, _, ordering = SECTION_TABLES[section]
        return await self.pool.fetch(
            f"SELECT * FROM {table} WHERE user_id = $1 ORDER BY {ordering}",
            user_id,
        )

    async def add_item(self, user_id: Id, section: ResumeSection, data: dict[str, Any]) -> asyncpg.Record:
        table, columns, _ = SECTION_TABLES[section]
        used = [column for column in columns if column in data]
        placeholders = ", ".join(f"${i}" for i in range(2, len(used) + 2))
        query = f"""
            INSERT INTO {table} (user_id{''.join(', ' + c for c in used)})
            VALUES ($1{', ' + placeholders if used else ''})
            RETURNING *
        """
        return await self.pool.fetchrow(query, user_id, *[data[c] for c in used])

    async def update_item(
        self,
        user_id: Id,
        section: ResumeSection,
        item_id: Id,
        data: dict[str, Any],
    ) -> Optional[asyncpg.Record]:
        """Update the given columns of one item owned by user_id."""
        table, columns, _ = SECTION_TABLES[section]
        updates = []
        values = []
        param_num = 1

        for column in columns:
            if column in data:
                updates.append(f"{column} = ${param_num}")
                values.append(data[column])
                param_num += 1

        if not updates:
            return await self.pool.fetchrow(
                f"SELECT * FROM {table} WHERE id = $1 AND user_id = $2",
                item_id,
                user_id,
            )

        values.extend([item_id, user_id])
        query = f"""
            UPDATE {table}
            SET {', '.join(updates)}
            WHERE id = ${param_num} AND user_id = ${param_num + 1}
            RETURNING *
        """
        return await self.pool.fetchrow(query, *values)

    async def delete_item(self, user_id: Id, section: ResumeSection, item_id: Id) -> bool:
        table, _, _ = SECTION_TABLES[section]
        result = await self.pool.execute(
            f"DELETE FROM {table} WHERE id = $1 AND user_id = $2",
            item_id,
            user_id,
        )
        return result == "DELETE 1"

    # =========================================================================
    # Summary
    # =========================================================================

    async def get_summary(self, user_id: Id) -> Optional[asyncpg.Record]:
        return await self.pool.fetchrow(
            "SELECT user_id, summary_text, updated_at FROM resume_summary WHERE user_id = $1",
            user_id,
        )

    async def upsert_summary(self, user_id: Id, summary_text: str) -> asyncpg.Record:
        return await self.pool.fetchrow(
            """
            INSERT INTO resume_summary (user_id, summary_text)
            VALUES ($1, $2)
            ON CONFLICT (user_id) DO UPDATE SET
                summary_text = EXCLUDED.summary_text,
                updated_at = now()
            RETURNING user_id, summary_text, updated_at
            """,
            user_id,
            summary_text,
        )
