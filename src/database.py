"""
Database connection management and migrations.
"""
import asyncpg
import logging
from typing import Optional
from src.config import DATABASE_URL

logger = logging.getLogger(__name__)

# Global connection pool
_db_pool: Optional[asyncpg.Pool] = None


async def get_db_pool() -> asyncpg.Pool:
    """Get or create the database connection pool.

    Pool configuration tuned for the Supabase Session Mode Pooler:
    - setup callback validates connections on acquire
    - max_inactive_connection_lifetime matches the pooler timeout (~5 min)
    - min_size=2 pre-warms connections to avoid cold start latency
    """
    global _db_pool
    if _db_pool is None:
        # Accept SQLAlchemy-style URLs as well
        raw_url = DATABASE_URL.replace("postgresql+asyncpg://", "postgresql://")

        async def setup_connection(conn):
            """Validate connection on acquire so stale pooler connections are not handed out."""
            await conn.execute("SELECT 1")

        _db_pool = await asyncpg.create_pool(
            raw_url,
            min_size=2,
            max_size=10,
            command_timeout=60,
            max_inactive_connection_lifetime=300.0,
            setup=setup_connection,
        )
        logger.info("Database connection pool created (min=2, max=10, idle_lifetime=300s)")
    return _db_pool


async def close_db_pool():
    """Close the database connection pool."""
    global _db_pool
    if _db_pool is not None:
        await _db_pool.close()
        _db_pool = None
        logger.info("Database connection pool closed")


# =============================================================================
# Schema
# =============================================================================

INTERVIEW_TABLES = [
    """
    CREATE TABLE IF NOT EXISTS interviews (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        user_id UUID NOT NULL,
        job_role TEXT NOT NULL,
        domain TEXT NOT NULL,
        experience TEXT NOT NULL,
        question_type TEXT NOT NULL,
        additional_constraints TEXT,
        status TEXT NOT NULL DEFAULT 'in_progress'
            CHECK (status IN ('in_progress', 'completed')),
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        completed_at TIMESTAMPTZ
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS interview_questions (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        interview_id UUID NOT NULL REFERENCES interviews(id) ON DELETE CASCADE,
        question_number INTEGER NOT NULL,
        question_text TEXT NOT NULL,
        user_response TEXT,
        user_text_response TEXT,
        user_code_response TEXT,
        response_language TEXT,
        evaluation_score INTEGER CHECK (evaluation_score BETWEEN 0 AND 100),
        evaluation_feedback TEXT,
        strengths JSONB NOT NULL DEFAULT '[]'::jsonb,
        improvements JSONB NOT NULL DEFAULT '[]'::jsonb,
        performance_level TEXT,
        recommendation TEXT,
        dimension_scores JSONB,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        UNIQUE (interview_id, question_number)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS interview_results (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        interview_id UUID NOT NULL UNIQUE REFERENCES interviews(id) ON DELETE CASCADE,
        user_id UUID NOT NULL,
        overall_score INTEGER NOT NULL DEFAULT 0,
        performance_level TEXT NOT NULL DEFAULT 'Pending',
        overall_recommendation TEXT NOT NULL DEFAULT 'Under Review',
        total_questions INTEGER NOT NULL DEFAULT 0,
        questions_answered INTEGER NOT NULL DEFAULT 0,
        average_score DOUBLE PRECISION,
        duration_seconds INTEGER,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
]

RESUME_TABLES = [
    """
    CREATE TABLE IF NOT EXISTS personal_info (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        user_id UUID NOT NULL UNIQUE,
        full_name TEXT,
        email TEXT,
        phone TEXT,
        location TEXT,
        linkedin_url TEXT,
        github_url TEXT,
        portfolio_url TEXT,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS education (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        user_id UUID NOT NULL,
        institution TEXT NOT NULL,
        degree TEXT,
        field_of_study TEXT,
        start_date DATE,
        end_date DATE,
        grade TEXT,
        description TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS work_experience (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        user_id UUID NOT NULL,
        company_name TEXT NOT NULL,
        position TEXT NOT NULL,
        location TEXT,
        start_date DATE,
        end_date DATE,
        is_current BOOLEAN NOT NULL DEFAULT false,
        description TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS resume_skills (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        user_id UUID NOT NULL,
        skill_name TEXT NOT NULL,
        proficiency TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        UNIQUE (user_id, skill_name)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS projects (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        user_id UUID NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        technologies TEXT,
        project_url TEXT,
        start_date DATE,
        end_date DATE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS positions_of_responsibility (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        user_id UUID NOT NULL,
        title TEXT NOT NULL,
        organization TEXT,
        start_date DATE,
        end_date DATE,
        description TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS achievements (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        user_id UUID NOT NULL,
        title TEXT NOT NULL,
        description TEXT,
        date_achieved DATE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS hobbies_activities (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        user_id UUID NOT NULL,
        activity_name TEXT NOT NULL,
        description TEXT,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        UNIQUE (user_id, activity_name)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS resume_summary (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        user_id UUID NOT NULL UNIQUE,
        summary_text TEXT NOT NULL,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
]


async def run_schema_migrations(pool: asyncpg.Pool):
    """Create interview and resume tables when they do not exist yet."""
    try:
        for statement in INTERVIEW_TABLES:
            await pool.execute(statement)
        logger.info("Interview tables ensured (interviews, interview_questions, interview_results)")

        for statement in RESUME_TABLES:
            await pool.execute(statement)
        logger.info("Resume tables ensured")

        await pool.execute("""
            CREATE INDEX IF NOT EXISTS idx_interviews_user_id
            ON interviews(user_id, created_at DESC)
        """)
    except Exception as e:
        logger.warning(f"Schema migration warning: {e}")
