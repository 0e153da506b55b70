import os
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import CORS_ORIGINS, ENVIRONMENT
from src.database import close_db_pool, get_db_pool, run_schema_migrations
from src.exceptions import register_exception_handlers
from src.routers import health_router, interviews_router, resume_router, sessions_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - database pool and schema on startup."""
    pool = await get_db_pool()
    await run_schema_migrations(pool)
    logger.info(f"Interview backend started ({ENVIRONMENT})")
    yield
    # Cleanup on shutdown
    await close_db_pool()


app = FastAPI(
    title="Shaurya Interview Backend",
    lifespan=lifespan,
    debug=ENVIRONMENT == "development",
)

# CORS middleware for the interview frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    allow_credentials=True,
)

register_exception_handlers(app)

app.include_router(health_router)
app.include_router(sessions_router)
app.include_router(interviews_router)
app.include_router(resume_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", 8080)))
