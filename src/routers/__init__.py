"""
API routers for endpoint organization.
"""
from .health import router as health_router
from .sessions import router as sessions_router
from .interviews import router as interviews_router
from .resume import router as resume_router

__all__ = [
    "health_router",
    "sessions_router",
    "interviews_router",
    "resume_router",
]
