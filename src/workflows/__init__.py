"""
Workflows package - live interview session handling.

This package provides:
- interview_session: the pure session state machine
- InterviewOrchestrator: sequences vendor calls and persistence around it
- get_orchestrator(): singleton accessor for the orchestrator
"""

from src.workflows.orchestrator import InterviewOrchestrator, SessionUpdate, get_orchestrator

__all__ = [
    "InterviewOrchestrator",
    "SessionUpdate",
    "get_orchestrator",
]
