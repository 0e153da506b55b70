"""
Resume Summarizer Agent.

Turns the structured resume sections of a user into a 2-3 sentence
professional summary. The summary is stored and later used to personalize
interview questions.
"""

from google.adk.agents.llm_agent import Agent
from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types
import json
import logging
import os
import uuid

logger = logging.getLogger(__name__)


# =============================================================================
# Agent Instruction
# =============================================================================

INSTRUCTION = """You write professional resume summaries.

Based on the resume data you receive, write a professional summary of 2-3 sentences that highlights the
person's key strengths, experience and career focus. It must be concise and compelling, suitable for the
top of a resume, and focus on the most relevant skills, experience and achievements.

Reply with the summary text only: no heading, no quotes, no markdown."""


# =============================================================================
# Agent and Runner Setup
# =============================================================================

resume_summarizer_agent = Agent(
    name="resume_summarizer",
    model=os.environ.get("GEMINI_SUMMARY_MODEL", "gemini-2.5-flash"),
    instruction=INSTRUCTION,
    description="Agent that writes a professional summary from structured resume data",
    generate_content_config=types.GenerateContentConfig(temperature=0.4),
)

_session_service = InMemorySessionService()

_runner = Runner(
    agent=resume_summarizer_agent,
    app_name="resume_summarizer_app",
    session_service=_session_service,
)


# =============================================================================
# Helper Functions
# =============================================================================

def format_resume_for_prompt(resume: dict) -> str:
    """Serialize the non-empty resume sections as indented JSON."""
    sections = {name: value for name, value in resume.items() if value}
    return json.dumps(sections, indent=2, default=str)


# =============================================================================
# Main Function
# =============================================================================

async def generate_resume_summary(resume: dict) -> str:
    """
    Generate a professional summary for a resume.

    Args:
        resume: Mapping of section name to its data (dict for personal info,
            list of dicts for list sections)

    Returns:
        The summary text, stripped

    Raises:
        ValueError: If the resume is empty or the agent returned no text
    """
    formatted = format_resume_for_prompt(resume)
    if formatted == "{}":
        raise ValueError("Resume has no data to summarize")

    logger.info(f"[RESUME SUMMARY] Starting: sections: {', '.join(k for k, v in resume.items() if v)}")

    session_id = f"resume_summary_{uuid.uuid4().hex[:8]}"

    await _session_service.create_session(
        app_name="resume_summarizer_app",
        user_id="system",
        session_id=session_id,
    )

    content = types.Content(
        role="user",
        parts=[types.Part(text=f"## RESUME DATA\n{formatted}\n\nWrite the professional summary.")],
    )

    response_text = ""
    async for event in _runner.run_async(
        user_id="system",
        session_id=session_id,
        new_message=content,
    ):
        if event.is_final_response() and event.content:
            for part in event.content.parts:
                if hasattr(part, "text") and part.text:
                    response_text += part.text

    summary = response_text.strip()
    if not summary:
        raise ValueError("Failed to generate summary")

    logger.info(f"[RESUME SUMMARY] Generated summary ({len(summary)} chars)")
    return summary
