"""Interview Generator Agent - generates mock-interview questions for a job profile."""

from google.adk.agents.llm_agent import Agent
from google.adk.runners import Runner
from google.adk.sessions import InMemorySessionService
from google.genai import types
from dataclasses import dataclass, field
from typing import Optional
import json
import logging
import re
import os
import uuid

logger = logging.getLogger(__name__)


# =============================================================================
# Data Classes for Results
# =============================================================================

@dataclass
class GeneratedQuestion:
    question: str
    type: str = "general"
    difficulty: str = "medium"       # easy, medium, hard
    focus_area: str = ""


@dataclass
class GeneratedQuestions:
    """Questions for one interview, in the order they are asked."""
    questions: list[GeneratedQuestion] = field(default_factory=list)
    resume_personalized: bool = False
    raw_response: Optional[str] = None

    @property
    def texts(self) -> list[str]:
        return [q.question for q in self.questions]


# =============================================================================
# Agent Instruction
# =============================================================================

INSTRUCTION = """You are an expert interview question generator for mock interviews.

You receive a position profile (job role, domain, experience level, question type and optional extra
requirements) and sometimes a summary of the candidate's resume.

## RULES
1. Generate exactly the requested number of questions
2. Match the difficulty to the experience level and make the questions progressively more challenging
3. Focus on the requested question type; for "mixed" combine technical, behavioral and scenario questions
4. Every question must be specific and detailed. Avoid generic or overly simple questions
5. When a resume summary is given, tailor questions to the experience, projects and skills it mentions
6. Questions are read out loud by a text-to-speech voice: no markdown, no code blocks inside a question

## OUTPUT
Respond with ONLY a JSON object:
{
  "questions": [
    {
      "question": "Detailed question text",
      "type": "technical|behavioral|situational",
      "difficulty": "easy|medium|hard",
      "focus_area": "skill or competency being tested"
    }
  ]
}"""


# =============================================================================
# Agent and Runner Setup
# =============================================================================

generate_config = types.GenerateContentConfig(temperature=0.7, max_output_tokens=2048)

interview_generator_agent = Agent(
    name="interview_generator",
    model=os.environ.get("GEMINI_QUESTION_MODEL", "gemini-2.5-flash"),
    instruction=INSTRUCTION,
    description="Agent that generates mock-interview questions for a job profile",
    generate_content_config=generate_config,
)

_session_service = InMemorySessionService()

_runner = Runner(
    agent=interview_generator_agent,
    app_name="interview_generator_app",
    session_service=_session_service,
)


# =============================================================================
# Helper Functions
# =============================================================================

def build_prompt(
    job_role: str,
    domain: str,
    experience_level: str,
    question_type: str,
    num_questions: int,
    additional_constraints: str = "",
    resume_summary: Optional[str] = None,
) -> str:
    lines = [
        f"Generate {num_questions} interview questions for this position.",
        "",
        "## POSITION",
        f"- Job role: {job_role}",
        f"- Domain: {domain}",
        f"- Experience level: {experience_level}",
        f"- Question type: {question_type}",
    ]
    if additional_constraints:
        lines.append(f"- Additional requirements: {additional_constraints}")
    if resume_summary:
        lines += [
            "",
            "## CANDIDATE BACKGROUND",
            f'Resume summary: "{resume_summary}"',
            "Reference specific experiences, projects or skills from this background where appropriate.",
        ]
    lines += ["", "Return the questions as JSON."]
    return "\n".join(lines)


def _difficulty_for_index(index: int) -> str:
    if index < 2:
        return "easy"
    if index < 4:
        return "medium"
    return "hard"


def parse_plain_text_questions(response_text: str, num_questions: int, domain: str) -> list[GeneratedQuestion]:
    """Fallback when the model did not return JSON: use question-like lines."""
    lines = [
        line for line in response_text.split("\n")
        if line.strip() and ("?" in line or re.match(r"^\d+[.)]", line.strip()))
    ]
    return [
        GeneratedQuestion(
            question=re.sub(r"^\d+[.)\s]*", "", line.strip()).strip(),
            type="general",
            difficulty=_difficulty_for_index(index),
            focus_area=domain,
        )
        for index, line in enumerate(lines[:num_questions])
    ]


def parse_questions(response_text: str, num_questions: int, domain: str) -> list[GeneratedQuestion]:
    """
    Parse the agent output into at most num_questions questions.

    JSON is preferred; question-like plain text lines are the fallback.
    """
    json_match = re.search(r"\{[\s\S]*\}", response_text)
    if json_match:
        try:
            data = json.loads(json_match.group(0))
        except json.JSONDecodeError as e:
            logger.warning(f"[QUESTION GEN] JSON parse failed, using plain text fallback: {e}")
        else:
            raw_questions = data.get("questions") if isinstance(data, dict) else None
            if isinstance(raw_questions, list):
                questions = []
                for item in raw_questions:
                    if isinstance(item, str):
                        item = {"question": item}
                    if not isinstance(item, dict) or not str(item.get("question", "")).strip():
                        continue
                    questions.append(GeneratedQuestion(
                        question=str(item["question"]).strip(),
                        type=str(item.get("type") or "general"),
                        difficulty=str(item.get("difficulty") or _difficulty_for_index(len(questions))),
                        focus_area=str(item.get("focus_area") or domain),
                    ))
                return questions[:num_questions]

    return parse_plain_text_questions(response_text, num_questions, domain)


# =============================================================================
# Main Generation Function
# =============================================================================

async def generate_questions(
    job_role: str,
    domain: str,
    experience_level: str,
    question_type: str,
    num_questions: int = 5,
    additional_constraints: str = "",
    resume_summary: Optional[str] = None,
) -> GeneratedQuestions:
    """
    Generate interview questions for a job profile.

    Args:
        job_role: Target role
        domain: Technical domain
        experience_level: entry, mid, senior, ...
        question_type: technical, behavioral, mixed, ...
        num_questions: Number of questions to return (default 5)
        additional_constraints: Free-text extra requirements
        resume_summary: Candidate resume summary used to personalize questions

    Returns:
        GeneratedQuestions with at most num_questions questions

    Raises:
        ValueError: If no questions could be extracted from the agent output
    """
    prompt_text = build_prompt(
        job_role, domain, experience_level, question_type,
        num_questions, additional_constraints, resume_summary,
    )

    logger.info(f"[QUESTION GEN] Starting: role: {job_role}, domain: {domain}, personalized: {bool(resume_summary)}")

    session_id = f"interview_generator_{uuid.uuid4().hex[:8]}"

    await _session_service.create_session(
        app_name="interview_generator_app",
        user_id="system",
        session_id=session_id,
    )

    content = types.Content(
        role="user",
        parts=[types.Part(text=prompt_text)],
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

    logger.debug(f"Raw response: {response_text[:500]}...")

    questions = parse_questions(response_text, num_questions, domain)
    if not questions:
        raise ValueError("No questions generated")

    logger.info(f"[QUESTION GEN] Generated {len(questions)} questions")
    return GeneratedQuestions(
        questions=questions,
        resume_personalized=bool(resume_summary),
        raw_response=response_text,
    )
