"""
Resume Summarizer Agent for writing a short professional summary from resume data.
"""
from .agent import generate_resume_summary, format_resume_for_prompt

__all__ = ["generate_resume_summary", "format_resume_for_prompt"]
