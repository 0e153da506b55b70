"""
Live interview session endpoints.

The browser plays narration and records audio; it reports those events here
and renders the returned session snapshot.
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, File, UploadFile, status

from src.dependencies import get_session_orchestrator
from src.exceptions import parse_uuid
from src.models import (
    CodeResponseRequest,
    EvaluationView,
    NarrationView,
    PendingResponseView,
    QuestionView,
    RecordingStartRequest,
    SessionResponse,
    StartSessionRequest,
    TextResponseRequest,
)
from src.workflows.interview_session import can_submit
from src.workflows.orchestrator import InterviewOrchestrator, SessionUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["Interview Sessions"])


def to_session_response(update: SessionUpdate) -> SessionResponse:
    """Render an orchestrator update as the API snapshot."""
    state = update.state
    question = state.current_question
    pending = state.pending

    evaluation = None
    if update.evaluation is not None:
        evaluation = EvaluationView(
            question_number=update.evaluated_question or 0,
            score=update.evaluation.score,
            performance_level=update.evaluation.performance_level,
            feedback=update.evaluation.feedback,
            strengths=update.evaluation.strengths,
            improvements=update.evaluation.improvements,
            recommendation=update.evaluation.recommendation,
            graded=update.graded,
        )

    narration = None
    if update.narration is not None:
        narration = NarrationView(
            audio_content=update.narration.audio_content,
            content_type=update.narration.content_type,
        )

    return SessionResponse(
        session_id=state.session_id,
        interview_id=state.interview_id,
        phase=state.phase,
        question_index=state.question_index,
        total_questions=state.total_questions,
        current_question=QuestionView(id=question.id, number=question.number, text=question.text) if question else None,
        is_speaking=state.is_speaking,
        is_recording=state.is_recording,
        can_submit=can_submit(state),
        pending=PendingResponseView(
            has_audio=pending.has_audio,
            text_content=pending.text_content,
            code_content=pending.code_content,
            code_language=pending.code_language,
        ),
        error=state.error,
        narration=narration,
        evaluation=evaluation,
        resume_personalized=update.resume_personalized,
    )


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def start_session(
    request: StartSessionRequest,
    orchestrator: InterviewOrchestrator = Depends(get_session_orchestrator),
):
    """Create an interview, generate its questions and narrate the first one."""
    user_id = parse_uuid(request.user_id, field="user_id")
    update = await orchestrator.start_session(str(user_id), request.config)
    return to_session_response(update)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_session_orchestrator),
):
    return to_session_response(orchestrator.get_session(session_id))


@router.delete("/{session_id}")
async def close_session(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_session_orchestrator),
):
    """Abandon a session. In-flight vendor calls of the session are cancelled."""
    cancelled = await orchestrator.close_session(session_id)
    return {"status": "closed", "session_id": session_id, "cancelled_calls": cancelled}


# =============================================================================
# Narration
# =============================================================================

@router.post("/{session_id}/playback-complete", response_model=SessionResponse)
async def playback_complete(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_session_orchestrator),
):
    """The browser finished playing the question audio."""
    return to_session_response(await orchestrator.playback_finished(session_id))


@router.post("/{session_id}/replay", response_model=SessionResponse)
async def replay_question(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_session_orchestrator),
):
    return to_session_response(await orchestrator.replay_question(session_id))


# =============================================================================
# Response Capture
# =============================================================================

@router.post("/{session_id}/recording/start", response_model=SessionResponse)
async def start_recording(
    session_id: str,
    request: Optional[RecordingStartRequest] = None,
    orchestrator: InterviewOrchestrator = Depends(get_session_orchestrator),
):
    granted = request.microphone_granted if request else True
    return to_session_response(await orchestrator.start_recording(session_id, microphone_granted=granted))


@router.post("/{session_id}/recording/stop", response_model=SessionResponse)
async def stop_recording(
    session_id: str,
    audio: Optional[UploadFile] = File(None),
    orchestrator: InterviewOrchestrator = Depends(get_session_orchestrator),
):
    """Stop recording and attach the recorded clip (multipart field "audio")."""
    data = await audio.read() if audio is not None else b""
    content_type = (audio.content_type if audio is not None else None) or "audio/webm"
    return to_session_response(await orchestrator.stop_recording(session_id, data, content_type))


@router.put("/{session_id}/response/text", response_model=SessionResponse)
async def update_text(
    session_id: str,
    request: TextResponseRequest,
    orchestrator: InterviewOrchestrator = Depends(get_session_orchestrator),
):
    return to_session_response(await orchestrator.update_text(session_id, request.text))


@router.put("/{session_id}/response/code", response_model=SessionResponse)
async def update_code(
    session_id: str,
    request: CodeResponseRequest,
    orchestrator: InterviewOrchestrator = Depends(get_session_orchestrator),
):
    return to_session_response(await orchestrator.update_code(session_id, request.code, request.language))


@router.delete("/{session_id}/response", response_model=SessionResponse)
async def clear_response(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_session_orchestrator),
):
    return to_session_response(await orchestrator.clear_response(session_id))


# =============================================================================
# Submission and Navigation
# =============================================================================

@router.post("/{session_id}/submit", response_model=SessionResponse)
async def submit_response(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_session_orchestrator),
):
    """Evaluate the pending response and move to the next question (or finish)."""
    return to_session_response(await orchestrator.submit_response(session_id))


@router.post("/{session_id}/next", response_model=SessionResponse)
async def next_question(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_session_orchestrator),
):
    """Skip the current question. On the last question this finishes the interview."""
    return to_session_response(await orchestrator.skip_question(session_id))


@router.post("/{session_id}/finish", response_model=SessionResponse)
async def finish_interview(
    session_id: str,
    orchestrator: InterviewOrchestrator = Depends(get_session_orchestrator),
):
    return to_session_response(await orchestrator.finish_interview(session_id))
