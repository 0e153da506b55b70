"""
Interview session state machine.

The session is a frozen value object. Every user or system event is a pure
function that takes the current state and returns the next one, or raises a
typed error and leaves the caller's state untouched. All IO (question
generation, narration, transcription, evaluation, persistence) lives in the
orchestrator, which feeds the outcomes back in through these transitions.

    initializing -> speaking -> awaiting_response -> processing
        processing -> speaking          (more questions left)
        processing -> finishing         (last question answered)
        finishing  -> finished
        initializing -> failed          (no questions)
"""
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from src.exceptions import (
    InvalidTransitionError,
    SessionFinishedError,
    SubmissionRejectedError,
)
from src.models.enums import SessionPhase
from src.models.interview import InterviewConfig


# =============================================================================
# Value Objects
# =============================================================================

@dataclass(frozen=True)
class Question:
    """A generated interview question. number is 1-based."""
    id: str
    number: int
    text: str


@dataclass(frozen=True)
class AudioClip:
    """A finished recording handed over by the browser."""
    data: bytes
    content_type: str = "audio/webm"

    @property
    def is_empty(self) -> bool:
        return not self.data


@dataclass(frozen=True)
class PendingResponse:
    """The multi-channel answer being prepared for the current question."""
    audio_clip: Optional[AudioClip] = None
    text_content: str = ""
    code_content: str = ""
    code_language: str = ""

    @property
    def has_audio(self) -> bool:
        return self.audio_clip is not None and not self.audio_clip.is_empty

    def has_content(self) -> bool:
        return self.has_audio or bool(self.text_content.strip()) or bool(self.code_content.strip())


@dataclass(frozen=True)
class SessionState:
    session_id: str
    interview_id: str
    user_id: str
    config: InterviewConfig
    phase: SessionPhase = SessionPhase.INITIALIZING
    questions: tuple[Question, ...] = ()
    question_index: int = 0
    pending: PendingResponse = field(default_factory=PendingResponse)
    is_speaking: bool = False
    is_recording: bool = False
    error: Optional[str] = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.question_index < len(self.questions):
            return self.questions[self.question_index]
        return None

    @property
    def is_last_question(self) -> bool:
        return self.question_index >= len(self.questions) - 1


# =============================================================================
# Guards
# =============================================================================

def _require(state: SessionState, action: str, *phases: SessionPhase) -> None:
    if state.phase == SessionPhase.FINISHED:
        raise SessionFinishedError(action)
    if state.phase not in phases:
        raise InvalidTransitionError(action, state.phase.value)


def submission_blocker(state: SessionState) -> Optional[str]:
    """Return why the pending response cannot be submitted, or None."""
    if state.phase != SessionPhase.AWAITING_RESPONSE:
        return f"session is {state.phase.value}"
    if state.is_speaking:
        return "the question is still being read out"
    if state.is_recording:
        return "recording is still in progress"
    if not state.pending.has_content():
        return "provide a spoken, written or code answer first"
    return None


def can_submit(state: SessionState) -> bool:
    return submission_blocker(state) is None


# =============================================================================
# Initialization
# =============================================================================

def new_session(session_id: str, interview_id: str, user_id: str, config: InterviewConfig) -> SessionState:
    return SessionState(
        session_id=session_id,
        interview_id=interview_id,
        user_id=user_id,
        config=config,
    )


def questions_loaded(state: SessionState, questions: list[Question]) -> SessionState:
    """Questions are ready; start narrating the first one."""
    _require(state, "load questions", SessionPhase.INITIALIZING)
    if not questions:
        return initialization_failed(state, "No questions were generated")
    return replace(
        state,
        phase=SessionPhase.SPEAKING,
        questions=tuple(questions),
        question_index=0,
        is_speaking=True,
        error=None,
    )


def initialization_failed(state: SessionState, reason: str) -> SessionState:
    _require(state, "fail initialization", SessionPhase.INITIALIZING)
    return replace(state, phase=SessionPhase.FAILED, error=reason)


# =============================================================================
# Narration
# =============================================================================

def narration_finished(state: SessionState) -> SessionState:
    """Playback ended, or narration failed and the question is shown as text only."""
    _require(state, "finish narration", SessionPhase.SPEAKING)
    return replace(state, phase=SessionPhase.AWAITING_RESPONSE, is_speaking=False)


def request_replay(state: SessionState) -> SessionState:
    _require(state, "replay the question", SessionPhase.AWAITING_RESPONSE)
    if state.is_recording:
        raise InvalidTransitionError("replay the question", state.phase.value, "stop recording first")
    return replace(state, phase=SessionPhase.SPEAKING, is_speaking=True)


# =============================================================================
# Response Capture
# =============================================================================

def start_recording(state: SessionState) -> SessionState:
    _require(state, "start recording", SessionPhase.AWAITING_RESPONSE)
    if state.is_recording:
        raise InvalidTransitionError("start recording", state.phase.value, "already recording")
    return replace(state, is_recording=True)


def stop_recording(state: SessionState, clip: Optional[AudioClip]) -> SessionState:
    """Stop capture. An empty clip keeps any earlier recording."""
    _require(state, "stop recording", SessionPhase.AWAITING_RESPONSE)
    if not state.is_recording:
        raise InvalidTransitionError("stop recording", state.phase.value, "not recording")
    pending = state.pending
    if clip is not None and not clip.is_empty:
        pending = replace(pending, audio_clip=clip)
    return replace(state, is_recording=False, pending=pending)


def set_text(state: SessionState, text: str) -> SessionState:
    _require(state, "edit the text answer", SessionPhase.SPEAKING, SessionPhase.AWAITING_RESPONSE)
    return replace(state, pending=replace(state.pending, text_content=text))


def set_code(state: SessionState, code: str, language: str = "") -> SessionState:
    _require(state, "edit the code answer", SessionPhase.SPEAKING, SessionPhase.AWAITING_RESPONSE)
    return replace(state, pending=replace(state.pending, code_content=code, code_language=language))


def clear_response(state: SessionState) -> SessionState:
    _require(state, "clear the answer", SessionPhase.SPEAKING, SessionPhase.AWAITING_RESPONSE)
    if state.is_recording:
        raise InvalidTransitionError("clear the answer", state.phase.value, "stop recording first")
    return replace(state, pending=PendingResponse())


def build_combined_response(
    transcript: str = "",
    text: str = "",
    code: str = "",
    language: str = "",
) -> str:
    """Join the non-empty channels into one labeled answer for evaluation."""
    sections = []
    if transcript.strip():
        sections.append(f"Speech: {transcript.strip()}")
    if text.strip():
        sections.append(f"Text: {text.strip()}")
    if code.strip():
        label = f"Code ({language.strip()})" if language.strip() else "Code"
        sections.append(f"{label}:\n{code.rstrip()}")
    return "\n\n".join(sections)


# =============================================================================
# Processing and Advancing
# =============================================================================

def begin_processing(state: SessionState) -> SessionState:
    if state.phase == SessionPhase.FINISHED:
        raise SessionFinishedError("submit a response")
    blocker = submission_blocker(state)
    if blocker:
        raise SubmissionRejectedError(blocker)
    return replace(state, phase=SessionPhase.PROCESSING)


def abort_processing(state: SessionState) -> SessionState:
    """Nothing usable came out of the response; let the user try again."""
    _require(state, "abort processing", SessionPhase.PROCESSING)
    return replace(state, phase=SessionPhase.AWAITING_RESPONSE)


def advance(state: SessionState) -> SessionState:
    """Move to the next question, or to finishing after the last one."""
    _require(state, "advance", SessionPhase.PROCESSING, SessionPhase.AWAITING_RESPONSE)
    if state.is_recording:
        raise InvalidTransitionError("advance", state.phase.value, "stop recording first")
    if state.is_last_question:
        return replace(
            state,
            phase=SessionPhase.FINISHING,
            pending=PendingResponse(),
            is_speaking=False,
        )
    return replace(
        state,
        phase=SessionPhase.SPEAKING,
        question_index=state.question_index + 1,
        pending=PendingResponse(),
        is_speaking=True,
    )


def response_processed(state: SessionState) -> SessionState:
    _require(state, "complete processing", SessionPhase.PROCESSING)
    return advance(state)


def finish_early(state: SessionState) -> SessionState:
    _require(state, "finish the interview", SessionPhase.AWAITING_RESPONSE, SessionPhase.SPEAKING)
    if state.is_recording:
        raise InvalidTransitionError("finish the interview", state.phase.value, "stop recording first")
    return replace(
        state,
        phase=SessionPhase.FINISHING,
        pending=PendingResponse(),
        is_speaking=False,
    )


def mark_finished(state: SessionState) -> SessionState:
    _require(state, "finish", SessionPhase.FINISHING)
    return replace(state, phase=SessionPhase.FINISHED)
