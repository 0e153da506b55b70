"""
Interview Session Orchestrator - runs live mock-interview sessions.

The orchestrator owns the in-memory registry of live sessions. For every
session it keeps:
1. The current SessionState (a frozen value, replaced on every transition)
2. A lock, so only one action per session runs at a time; a second action
   that arrives while one is running is rejected instead of queued
3. A cancellation scope holding the in-flight vendor calls, cancelled when
   the session is closed

Sessions that reach finished or failed leave the live registry at once. Their
last state is kept in a bounded history so the final GET still answers and
late actions get a 409 instead of a 404.

Routers are thin: they validate input and call the methods here. Vendor
failures come back as ServiceResult values and are turned into fallbacks;
only state-machine violations and permission problems reach the caller.
"""
import asyncio
import inspect
import logging
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

from response_evaluator import EvaluationResult
from src.config import COMPUTE_RESULTS_ON_FINISH
from src.exceptions import (
    EmptyResponseError,
    InvalidTransitionError,
    MicrophonePermissionError,
    QuestionGenerationError,
    SessionBusyError,
    SessionClosedError,
    SessionFinishedError,
    SessionNotFoundError,
    ShauryaException,
    StorageError,
)
from src.models.enums import SessionPhase
from src.models.interview import InterviewConfig
from src.repositories.interview_repo import InterviewRepository
from src.services.evaluation_service import EvaluationService
from src.services.narration_service import NarrationAudio, NarrationService
from src.services.question_service import QuestionService
from src.services.results_service import ResultsService
from src.services.speech_service import SpeechToTextService
from src.services.storage_service import StorageService
from src.workflows import interview_session as session
from src.workflows.interview_session import AudioClip, Question, SessionState

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = {
    "audio/webm": "webm",
    "audio/ogg": "ogg",
    "audio/mpeg": "mp3",
    "audio/mp4": "m4a",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
}

FinishedCallback = Callable[[SessionState], Any]

# Terminal sessions remembered for late GETs, oldest dropped first
ENDED_SESSIONS_KEPT = 200


# =============================================================================
# Per-session runtime
# =============================================================================

class CancellationScope:
    """Tracks the in-flight vendor calls of one session."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.cancelled = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def run(self, awaitable: Awaitable):
        """Await a call inside the scope. Raises SessionClosedError if the scope is cancelled."""
        if self.cancelled:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise SessionClosedError(self.session_id)

        task = asyncio.ensure_future(awaitable)
        self._tasks.add(task)
        try:
            return await task
        except asyncio.CancelledError:
            if self.cancelled and task.cancelled():
                raise SessionClosedError(self.session_id) from None
            raise
        finally:
            self._tasks.discard(task)

    def cancel(self) -> int:
        self.cancelled = True
        in_flight = [task for task in self._tasks if not task.done()]
        for task in in_flight:
            task.cancel()
        return len(in_flight)


@dataclass
class SessionRuntime:
    state: SessionState
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    scope: Optional[CancellationScope] = None
    resume_personalized: bool = False

    def __post_init__(self):
        if self.scope is None:
            self.scope = CancellationScope(self.state.session_id)


@dataclass
class SessionUpdate:
    """Result of an orchestrator action, rendered by the routers."""
    state: SessionState
    narration: Optional[NarrationAudio] = None
    evaluation: Optional[EvaluationResult] = None
    evaluated_question: Optional[int] = None
    graded: bool = False
    resume_personalized: bool = False


# =============================================================================
# Orchestrator
# =============================================================================

class InterviewOrchestrator:
    """Sequences the IO around the pure session state machine."""

    def __init__(
        self,
        interview_repo: InterviewRepository,
        question_service: QuestionService,
        narration_service: NarrationService,
        speech_service: SpeechToTextService,
        storage_service: StorageService,
        evaluation_service: EvaluationService,
        results_service: Optional[ResultsService] = None,
        compute_results_on_finish: bool = COMPUTE_RESULTS_ON_FINISH,
        on_finished: Optional[FinishedCallback] = None,
        ended_sessions_kept: int = ENDED_SESSIONS_KEPT,
    ):
        self.interview_repo = interview_repo
        self.questions = question_service
        self.narration = narration_service
        self.speech = speech_service
        self.storage = storage_service
        self.evaluation = evaluation_service
        self.results = results_service
        self.compute_results_on_finish = compute_results_on_finish
        self.on_finished = on_finished
        self.ended_sessions_kept = ended_sessions_kept
        self._sessions: dict[str, SessionRuntime] = {}
        self._ended: OrderedDict[str, SessionUpdate] = OrderedDict()

    # =========================================================================
    # Registry helpers
    # =========================================================================

    @property
    def active_sessions(self) -> int:
        return len(self._sessions)

    def _runtime(self, session_id: str) -> SessionRuntime:
        runtime = self._sessions.get(session_id)
        if runtime is not None:
            return runtime

        ended = self._ended.get(session_id)
        if ended is None:
            raise SessionNotFoundError(session_id)
        if ended.state.phase == SessionPhase.FINISHED:
            raise SessionFinishedError("continue the interview")
        raise InvalidTransitionError("continue the interview", ended.state.phase.value, ended.state.error)

    def _retire(self, runtime: SessionRuntime) -> None:
        """Move a finished or failed session out of the live registry."""
        session_id = runtime.state.session_id
        if self._sessions.get(session_id) is not runtime:
            return
        del self._sessions[session_id]
        self._ended[session_id] = self._update(runtime)
        while len(self._ended) > self.ended_sessions_kept:
            self._ended.popitem(last=False)
        logger.info(f"[SESSION] {session_id} released ({runtime.state.phase.value})")

    def _claim(self, session_id: str) -> SessionRuntime:
        """Get the runtime, rejecting the action if another one is running."""
        runtime = self._runtime(session_id)
        if runtime.lock.locked():
            raise SessionBusyError(session_id)
        return runtime

    def _update(self, runtime: SessionRuntime, **kwargs) -> SessionUpdate:
        return SessionUpdate(state=runtime.state, resume_personalized=runtime.resume_personalized, **kwargs)

    async def _persist(self, description: str, awaitable: Awaitable) -> bool:
        """Run a database write. Failures are logged and never stop the session."""
        try:
            await awaitable
            return True
        except Exception as e:
            logger.error(f"[SESSION] Failed to persist {description}: {e}")
            return False

    # =========================================================================
    # Session lifecycle
    # =========================================================================

    async def start_session(self, user_id: str, config: InterviewConfig) -> SessionUpdate:
        """
        Create the interview, generate and store its questions and narrate the first one.

        Raises:
            QuestionGenerationError: If no questions could be generated; the
                session is released and its failed state stays readable
        """
        interview = await self.interview_repo.create_interview(user_id, config)
        interview_id = str(interview["id"])
        session_id = str(uuid.uuid4())

        runtime = SessionRuntime(state=session.new_session(session_id, interview_id, str(user_id), config))
        self._sessions[session_id] = runtime
        logger.info(f"[SESSION] {session_id} started for interview {interview_id} ({config.job_role})")

        async with runtime.lock:
            try:
                t0 = time.perf_counter()
                generated = await runtime.scope.run(self.questions.generate(str(user_id), config))
                elapsed = (time.perf_counter() - t0) * 1000
                logger.info(f"⏱️ question generation: {elapsed:.0f}ms")

                if not generated.ok:
                    raise QuestionGenerationError(
                        generated.error.message,
                        {"session_id": session_id, "interview_id": interview_id},
                    )

                rows = await self.interview_repo.add_questions(interview_id, generated.value.texts)
                questions = [
                    Question(id=str(row["id"]), number=row["question_number"], text=row["question_text"])
                    for row in rows
                ]
                runtime.resume_personalized = generated.value.resume_personalized
                runtime.state = session.questions_loaded(runtime.state, questions)
                if runtime.state.phase == SessionPhase.FAILED:
                    raise QuestionGenerationError(
                        runtime.state.error or "No questions generated",
                        {"session_id": session_id, "interview_id": interview_id},
                    )
            except SessionClosedError:
                raise
            except Exception as e:
                if runtime.state.phase == SessionPhase.INITIALIZING:
                    reason = e.message if isinstance(e, ShauryaException) else str(e)
                    runtime.state = session.initialization_failed(runtime.state, reason)
                self._retire(runtime)
                raise

            narration = await self._speak(runtime)
            return self._update(runtime, narration=narration)

    def get_session(self, session_id: str) -> SessionUpdate:
        runtime = self._sessions.get(session_id)
        if runtime is not None:
            return self._update(runtime)
        ended = self._ended.get(session_id)
        if ended is None:
            raise SessionNotFoundError(session_id)
        return ended

    async def close_session(self, session_id: str) -> int:
        """Drop a session and cancel its in-flight vendor calls. Returns the number cancelled."""
        runtime = self._sessions.pop(session_id, None)
        if runtime is None:
            if self._ended.pop(session_id, None) is None:
                raise SessionNotFoundError(session_id)
            logger.info(f"[SESSION] {session_id} closed after it ended")
            return 0
        cancelled = runtime.scope.cancel()
        logger.info(f"[SESSION] {session_id} closed ({cancelled} in-flight calls cancelled)")
        return cancelled

    # =========================================================================
    # Narration
    # =========================================================================

    async def _speak(self, runtime: SessionRuntime) -> Optional[NarrationAudio]:
        """Synthesize the current question. On failure the question is shown as text only."""
        question = runtime.state.current_question
        result = await runtime.scope.run(self.narration.synthesize(question.text))
        if not result.ok:
            logger.warning(f"[SESSION] Narration failed for question {question.number}: {result.error.message}")
            runtime.state = session.narration_finished(runtime.state)
            return None
        return result.value

    async def playback_finished(self, session_id: str) -> SessionUpdate:
        runtime = self._claim(session_id)
        async with runtime.lock:
            state = runtime.state
            if state.phase == SessionPhase.AWAITING_RESPONSE and not state.is_speaking:
                return self._update(runtime)
            runtime.state = session.narration_finished(state)
            return self._update(runtime)

    async def replay_question(self, session_id: str) -> SessionUpdate:
        runtime = self._claim(session_id)
        async with runtime.lock:
            runtime.state = session.request_replay(runtime.state)
            narration = await self._speak(runtime)
            return self._update(runtime, narration=narration)

    # =========================================================================
    # Response capture
    # =========================================================================

    async def start_recording(self, session_id: str, microphone_granted: bool = True) -> SessionUpdate:
        runtime = self._claim(session_id)
        async with runtime.lock:
            if not microphone_granted:
                raise MicrophonePermissionError()
            runtime.state = session.start_recording(runtime.state)
            return self._update(runtime)

    async def stop_recording(
        self,
        session_id: str,
        data: bytes,
        content_type: str = "audio/webm",
    ) -> SessionUpdate:
        runtime = self._claim(session_id)
        async with runtime.lock:
            clip = AudioClip(data=data, content_type=content_type or "audio/webm") if data else None
            runtime.state = session.stop_recording(runtime.state, clip)
            return self._update(runtime)

    async def update_text(self, session_id: str, text: str) -> SessionUpdate:
        runtime = self._claim(session_id)
        async with runtime.lock:
            runtime.state = session.set_text(runtime.state, text)
            return self._update(runtime)

    async def update_code(self, session_id: str, code: str, language: str = "") -> SessionUpdate:
        runtime = self._claim(session_id)
        async with runtime.lock:
            runtime.state = session.set_code(runtime.state, code, language)
            return self._update(runtime)

    async def clear_response(self, session_id: str) -> SessionUpdate:
        runtime = self._claim(session_id)
        async with runtime.lock:
            runtime.state = session.clear_response(runtime.state)
            return self._update(runtime)

    # =========================================================================
    # Processing
    # =========================================================================

    def _blob_name(self, state: SessionState, clip: AudioClip) -> str:
        extension = AUDIO_EXTENSIONS.get(clip.content_type.split(";")[0].strip(), "webm")
        number = state.current_question.number
        return f"{state.user_id}/{state.interview_id}/question_{number}_{int(time.time() * 1000)}.{extension}"

    async def _transcribe_clip(self, runtime: SessionRuntime, clip: AudioClip) -> str:
        """Upload, transcribe and always delete the clip. Returns "" when any step fails."""
        name = self._blob_name(runtime.state, clip)
        try:
            audio_url = await runtime.scope.run(self.storage.upload(name, clip.data, clip.content_type))
        except StorageError as e:
            logger.warning(f"[SESSION] Audio upload failed, continuing without transcript: {e.message}")
            return ""

        try:
            result = await runtime.scope.run(self.speech.transcribe_url(audio_url))
        finally:
            try:
                await self.storage.delete(name)
            except StorageError as e:
                logger.warning(f"[SESSION] Could not delete audio blob {name}: {e.message}")

        if not result.ok:
            logger.warning(f"[SESSION] Transcription failed, continuing without transcript: {result.error.message}")
        return result.unwrap_or_fallback() or ""

    async def submit_response(self, session_id: str) -> SessionUpdate:
        """
        Transcribe, evaluate and store the pending response, then advance.

        Raises:
            SubmissionRejectedError: If the response cannot be submitted yet
            EmptyResponseError: If every channel is empty after transcription
        """
        runtime = self._claim(session_id)
        async with runtime.lock:
            runtime.state = session.begin_processing(runtime.state)
            state = runtime.state
            question = state.current_question
            pending = state.pending
            t0 = time.perf_counter()

            try:
                transcript = ""
                if pending.has_audio:
                    transcript = await self._transcribe_clip(runtime, pending.audio_clip)

                combined = session.build_combined_response(
                    transcript, pending.text_content, pending.code_content, pending.code_language,
                )
                if not combined:
                    runtime.state = session.abort_processing(runtime.state)
                    raise EmptyResponseError()

                await self._persist(
                    f"response for question {question.number}",
                    self.interview_repo.save_response(
                        state.interview_id,
                        question.number,
                        transcribed_text=transcript,
                        text_content=pending.text_content,
                        code_content=pending.code_content,
                        code_language=pending.code_language,
                    ),
                )

                evaluation = await runtime.scope.run(
                    self.evaluation.evaluate(question.text, combined, state.config)
                )
                if evaluation.ok:
                    result = evaluation.value
                    await self._persist(
                        f"evaluation for question {question.number}",
                        self.interview_repo.save_evaluation(
                            state.interview_id,
                            question.number,
                            score=result.score,
                            feedback=result.feedback,
                            strengths=result.strengths,
                            improvements=result.improvements,
                            performance_level=result.performance_level,
                            recommendation=result.recommendation,
                            dimension_scores=result.dimension_scores or None,
                        ),
                    )
                else:
                    logger.warning(
                        f"[SESSION] Question {question.number} left ungraded: {evaluation.error.message}"
                    )
            except (EmptyResponseError, SessionClosedError):
                raise
            except Exception:
                if runtime.state.phase == SessionPhase.PROCESSING:
                    runtime.state = session.abort_processing(runtime.state)
                raise

            elapsed = (time.perf_counter() - t0) * 1000
            logger.info(f"⏱️ question {question.number} processed: {elapsed:.0f}ms (graded: {evaluation.ok})")

            runtime.state = session.response_processed(runtime.state)
            narration = await self._after_advance(runtime)
            return self._update(
                runtime,
                narration=narration,
                evaluation=evaluation.unwrap_or_fallback(),
                evaluated_question=question.number,
                graded=evaluation.ok,
            )

    async def skip_question(self, session_id: str) -> SessionUpdate:
        """Move on without answering. On the last question this finishes the interview."""
        runtime = self._claim(session_id)
        async with runtime.lock:
            runtime.state = session.advance(runtime.state)
            narration = await self._after_advance(runtime)
            return self._update(runtime, narration=narration)

    async def finish_interview(self, session_id: str) -> SessionUpdate:
        """End the interview early; unanswered questions stay ungraded."""
        runtime = self._claim(session_id)
        async with runtime.lock:
            runtime.state = session.finish_early(runtime.state)
            await self._finish(runtime)
            return self._update(runtime)

    async def _after_advance(self, runtime: SessionRuntime) -> Optional[NarrationAudio]:
        if runtime.state.phase == SessionPhase.FINISHING:
            await self._finish(runtime)
            return None
        return await self._speak(runtime)

    async def _finish(self, runtime: SessionRuntime) -> None:
        state = runtime.state
        await self._persist(
            f"completion of interview {state.interview_id}",
            self.interview_repo.mark_completed(state.interview_id, datetime.now(timezone.utc)),
        )

        if self.compute_results_on_finish and self.results is not None:
            await self._persist(
                f"results of interview {state.interview_id}",
                self.results.compute_and_store(state.interview_id),
            )

        runtime.state = session.mark_finished(runtime.state)
        logger.info(f"[SESSION] {state.session_id} finished (interview {state.interview_id})")

        if self.on_finished is not None:
            try:
                outcome = self.on_finished(runtime.state)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                logger.error(f"[SESSION] on_finished callback failed: {e}")

        self._retire(runtime)


# =============================================================================
# Singleton
# =============================================================================

_orchestrator: Optional[InterviewOrchestrator] = None


async def get_orchestrator() -> InterviewOrchestrator:
    """Get the singleton InterviewOrchestrator instance."""
    global _orchestrator
    if _orchestrator is None:
        from src.database import get_db_pool
        from src.repositories import InterviewRepository, ResultRepository, ResumeRepository

        pool = await get_db_pool()
        interview_repo = InterviewRepository(pool)
        _orchestrator = InterviewOrchestrator(
            interview_repo=interview_repo,
            question_service=QuestionService(resume_repo=ResumeRepository(pool)),
            narration_service=NarrationService(),
            speech_service=SpeechToTextService(),
            storage_service=StorageService(),
            evaluation_service=EvaluationService(),
            results_service=ResultsService(interview_repo, ResultRepository(pool)),
        )
        logger.info("InterviewOrchestrator initialized")
    return _orchestrator
