"""
Tests for the interview session orchestrator.

Each test drives a live session end to end against the in-memory fakes
from tests/fakes.py.
"""
import asyncio
import re

import pytest

from src.exceptions import (
    EmptyResponseError,
    InvalidTransitionError,
    MicrophonePermissionError,
    QuestionGenerationError,
    SessionBusyError,
    SessionClosedError,
    SessionFinishedError,
    SessionNotFoundError,
    SubmissionRejectedError,
)
from src.models.enums import SessionPhase
from src.services.evaluation_service import EvaluationService

from tests.fakes import USER_ID, FakeEvaluator, SlowCall


async def _ready_session(orchestrator, config) -> str:
    """Start a session and finish narrating the first question."""
    update = await orchestrator.start_session(USER_ID, config)
    await orchestrator.playback_finished(update.state.session_id)
    return update.state.session_id


class SlowEvaluator(FakeEvaluator):
    def __init__(self, gate: SlowCall):
        super().__init__()
        self.gate = gate

    async def __call__(self, **kwargs):
        await self.gate.wait()
        return await super().__call__(**kwargs)


class TestStartSession:

    @pytest.mark.asyncio
    async def test_start_generates_stores_and_narrates(self, orchestrator, interview_repo, narration, interview_config):
        update = await orchestrator.start_session(USER_ID, interview_config)

        state = update.state
        assert state.phase == SessionPhase.SPEAKING
        assert state.total_questions == 5
        assert state.current_question.number == 1
        assert update.narration.audio_content == "SUQz"
        assert narration.spoken == [state.current_question.text]
        assert len(interview_repo.questions[state.interview_id]) == 5
        assert orchestrator.active_sessions == 1

    @pytest.mark.asyncio
    async def test_narration_failure_shows_question_as_text(self, orchestrator, narration, interview_config):
        narration.fail = True
        update = await orchestrator.start_session(USER_ID, interview_config)

        assert update.narration is None
        assert update.state.phase == SessionPhase.AWAITING_RESPONSE
        assert not update.state.is_speaking

    @pytest.mark.asyncio
    async def test_generation_failure_keeps_failed_session(self, orchestrator, generator, interview_config):
        generator.fail = True
        with pytest.raises(QuestionGenerationError) as exc_info:
            await orchestrator.start_session(USER_ID, interview_config)

        session_id = exc_info.value.details["session_id"]
        state = orchestrator.get_session(session_id).state
        assert state.phase == SessionPhase.FAILED
        assert state.error
        assert orchestrator.active_sessions == 0

    @pytest.mark.asyncio
    async def test_unknown_session(self, orchestrator):
        with pytest.raises(SessionNotFoundError):
            orchestrator.get_session("does-not-exist")


class TestSubmission:

    @pytest.mark.asyncio
    async def test_text_answer_is_evaluated_and_stored(self, orchestrator, interview_repo, evaluator, interview_config):
        session_id = await _ready_session(orchestrator, interview_config)
        await orchestrator.update_text(session_id, "I would use a hash map")

        update = await orchestrator.submit_response(session_id)

        assert evaluator.calls[0]["answer"] == "Text: I would use a hash map"
        assert evaluator.calls[0]["job_role"] == "Backend Engineer"
        assert update.graded
        assert update.evaluated_question == 1
        assert update.evaluation.score == 80

        stored = interview_repo.question(update.state.interview_id, 1)
        assert stored["text_content"] == "I would use a hash map"
        assert stored["score"] == 80
        assert stored["recommendation"] == "Hire"

        assert update.state.phase == SessionPhase.SPEAKING
        assert update.state.question_index == 1
        assert not update.state.pending.has_content()

    @pytest.mark.asyncio
    async def test_submit_without_content_rejected(self, orchestrator, interview_config):
        session_id = await _ready_session(orchestrator, interview_config)
        with pytest.raises(SubmissionRejectedError):
            await orchestrator.submit_response(session_id)
        assert orchestrator.get_session(session_id).state.phase == SessionPhase.AWAITING_RESPONSE

    @pytest.mark.asyncio
    async def test_evaluation_failure_leaves_question_ungraded(
        self, orchestrator, interview_repo, evaluator, interview_config
    ):
        evaluator.fail = True
        session_id = await _ready_session(orchestrator, interview_config)
        await orchestrator.update_code(session_id, "def f(): pass", "python")

        update = await orchestrator.submit_response(session_id)

        assert not update.graded
        assert update.evaluation.score == 60
        assert update.evaluation.performance_level == "Satisfactory"
        stored = interview_repo.question(update.state.interview_id, 1)
        assert stored["code_content"] == "def f(): pass"
        assert "score" not in stored
        assert update.state.question_index == 1

    @pytest.mark.asyncio
    async def test_database_failure_does_not_stop_session(self, orchestrator, interview_repo, interview_config):
        session_id = await _ready_session(orchestrator, interview_config)
        interview_repo.fail_writes = True
        await orchestrator.update_text(session_id, "answer")

        update = await orchestrator.submit_response(session_id)

        assert update.graded
        assert update.state.question_index == 1


class TestAudioAnswers:

    @pytest.mark.asyncio
    async def test_recording_is_uploaded_transcribed_and_deleted(
        self, orchestrator, storage, speech, evaluator, interview_config
    ):
        session_id = await _ready_session(orchestrator, interview_config)
        await orchestrator.start_recording(session_id)
        await orchestrator.stop_recording(session_id, b"webm-bytes", "audio/webm;codecs=opus")
        await orchestrator.update_text(session_id, "O(n) time")

        update = await orchestrator.submit_response(session_id)

        assert len(storage.uploaded) == 1
        name = storage.uploaded[0]
        assert re.fullmatch(rf"{USER_ID}/{update.state.interview_id}/question_1_\d+\.webm", name)
        assert storage.deleted == [name]
        assert storage.blobs == {}
        assert speech.urls == [f"https://storage.test/audio_files/{name}"]
        assert evaluator.calls[0]["answer"] == "Speech: I would use a set\n\nText: O(n) time"

    @pytest.mark.asyncio
    async def test_blob_deleted_when_transcription_fails(self, orchestrator, storage, speech, interview_config):
        speech.fail = True
        session_id = await _ready_session(orchestrator, interview_config)
        await orchestrator.start_recording(session_id)
        await orchestrator.stop_recording(session_id, b"webm-bytes")

        with pytest.raises(EmptyResponseError):
            await orchestrator.submit_response(session_id)

        assert storage.deleted == storage.uploaded
        assert storage.blobs == {}
        state = orchestrator.get_session(session_id).state
        assert state.phase == SessionPhase.AWAITING_RESPONSE
        assert state.pending.has_audio

    @pytest.mark.asyncio
    async def test_upload_failure_falls_back_to_typed_answer(self, orchestrator, storage, evaluator, interview_config):
        storage.fail_upload = True
        session_id = await _ready_session(orchestrator, interview_config)
        await orchestrator.start_recording(session_id)
        await orchestrator.stop_recording(session_id, b"webm-bytes")
        await orchestrator.update_text(session_id, "typed answer")

        update = await orchestrator.submit_response(session_id)

        assert update.graded
        assert evaluator.calls[0]["answer"] == "Text: typed answer"

    @pytest.mark.asyncio
    async def test_transcription_failure_still_grades_text_and_code(
        self, orchestrator, storage, speech, evaluator, interview_config
    ):
        speech.fail = True
        session_id = await _ready_session(orchestrator, interview_config)
        await orchestrator.start_recording(session_id)
        await orchestrator.stop_recording(session_id, b"webm-bytes")
        await orchestrator.update_text(session_id, "O(n) time")
        await orchestrator.update_code(session_id, "seen = set()", "python")

        update = await orchestrator.submit_response(session_id)

        assert len(speech.urls) == 1
        assert storage.deleted == storage.uploaded
        assert storage.blobs == {}
        assert update.graded
        assert evaluator.calls[0]["answer"] == "Text: O(n) time\n\nCode (python):\nseen = set()"
        assert update.state.question_index == 1

    @pytest.mark.asyncio
    async def test_microphone_denied(self, orchestrator, interview_config):
        session_id = await _ready_session(orchestrator, interview_config)
        with pytest.raises(MicrophonePermissionError):
            await orchestrator.start_recording(session_id, microphone_granted=False)
        state = orchestrator.get_session(session_id).state
        assert not state.is_recording
        assert not state.pending.has_content()


class TestFinishing:

    @pytest.mark.asyncio
    async def test_full_interview_computes_results(
        self, orchestrator, interview_repo, result_repo, interview_config
    ):
        finished = []
        orchestrator.on_finished = finished.append
        session_id = await _ready_session(orchestrator, interview_config)

        for number in range(1, 6):
            await orchestrator.update_text(session_id, f"answer {number}")
            update = await orchestrator.submit_response(session_id)
            if number < 5:
                assert update.narration is not None
                await orchestrator.playback_finished(session_id)

        assert update.state.phase == SessionPhase.FINISHED
        assert update.narration is None
        interview = interview_repo.interviews[update.state.interview_id]
        assert interview["status"] == "completed"

        user_id, result = result_repo.results[update.state.interview_id]
        assert user_id == USER_ID
        assert result.overall_score == 80
        assert result.questions_answered == 5
        assert result.recommendation == "Hire"
        assert result.duration_seconds == 900
        assert [state.session_id for state in finished] == [session_id]

    @pytest.mark.asyncio
    async def test_finish_early_grades_only_answered(self, orchestrator, result_repo, interview_config):
        session_id = await _ready_session(orchestrator, interview_config)
        await orchestrator.update_text(session_id, "answer")
        await orchestrator.submit_response(session_id)

        update = await orchestrator.finish_interview(session_id)

        assert update.state.phase == SessionPhase.FINISHED
        _, result = result_repo.results[update.state.interview_id]
        assert result.total_questions == 5
        assert result.questions_answered == 1
        assert result.overall_score == 80

    @pytest.mark.asyncio
    async def test_skipping_last_question_finishes(self, orchestrator, interview_config):
        session_id = await _ready_session(orchestrator, interview_config)
        for _ in range(4):
            await orchestrator.skip_question(session_id)
            await orchestrator.playback_finished(session_id)

        update = await orchestrator.skip_question(session_id)

        assert update.state.phase == SessionPhase.FINISHED

    @pytest.mark.asyncio
    async def test_actions_after_finish_rejected(self, orchestrator, interview_config):
        session_id = await _ready_session(orchestrator, interview_config)
        await orchestrator.finish_interview(session_id)

        with pytest.raises(SessionFinishedError):
            await orchestrator.update_text(session_id, "too late")

    @pytest.mark.asyncio
    async def test_async_finished_callback(self, orchestrator, interview_config):
        seen = []

        async def notify(state):
            seen.append(state.phase)

        orchestrator.on_finished = notify
        session_id = await _ready_session(orchestrator, interview_config)
        await orchestrator.finish_interview(session_id)

        assert seen == [SessionPhase.FINISHED]


class TestSessionRegistry:

    @pytest.mark.asyncio
    async def test_finished_sessions_leave_the_registry(self, orchestrator, interview_config):
        session_ids = []
        for _ in range(3):
            session_id = await _ready_session(orchestrator, interview_config)
            await orchestrator.finish_interview(session_id)
            session_ids.append(session_id)

        assert orchestrator.active_sessions == 0
        for session_id in session_ids:
            assert orchestrator.get_session(session_id).state.phase == SessionPhase.FINISHED

    @pytest.mark.asyncio
    async def test_full_run_releases_session(self, orchestrator, interview_config):
        session_id = await _ready_session(orchestrator, interview_config)
        for number in range(1, 6):
            await orchestrator.update_text(session_id, f"answer {number}")
            await orchestrator.submit_response(session_id)
            if number < 5:
                await orchestrator.playback_finished(session_id)

        assert orchestrator.active_sessions == 0
        assert orchestrator.get_session(session_id).state.phase == SessionPhase.FINISHED

    @pytest.mark.asyncio
    async def test_database_failure_at_start_releases_session(self, orchestrator, interview_repo, interview_config):
        interview_repo.fail_writes = True

        with pytest.raises(ConnectionError):
            await orchestrator.start_session(USER_ID, interview_config)

        assert orchestrator.active_sessions == 0

    @pytest.mark.asyncio
    async def test_actions_on_failed_session_conflict(self, orchestrator, generator, interview_config):
        generator.fail = True
        with pytest.raises(QuestionGenerationError) as exc_info:
            await orchestrator.start_session(USER_ID, interview_config)

        with pytest.raises(InvalidTransitionError) as conflict:
            await orchestrator.update_text(exc_info.value.details["session_id"], "hello")
        assert conflict.value.phase == "failed"

    @pytest.mark.asyncio
    async def test_close_after_finish(self, orchestrator, interview_config):
        session_id = await _ready_session(orchestrator, interview_config)
        await orchestrator.finish_interview(session_id)

        assert await orchestrator.close_session(session_id) == 0
        with pytest.raises(SessionNotFoundError):
            orchestrator.get_session(session_id)

    @pytest.mark.asyncio
    async def test_ended_history_is_bounded(self, orchestrator, interview_config):
        orchestrator.ended_sessions_kept = 2
        session_ids = []
        for _ in range(3):
            session_id = await _ready_session(orchestrator, interview_config)
            await orchestrator.finish_interview(session_id)
            session_ids.append(session_id)

        with pytest.raises(SessionNotFoundError):
            orchestrator.get_session(session_ids[0])
        assert orchestrator.get_session(session_ids[2]).state.phase == SessionPhase.FINISHED


class TestConcurrency:

    @pytest.mark.asyncio
    async def test_second_action_rejected_while_busy(self, orchestrator, interview_config):
        gate = SlowCall()
        orchestrator.evaluation = EvaluationService(evaluator=SlowEvaluator(gate))
        session_id = await _ready_session(orchestrator, interview_config)
        await orchestrator.update_text(session_id, "answer")

        submit = asyncio.create_task(orchestrator.submit_response(session_id))
        await gate.started.wait()

        with pytest.raises(SessionBusyError):
            await orchestrator.update_text(session_id, "edited")

        gate.release.set()
        update = await submit
        assert update.graded
        assert update.state.question_index == 1

    @pytest.mark.asyncio
    async def test_close_cancels_in_flight_calls(self, orchestrator, interview_repo, interview_config):
        gate = SlowCall()
        orchestrator.evaluation = EvaluationService(evaluator=SlowEvaluator(gate))
        session_id = await _ready_session(orchestrator, interview_config)
        await orchestrator.update_text(session_id, "answer")

        submit = asyncio.create_task(orchestrator.submit_response(session_id))
        await gate.started.wait()

        cancelled = await orchestrator.close_session(session_id)

        assert cancelled == 1
        with pytest.raises(SessionClosedError):
            await submit
        with pytest.raises(SessionNotFoundError):
            orchestrator.get_session(session_id)
        assert orchestrator.active_sessions == 0

    @pytest.mark.asyncio
    async def test_sessions_are_independent(self, orchestrator, interview_config):
        first = await _ready_session(orchestrator, interview_config)
        second = await _ready_session(orchestrator, interview_config)

        await orchestrator.update_text(first, "answer")
        await orchestrator.submit_response(first)

        assert orchestrator.get_session(first).state.question_index == 1
        assert orchestrator.get_session(second).state.question_index == 0
