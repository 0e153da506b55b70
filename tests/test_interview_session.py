"""
Tests for the pure interview session state machine.
"""
import pytest

from src.exceptions import (
    InvalidTransitionError,
    SessionFinishedError,
    SubmissionRejectedError,
)
from src.models.enums import SessionPhase
from src.workflows import interview_session as session
from src.workflows.interview_session import AudioClip, Question


def _questions(count: int = 3) -> list[Question]:
    return [Question(id=f"q{n}", number=n, text=f"Question {n}?") for n in range(1, count + 1)]


@pytest.fixture
def fresh(interview_config):
    return session.new_session("session-1", "interview-1", "user-1", interview_config)


@pytest.fixture
def awaiting(fresh):
    return session.narration_finished(session.questions_loaded(fresh, _questions()))


class TestInitialization:

    def test_new_session_starts_initializing(self, fresh):
        assert fresh.phase == SessionPhase.INITIALIZING
        assert fresh.total_questions == 0
        assert fresh.current_question is None

    def test_questions_loaded_starts_speaking_first_question(self, fresh):
        state = session.questions_loaded(fresh, _questions())
        assert state.phase == SessionPhase.SPEAKING
        assert state.is_speaking
        assert state.question_index == 0
        assert state.current_question.number == 1
        assert state.total_questions == 3

    def test_no_questions_fails_initialization(self, fresh):
        state = session.questions_loaded(fresh, [])
        assert state.phase == SessionPhase.FAILED
        assert state.error

    def test_transitions_do_not_mutate_input(self, fresh):
        session.questions_loaded(fresh, _questions())
        assert fresh.phase == SessionPhase.INITIALIZING
        assert fresh.questions == ()


class TestNarration:

    def test_narration_finished_awaits_response(self, fresh):
        state = session.narration_finished(session.questions_loaded(fresh, _questions()))
        assert state.phase == SessionPhase.AWAITING_RESPONSE
        assert not state.is_speaking

    def test_replay_keeps_index_and_pending(self, awaiting):
        drafted = session.set_text(awaiting, "draft")
        state = session.request_replay(drafted)
        assert state.phase == SessionPhase.SPEAKING
        assert state.is_speaking
        assert state.question_index == drafted.question_index
        assert state.pending == drafted.pending

    def test_replay_rejected_while_recording(self, awaiting):
        recording = session.start_recording(awaiting)
        with pytest.raises(InvalidTransitionError):
            session.request_replay(recording)


class TestResponseCapture:

    def test_recording_only_while_awaiting(self, fresh):
        speaking = session.questions_loaded(fresh, _questions())
        with pytest.raises(InvalidTransitionError):
            session.start_recording(speaking)

    def test_double_start_recording_rejected(self, awaiting):
        recording = session.start_recording(awaiting)
        with pytest.raises(InvalidTransitionError):
            session.start_recording(recording)

    def test_stop_recording_attaches_clip(self, awaiting):
        state = session.stop_recording(session.start_recording(awaiting), AudioClip(data=b"abc"))
        assert not state.is_recording
        assert state.pending.has_audio

    def test_empty_clip_keeps_previous_recording(self, awaiting):
        first = session.stop_recording(session.start_recording(awaiting), AudioClip(data=b"abc"))
        second = session.stop_recording(session.start_recording(first), AudioClip(data=b""))
        assert second.pending.audio_clip.data == b"abc"

    def test_stop_without_recording_rejected(self, awaiting):
        with pytest.raises(InvalidTransitionError):
            session.stop_recording(awaiting, AudioClip(data=b"abc"))

    def test_typing_allowed_while_speaking(self, fresh):
        speaking = session.questions_loaded(fresh, _questions())
        state = session.set_text(speaking, "draft")
        assert state.pending.text_content == "draft"

    def test_set_code_keeps_language(self, awaiting):
        state = session.set_code(awaiting, "print(1)", "python")
        assert state.pending.code_content == "print(1)"
        assert state.pending.code_language == "python"

    def test_clear_response_resets_all_channels(self, awaiting):
        state = session.set_code(session.set_text(awaiting, "text"), "code", "go")
        cleared = session.clear_response(state)
        assert not cleared.pending.has_content()
        assert cleared.pending.code_language == ""


class TestSubmission:

    def test_cannot_submit_without_content(self, awaiting):
        assert not session.can_submit(awaiting)
        with pytest.raises(SubmissionRejectedError):
            session.begin_processing(awaiting)

    def test_whitespace_only_text_is_empty(self, awaiting):
        state = session.set_text(awaiting, "   \n ")
        assert not session.can_submit(state)

    def test_cannot_submit_while_speaking(self, fresh):
        speaking = session.set_text(session.questions_loaded(fresh, _questions()), "answer")
        assert session.submission_blocker(speaking) is not None

    def test_cannot_submit_while_recording(self, awaiting):
        state = session.start_recording(session.set_text(awaiting, "answer"))
        with pytest.raises(SubmissionRejectedError):
            session.begin_processing(state)

    def test_begin_processing(self, awaiting):
        state = session.begin_processing(session.set_text(awaiting, "answer"))
        assert state.phase == SessionPhase.PROCESSING

    def test_abort_processing_keeps_pending(self, awaiting):
        processing = session.begin_processing(session.set_text(awaiting, "answer"))
        state = session.abort_processing(processing)
        assert state.phase == SessionPhase.AWAITING_RESPONSE
        assert state.pending.text_content == "answer"


class TestCombinedResponse:

    def test_text_only(self):
        assert session.build_combined_response(text="I would use a hash map") == "Text: I would use a hash map"

    def test_all_channels_in_order(self):
        combined = session.build_combined_response(
            transcript="use a set", text="O(n) time", code="seen = set()", language="python",
        )
        assert combined == "Speech: use a set\n\nText: O(n) time\n\nCode (python):\nseen = set()"

    def test_code_without_language(self):
        assert session.build_combined_response(code="x = 1") == "Code:\nx = 1"

    def test_all_empty(self):
        assert session.build_combined_response("  ", "", "\n") == ""


class TestAdvancing:

    def test_processed_moves_to_next_question(self, awaiting):
        processing = session.begin_processing(session.set_text(awaiting, "answer"))
        state = session.response_processed(processing)
        assert state.phase == SessionPhase.SPEAKING
        assert state.question_index == 1
        assert not state.pending.has_content()

    def test_last_question_moves_to_finishing(self, fresh):
        state = session.narration_finished(session.questions_loaded(fresh, _questions(1)))
        state = session.response_processed(session.begin_processing(session.set_text(state, "answer")))
        assert state.phase == SessionPhase.FINISHING
        assert session.mark_finished(state).phase == SessionPhase.FINISHED

    def test_skip_from_awaiting(self, awaiting):
        state = session.advance(session.set_text(awaiting, "unsent"))
        assert state.question_index == 1
        assert state.pending.text_content == ""

    def test_finish_early(self, awaiting):
        state = session.finish_early(awaiting)
        assert state.phase == SessionPhase.FINISHING
        assert state.question_index == 0

    def test_finish_early_while_speaking(self, fresh):
        speaking = session.set_text(session.questions_loaded(fresh, _questions()), "draft")
        state = session.finish_early(speaking)
        assert state.phase == SessionPhase.FINISHING
        assert not state.is_speaking
        assert not state.pending.has_content()

    def test_finish_early_rejected_while_recording(self, awaiting):
        with pytest.raises(InvalidTransitionError):
            session.finish_early(session.start_recording(awaiting))

    def test_finished_session_rejects_actions(self, awaiting):
        finished = session.mark_finished(session.finish_early(awaiting))
        with pytest.raises(SessionFinishedError):
            session.set_text(finished, "late")
        with pytest.raises(SessionFinishedError):
            session.begin_processing(finished)
        with pytest.raises(SessionFinishedError):
            session.advance(finished)
