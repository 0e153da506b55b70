"""
In-memory fakes of the repositories and vendor clients used by the tests.
"""
import asyncio
import uuid
from datetime import datetime, timezone

from interview_generator import GeneratedQuestion, GeneratedQuestions
from response_evaluator import EvaluationResult
from src.exceptions import NarrationError, StorageError, TranscriptionError
from src.models import EvaluatedAnswer, InterviewConfig
from src.services.narration_service import NarrationAudio
from src.utils.result import ServiceResult

USER_ID = "11111111-1111-1111-1111-111111111111"

SAMPLE_QUESTIONS = [
    "How would you detect duplicates in a large list?",
    "Explain the difference between a process and a thread.",
    "How would you design a URL shortener?",
    "Tell me about a bug you found hard to fix.",
    "How do you keep a REST API backwards compatible?",
]


# =============================================================================
# Fake repositories
# =============================================================================

class FakeInterviewRepo:
    """In-memory stand-in for InterviewRepository."""

    def __init__(self):
        self.interviews: dict[str, dict] = {}
        self.questions: dict[str, dict[int, dict]] = {}
        self.fail_writes = False

    async def create_interview(self, user_id, config: InterviewConfig):
        interview_id = str(uuid.uuid4())
        self.interviews[interview_id] = {
            "id": interview_id,
            "user_id": str(user_id),
            "job_role": config.job_role,
            "domain": config.domain,
            "experience": config.experience_level,
            "question_type": config.question_type,
            "status": "in_progress",
            "created_at": datetime(2026, 1, 1, 10, 0, tzinfo=timezone.utc),
            "completed_at": None,
        }
        self.questions[interview_id] = {}
        return self.interviews[interview_id]

    async def get_interview(self, interview_id):
        return self.interviews.get(str(interview_id))

    async def list_for_user(self, user_id, limit: int = 50):
        return [
            {**row, "overall_score": None}
            for row in self.interviews.values()
            if row["user_id"] == str(user_id)
        ][:limit]

    async def mark_completed(self, interview_id, completed_at=None):
        interview = self.interviews[str(interview_id)]
        interview["status"] = "completed"
        interview["completed_at"] = datetime(2026, 1, 1, 10, 15, tzinfo=timezone.utc)

    async def add_questions(self, interview_id, texts):
        if self.fail_writes:
            raise ConnectionError("database unavailable")
        rows = []
        for number, text in enumerate(texts, start=1):
            row = {"id": str(uuid.uuid4()), "question_number": number, "question_text": text}
            self.questions[str(interview_id)][number] = dict(row)
            rows.append(row)
        return rows

    async def save_response(self, interview_id, question_number, **channels):
        if self.fail_writes:
            raise ConnectionError("database unavailable")
        self.questions[str(interview_id)][question_number].update(channels)

    async def save_evaluation(self, interview_id, question_number, **evaluation):
        if self.fail_writes:
            raise ConnectionError("database unavailable")
        self.questions[str(interview_id)][question_number].update(evaluation)

    async def get_answers(self, interview_id):
        return [
            EvaluatedAnswer(
                question_number=number,
                question_text=row["question_text"],
                transcribed_text=row.get("transcribed_text"),
                text_content=row.get("text_content"),
                code_content=row.get("code_content"),
                code_language=row.get("code_language"),
                score=row.get("score"),
                feedback=row.get("feedback"),
                strengths=row.get("strengths") or [],
                improvements=row.get("improvements") or [],
                performance_level=row.get("performance_level"),
                recommendation=row.get("recommendation"),
                dimension_scores=row.get("dimension_scores"),
            )
            for number, row in sorted(self.questions.get(str(interview_id), {}).items())
        ]

    def question(self, interview_id, number) -> dict:
        return self.questions[str(interview_id)][number]


class FakeResultRepo:
    def __init__(self):
        self.results = {}

    async def upsert(self, user_id, result):
        self.results[result.interview_id] = (str(user_id), result)


# =============================================================================
# Fake vendor clients
# =============================================================================

class FakeNarration:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.spoken: list[str] = []

    async def synthesize(self, text: str):
        self.spoken.append(text)
        if self.fail:
            return ServiceResult.failure(NarrationError("Text-to-speech API error: 500"))
        return ServiceResult.success(NarrationAudio(audio_content="SUQz"))


class FakeStorage:
    def __init__(self, fail_upload: bool = False):
        self.fail_upload = fail_upload
        self.blobs: dict[str, bytes] = {}
        self.uploaded: list[str] = []
        self.deleted: list[str] = []

    async def upload(self, name: str, data: bytes, content_type: str = "audio/webm") -> str:
        if self.fail_upload:
            raise StorageError("Upload failed with status 500", {"name": name})
        self.blobs[name] = data
        self.uploaded.append(name)
        return f"https://storage.test/audio_files/{name}"

    async def delete(self, name: str) -> None:
        self.blobs.pop(name, None)
        self.deleted.append(name)


class FakeSpeech:
    def __init__(self, transcript: str = "I would use a set", fail: bool = False):
        self.transcript = transcript
        self.fail = fail
        self.urls: list[str] = []

    async def transcribe_url(self, audio_url: str):
        self.urls.append(audio_url)
        if self.fail:
            return ServiceResult.failure(TranscriptionError("ElevenLabs API error: 500"), fallback="")
        return ServiceResult.success(self.transcript)


class FakeEvaluator:
    """Callable used as the evaluator of a real EvaluationService."""

    def __init__(self, score: int = 80, fail: bool = False):
        self.score = score
        self.fail = fail
        self.calls: list[dict] = []

    async def __call__(self, **kwargs) -> EvaluationResult:
        self.calls.append(kwargs)
        if self.fail:
            raise RuntimeError("model overloaded")
        return EvaluationResult(
            score=self.score,
            performance_level="Strong",
            strengths=["Clear structure"],
            improvements=["Mention complexity"],
            feedback="Good answer.",
            recommendation="Hire",
            dimension_scores={"technical_accuracy": float(self.score)},
        )


class FakeGenerator:
    def __init__(self, questions=None, fail: bool = False):
        self.questions = SAMPLE_QUESTIONS if questions is None else questions
        self.fail = fail
        self.calls: list[dict] = []

    async def __call__(self, **kwargs) -> GeneratedQuestions:
        self.calls.append(kwargs)
        if self.fail:
            raise ValueError("No questions generated")
        return GeneratedQuestions(
            questions=[GeneratedQuestion(question=text) for text in self.questions],
            resume_personalized=bool(kwargs.get("resume_summary")),
        )


class SlowCall:
    """An awaitable that blocks until released, to hold a session lock."""

    def __init__(self):
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def wait(self):
        self.started.set()
        await self.release.wait()


class FakeResumeRepo:
    """In-memory stand-in for ResumeRepository."""

    def __init__(self, summary=None):
        self.summary = summary
        self.personal_info = None
        self.items: dict = {}
        self.fail_reads = False

    async def get_summary(self, user_id):
        if self.fail_reads:
            raise ConnectionError("database unavailable")
        if self.summary is None:
            return None
        return {"user_id": str(user_id), "summary_text": self.summary, "updated_at": datetime.now(timezone.utc)}

    async def upsert_summary(self, user_id, summary_text):
        self.summary = summary_text
        return await self.get_summary(user_id)

    async def get_personal_info(self, user_id):
        return self.personal_info

    async def upsert_personal_info(self, user_id, data):
        self.personal_info = dict(data)
        return self.personal_info

    async def list_items(self, user_id, section):
        return self.items.get(section, [])

    async def add_item(self, user_id, section, data):
        row = {"id": str(uuid.uuid4()), **data}
        self.items.setdefault(section, []).append(row)
        return row

    async def update_item(self, user_id, section, item_id, data):
        for row in self.items.get(section, []):
            if row["id"] == str(item_id):
                row.update(data)
                return row
        return None

    async def delete_item(self, user_id, section, item_id):
        rows = self.items.get(section, [])
        remaining = [row for row in rows if row["id"] != str(item_id)]
        self.items[section] = remaining
        return len(remaining) != len(rows)
