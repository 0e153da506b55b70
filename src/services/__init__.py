"""
Service layer: vendor clients and business logic on top of the repositories.
"""
from .evaluation_service import EvaluationService
from .narration_service import NarrationService, NarrationAudio
from .question_service import QuestionService
from .results_service import ResultsService, aggregate
from .resume_service import ResumeService
from .speech_service import SpeechToTextService
from .storage_service import StorageService

__all__ = [
    "EvaluationService",
    "NarrationService",
    "NarrationAudio",
    "QuestionService",
    "ResultsService",
    "aggregate",
    "ResumeService",
    "SpeechToTextService",
    "StorageService",
]
