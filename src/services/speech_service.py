"""
Speech-to-text service backed by ElevenLabs.

Failures never raise: the caller gets a ServiceResult whose fallback is an
empty transcript, so the text and code channels of an answer can still be
graded when transcription is unavailable.
"""
import logging
from dataclasses import dataclass
from typing import Optional
import httpx

from src.config import ELEVENLABS_API_KEY, ELEVENLABS_STT_MODEL, ELEVENLABS_STT_URL
from src.exceptions import TranscriptionError
from src.utils.result import ServiceResult

logger = logging.getLogger(__name__)


@dataclass
class SpeechConfig:
    api_key: str
    model_id: str
    url: str

    @classmethod
    def from_env(cls) -> "SpeechConfig":
        if not ELEVENLABS_API_KEY:
            logger.warning("ELEVENLABS_API_KEY not set, transcription will fail")
        return cls(api_key=ELEVENLABS_API_KEY, model_id=ELEVENLABS_STT_MODEL, url=ELEVENLABS_STT_URL)


class SpeechToTextService:
    """Transcribe recorded answers."""

    def __init__(
        self,
        config: Optional[SpeechConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or SpeechConfig.from_env()
        self._transport = transport

    async def transcribe_url(self, audio_url: str) -> ServiceResult[str]:
        """Fetch audio from a URL and transcribe it."""
        if not audio_url:
            return ServiceResult.failure(TranscriptionError("Audio URL is required"), fallback="")

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=60.0) as client:
                audio_response = await client.get(audio_url)
                if audio_response.status_code != 200:
                    logger.error(f"[STT] Failed to fetch audio: {audio_response.status_code}")
                    return ServiceResult.failure(
                        TranscriptionError(f"Failed to fetch audio: {audio_response.status_code}"),
                        fallback="",
                    )
                content_type = audio_response.headers.get("content-type", "audio/webm")
                return await self._transcribe(client, audio_response.content, content_type)
        except httpx.HTTPError as e:
            logger.error(f"[STT] Transcription request failed: {e}")
            return ServiceResult.failure(TranscriptionError(f"Transcription request failed: {e}"), fallback="")

    async def _transcribe(self, client: httpx.AsyncClient, data: bytes, content_type: str) -> ServiceResult[str]:
        response = await client.post(
            self.config.url,
            headers={"xi-api-key": self.config.api_key},
            files={"file": ("recording.webm", data, content_type)},
            data={"model_id": self.config.model_id},
        )

        if response.status_code != 200:
            logger.error(f"[STT] ElevenLabs error: {response.status_code} - {response.text}")
            return ServiceResult.failure(
                TranscriptionError(f"ElevenLabs API error: {response.status_code}"),
                fallback="",
            )

        try:
            text = (response.json().get("text") or "").strip()
        except ValueError:
            return ServiceResult.failure(TranscriptionError("Invalid transcription response"), fallback="")
        logger.info(f"[STT] Transcribed {len(data)} bytes -> {len(text)} chars")
        return ServiceResult.success(text)
