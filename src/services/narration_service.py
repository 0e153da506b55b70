"""
Question narration through Google Cloud Text-to-Speech.

Narration is best effort: on any failure the ServiceResult carries no audio
and the session shows the question as text only.
"""
import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Optional
import httpx

from src.config import GOOGLE_TTS_API_KEY, GOOGLE_TTS_URL, TTS_LANGUAGE_CODE, TTS_VOICE
from src.exceptions import NarrationError
from src.utils.result import ServiceResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NarrationAudio:
    """Synthesized speech, base64 encoded for the browser."""
    audio_content: str
    content_type: str = "audio/mpeg"


@dataclass
class NarrationConfig:
    api_key: str
    url: str
    language_code: str
    voice: str

    @classmethod
    def from_env(cls) -> "NarrationConfig":
        if not GOOGLE_TTS_API_KEY:
            logger.warning("GOOGLE_TTS_API_KEY not set, questions will be shown as text only")
        return cls(
            api_key=GOOGLE_TTS_API_KEY,
            url=GOOGLE_TTS_URL,
            language_code=TTS_LANGUAGE_CODE,
            voice=TTS_VOICE,
        )


class NarrationService:
    """Convert question text to speech."""

    def __init__(
        self,
        config: Optional[NarrationConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or NarrationConfig.from_env()
        self._transport = transport

    async def synthesize(self, text: str) -> ServiceResult[NarrationAudio]:
        if not text.strip():
            return ServiceResult.failure(NarrationError("Text is required"))
        if not self.config.api_key:
            return ServiceResult.failure(NarrationError("Text-to-speech is not configured"))

        payload = {
            "input": {"text": text},
            "voice": {"languageCode": self.config.language_code, "name": self.config.voice},
            "audioConfig": {"audioEncoding": "MP3"},
        }
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=30.0) as client:
                response = await client.post(
                    self.config.url,
                    params={"key": self.config.api_key},
                    json=payload,
                )
        except httpx.HTTPError as e:
            logger.error(f"[TTS] Request failed: {e}")
            return ServiceResult.failure(NarrationError(f"Text-to-speech request failed: {e}"))

        if response.status_code != 200:
            logger.error(f"[TTS] Google TTS error: {response.status_code} - {response.text}")
            return ServiceResult.failure(NarrationError(f"Text-to-speech API error: {response.status_code}"))

        try:
            audio_content = response.json().get("audioContent") or ""
            base64.b64decode(audio_content, validate=True)
        except (ValueError, binascii.Error):
            return ServiceResult.failure(NarrationError("Text-to-speech returned invalid audio"))

        if not audio_content:
            return ServiceResult.failure(NarrationError("Text-to-speech returned no audio"))

        logger.info(f"[TTS] Synthesized {len(text)} chars")
        return ServiceResult.success(NarrationAudio(audio_content=audio_content))
