"""
Supabase Storage service.

Recorded answers are uploaded to a public bucket so the speech-to-text
service can fetch them by URL, and deleted once transcription is done.
"""
import logging
from dataclasses import dataclass
from typing import Optional
import httpx

from src.config import SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, AUDIO_BUCKET
from src.exceptions import StorageError

logger = logging.getLogger(__name__)


@dataclass
class StorageConfig:
    """Supabase Storage configuration."""
    url: str
    service_role_key: str
    bucket: str

    @classmethod
    def from_env(cls) -> "StorageConfig":
        if not (SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY):
            logger.warning("Storage configuration incomplete. Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY")
        return cls(
            url=SUPABASE_URL.rstrip("/"),
            service_role_key=SUPABASE_SERVICE_ROLE_KEY,
            bucket=AUDIO_BUCKET,
        )


class StorageService:
    """Upload, address and delete blobs in one Supabase Storage bucket."""

    def __init__(
        self,
        config: Optional[StorageConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or StorageConfig.from_env()
        self._transport = transport

    def _get_headers(self) -> dict[str, str]:
        return {
            "apikey": self.config.service_role_key,
            "Authorization": f"Bearer {self.config.service_role_key}",
        }

    def public_url(self, name: str) -> str:
        return f"{self.config.url}/storage/v1/object/public/{self.config.bucket}/{name}"

    async def upload(self, name: str, data: bytes, content_type: str = "audio/webm") -> str:
        """
        Upload a blob and return its public URL.

        Raises:
            StorageError: If the upload fails
        """
        url = f"{self.config.url}/storage/v1/object/{self.config.bucket}/{name}"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=30.0) as client:
                response = await client.post(
                    url,
                    headers={
                        **self._get_headers(),
                        "Content-Type": content_type,
                        "x-upsert": "true",
                    },
                    content=data,
                )
        except httpx.HTTPError as e:
            raise StorageError(f"Upload failed: {e}", {"name": name}) from e

        if response.status_code not in (200, 201):
            logger.error(f"[STORAGE] Upload failed: {response.status_code} - {response.text}")
            raise StorageError(f"Upload failed with status {response.status_code}", {"name": name})

        logger.info(f"[STORAGE] Uploaded {name} ({len(data)} bytes)")
        return self.public_url(name)

    async def delete(self, name: str) -> None:
        """
        Delete a blob. Deleting a missing blob is not an error.

        Raises:
            StorageError: If the request fails
        """
        url = f"{self.config.url}/storage/v1/object/{self.config.bucket}"
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=30.0) as client:
                response = await client.request(
                    "DELETE",
                    url,
                    headers=self._get_headers(),
                    json={"prefixes": [name]},
                )
        except httpx.HTTPError as e:
            raise StorageError(f"Delete failed: {e}", {"name": name}) from e

        if response.status_code not in (200, 204, 404):
            logger.error(f"[STORAGE] Delete failed: {response.status_code} - {response.text}")
            raise StorageError(f"Delete failed with status {response.status_code}", {"name": name})

        logger.info(f"[STORAGE] Deleted {name}")
