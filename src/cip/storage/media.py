"""Media uploads to Supabase Storage (private buckets, signed URLs)."""

from __future__ import annotations

import secrets
import string
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from supabase import Client, ClientOptions, create_client

from cip.config import Settings
from cip.errors import EnrichmentFailure
from cip.utils.logging import get_logger
from cip.utils.text import decode_base64_payload


logger = get_logger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


class MediaKind(str, Enum):
    AUDIO = "audio"
    IMAGE = "image"


_CONTENT_TYPES = {
    MediaKind.AUDIO: ("audio/webm", "webm"),
    MediaKind.IMAGE: ("image/jpeg", "jpg"),
}


@dataclass(frozen=True)
class StoredMedia:
    """Outcome of one upload: a signed URL or a failure reason."""

    kind: MediaKind
    url: Optional[str] = None
    object_name: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.url is not None


def media_object_name(extension: str, now_ms: Optional[int] = None) -> str:
    """Collision-resistant object name: ``<epoch ms>-<6 base36 chars>.<ext>``."""
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"{timestamp}-{suffix}.{extension}"


class MediaStore:
    """Upload base64 media and hand back time-bounded signed URLs."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[Client] = None,
    ) -> None:
        self.settings = settings or Settings()
        self._client = client

    def store(self, kind: MediaKind, encoded: str) -> StoredMedia:
        """Upload one media payload. Never raises."""
        try:
            return self._store(kind, encoded)
        except Exception as exc:
            logger.warning("media.store.failed kind=%s error=%s", kind.value, exc)
            return StoredMedia(kind=kind, error=str(exc))

    def _store(self, kind: MediaKind, encoded: str) -> StoredMedia:
        if not self.settings.storage_configured:
            raise EnrichmentFailure(
                "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set for uploads"
            )

        data = decode_base64_payload(encoded)
        content_type, extension = _CONTENT_TYPES[kind]
        bucket = self._bucket_for(kind)
        name = media_object_name(extension)

        url = self._upload_and_sign(bucket, name, data, content_type)

        logger.info("media.stored kind=%s object=%s bytes=%s", kind.value, name, len(data))
        return StoredMedia(kind=kind, url=url, object_name=f"{bucket}/{name}")

    def _upload_and_sign(self, bucket: str, name: str, data: bytes, content_type: str) -> str:
        objects = self._storage_client().storage.from_(bucket)
        objects.upload(
            path=name,
            file=data,
            file_options={"content-type": content_type, "upsert": "false"},
        )
        signed = objects.create_signed_url(name, self.settings.media_signed_url_ttl_seconds)
        url = signed.get("signedURL") or signed.get("signedUrl")
        if not url:
            raise EnrichmentFailure("storage did not return a signed URL")
        return url

    def _storage_client(self) -> Client:
        if self._client is None:
            self._client = create_client(
                self.settings.supabase_url,
                self.settings.supabase_service_role_key,
                options=ClientOptions(
                    storage_client_timeout=self.settings.storage_timeout_seconds
                ),
            )
        return self._client

    def _bucket_for(self, kind: MediaKind) -> str:
        if kind is MediaKind.AUDIO:
            return self.settings.storage_audio_bucket
        return self.settings.storage_image_bucket
