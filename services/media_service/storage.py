"""Supabase Storage wrapper for user uploads.

Clients upload directly to storage with a signed URL; the API only hands out
URLs and never proxies file bytes.
"""

import re
import uuid
from typing import Any, Optional

from libs.common.config import Settings, get_settings
from libs.common.errors import UpstreamFailure
from libs.common.logging import get_logger
from supabase import Client, create_client

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(filename: str) -> str:
    name = _UNSAFE_CHARS.sub("-", filename.strip()).strip("-.")
    return name[:100] or "file"


class StorageService:
    def __init__(self, settings: Optional[Settings] = None, client: Any = None):
        self.settings = settings or get_settings()
        self.bucket = self.settings.SUPABASE_STORAGE_BUCKET
        # Created on first use so importing the app needs no network
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = create_client(
                self.settings.SUPABASE_URL, self.settings.SUPABASE_SERVICE_ROLE_KEY
            )
        return self._client

    def object_path(self, owner_id: uuid.UUID, filename: str) -> str:
        return f"uploads/{owner_id}/{uuid.uuid4().hex}-{safe_filename(filename)}"

    def create_upload_url(self, path: str) -> dict:
        try:
            response = self.client.storage.from_(self.bucket).create_signed_upload_url(
                path
            )
        except Exception as e:
            logger.error("Signed upload URL failed for %s: %s", path, e)
            raise UpstreamFailure("Storage is unavailable") from e

        signed_url = response.get("signed_url") or response.get("signedUrl")
        if not signed_url:
            raise UpstreamFailure("Storage returned no upload URL")
        return {"path": path, "upload_url": signed_url, "token": response.get("token")}

    def public_url(self, path: str) -> str:
        try:
            url = self.client.storage.from_(self.bucket).get_public_url(path)
        except Exception as e:
            logger.error("Public URL lookup failed for %s: %s", path, e)
            raise UpstreamFailure("Storage is unavailable") from e
        # Some client versions append an empty query string
        return url.rstrip("?")


_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
