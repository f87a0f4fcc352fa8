"""
Upload service - stores task, enquiry and product files on the configured host.
Currently supports: Mock (development) and Cloudinary (production).
"""
import logging
import uuid
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import UploadFile

from kvb_crm.config import settings
from kvb_crm.core.exceptions import ExternalServiceError
from kvb_crm.services.integrations.base import UploadProvider
from kvb_crm.services.integrations.cloudinary import CloudinaryUploadProvider

logger = logging.getLogger(__name__)


class MockUploadProvider(UploadProvider):
    """
    In-process file host for development and tests.
    `fail_on` makes the n-th upload (1-based) fail.
    """

    def __init__(self, fail_on: Optional[int] = None):
        self.fail_on = fail_on
        self.files: Dict[str, dict] = {}
        self.deleted: List[str] = []
        self.upload_count = 0

    async def upload(
        self,
        content: bytes,
        filename: str,
        folder: str,
        content_type: str = "application/octet-stream"
    ) -> Dict[str, str]:
        self.upload_count += 1
        if self.fail_on is not None and self.upload_count == self.fail_on:
            raise ExternalServiceError("Upload", f"mock failure on {filename}")

        public_id = f"{folder}/{uuid.uuid4().hex}"
        self.files[public_id] = {"filename": filename, "size": len(content), "content_type": content_type}
        return {"url": f"https://files.local/{public_id}/{filename}", "public_id": public_id}

    async def delete(self, public_id: str) -> None:
        self.files.pop(public_id, None)
        self.deleted.append(public_id)


class UploadService:
    """Uploads a batch of request files as one unit."""

    def __init__(self, provider: Optional[UploadProvider] = None):
        self.provider = provider or get_upload_provider()

    async def upload_one(self, file: UploadFile, folder: str) -> dict:
        content = await file.read()
        stored = await self.provider.upload(
            content,
            file.filename or "upload",
            folder,
            file.content_type or "application/octet-stream"
        )
        return {
            "filename": file.filename or "upload",
            "url": stored["url"],
            "public_id": stored["public_id"],
            "uploaded_at": datetime.utcnow().isoformat(),
        }

    async def upload_many(self, files: List[UploadFile], folder: str) -> List[dict]:
        """
        Upload every file or none.
        When one upload fails the files already stored are removed and the
        error is re-raised.
        """
        uploaded: List[dict] = []
        try:
            for file in files:
                uploaded.append(await self.upload_one(file, folder))
        except ExternalServiceError:
            await self._discard(uploaded)
            raise
        return uploaded

    async def _discard(self, uploaded: List[dict]) -> None:
        for item in uploaded:
            try:
                await self.provider.delete(item["public_id"])
            except ExternalServiceError as e:
                logger.warning(f"Could not remove orphaned upload {item['public_id']}: {e.message}")


# =============================================================================
# UPLOAD PROVIDER SINGLETON
# =============================================================================

_upload_provider: Optional[UploadProvider] = None


def get_upload_provider() -> UploadProvider:
    """Get the upload provider instance."""
    global _upload_provider

    if _upload_provider is None:
        if settings.CLOUDINARY_CLOUD_NAME:
            logger.info("Using Cloudinary upload provider")
            _upload_provider = CloudinaryUploadProvider()
        else:
            logger.info("Using Mock upload provider (files kept in memory)")
            _upload_provider = MockUploadProvider()

    return _upload_provider


def set_upload_provider(provider: Optional[UploadProvider]) -> None:
    """Set custom upload provider (for testing)."""
    global _upload_provider
    _upload_provider = provider
