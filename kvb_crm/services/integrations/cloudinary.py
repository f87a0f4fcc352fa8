"""
Cloudinary upload integration.
Signed uploads over the REST API, so no SDK is needed.

Note: Requires CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET.
"""
import hashlib
import logging
import time
from typing import Dict

import httpx

from kvb_crm.config import settings
from kvb_crm.core.exceptions import ExternalServiceError
from kvb_crm.services.integrations.base import UploadProvider

logger = logging.getLogger(__name__)


class CloudinaryUploadProvider(UploadProvider):
    """Uploads to Cloudinary with resource_type=auto."""

    BASE_URL = "https://api.cloudinary.com/v1_1"

    def __init__(
        self,
        cloud_name: str = None,
        api_key: str = None,
        api_secret: str = None,
        timeout: float = None
    ):
        self.cloud_name = cloud_name or settings.CLOUDINARY_CLOUD_NAME
        self.api_key = api_key or settings.CLOUDINARY_API_KEY
        self.api_secret = api_secret or settings.CLOUDINARY_API_SECRET
        self.timeout = timeout or settings.UPLOAD_TIMEOUT_SECONDS

    def sign(self, params: Dict[str, str]) -> str:
        """Cloudinary signature: sha1 of the sorted params followed by the secret."""
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode("utf-8")).hexdigest()

    def _signed(self, params: Dict[str, str]) -> Dict[str, str]:
        params = dict(params, timestamp=str(int(time.time())))
        params["signature"] = self.sign(params)
        params["api_key"] = self.api_key
        return params

    async def upload(
        self,
        content: bytes,
        filename: str,
        folder: str,
        content_type: str = "application/octet-stream"
    ) -> Dict[str, str]:
        data = self._signed({"folder": folder})
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.BASE_URL}/{self.cloud_name}/auto/upload",
                    data=data,
                    files={"file": (filename, content, content_type)}
                )
        except httpx.HTTPError as e:
            logger.error(f"Cloudinary upload of {filename} failed: {e}")
            raise ExternalServiceError("Cloudinary", str(e))

        if response.status_code != 200:
            logger.error(f"Cloudinary error: {response.status_code} - {response.text}")
            raise ExternalServiceError("Cloudinary", f"upload returned {response.status_code}")

        body = response.json()
        return {"url": body["secure_url"], "public_id": body["public_id"]}

    async def delete(self, public_id: str) -> None:
        data = self._signed({"public_id": public_id})
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.BASE_URL}/{self.cloud_name}/image/destroy",
                    data=data
                )
        except httpx.HTTPError as e:
            raise ExternalServiceError("Cloudinary", str(e))

        if response.status_code != 200:
            raise ExternalServiceError("Cloudinary", f"destroy returned {response.status_code}")
