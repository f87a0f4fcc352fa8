"""
Base interfaces for integration providers.
Abstract base classes for third-party service integrations.
"""
from abc import ABC, abstractmethod
from typing import Dict


class UploadProvider(ABC):
    """Base interface for file hosts (Cloudinary, in-memory)."""

    @abstractmethod
    async def upload(
        self,
        content: bytes,
        filename: str,
        folder: str,
        content_type: str = "application/octet-stream"
    ) -> Dict[str, str]:
        """
        Store a file.

        Returns:
            {"url": str, "public_id": str}

        Raises:
            ExternalServiceError: the host rejected the file or did not answer
        """
        pass

    @abstractmethod
    async def delete(self, public_id: str) -> None:
        """Remove a stored file."""
        pass
