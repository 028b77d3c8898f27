from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class StoredObject(BaseModel):
    """A single blob as reported by a storage backend listing."""

    key: str
    size: int
    last_modified: datetime

    @property
    def name(self) -> str:
        return self.key.rsplit("/", 1)[-1]


class BaseStorage(ABC):
    """Base interface for storage providers."""

    provider_name: str = "base"

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> StoredObject:
        """
        Write bytes under a key, replacing any existing blob.

        Args:
            key: Storage key/path
            data: Raw content
            content_type: Optional MIME type

        Returns:
            StoredObject: The stored blob's key, size and modification time
        """
        pass

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """
        Read a blob.

        Raises:
            FileNotFoundError: If no blob exists under the key
        """
        pass

    @abstractmethod
    async def list(self, prefix: str = "") -> List[StoredObject]:
        """List every blob whose key starts with prefix."""
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Delete a blob.

        Returns:
            bool: True if successful
        """
        pass

    @abstractmethod
    async def copy(self, source_key: str, destination_key: str) -> None:
        """Copy a blob to a new key, leaving the source in place."""
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    async def get_download_url(self, key: str, expires_in: int = 3600) -> str:
        """
        Get a URL the browser can fetch the blob from.

        Args:
            key: Storage key/path
            expires_in: URL expiration in seconds (ignored by backends without expiring URLs)
        """
        pass

    async def move(self, source_key: str, destination_key: str) -> None:
        """
        Give a blob a new key.

        Backends without a native rename copy the blob and then delete the source.
        A failure between the two steps leaves both keys in place.
        """
        await self.copy(source_key, destination_key)
        if not await self.delete(source_key):
            raise OSError(f"Copied {source_key} to {destination_key} but could not delete the source")
