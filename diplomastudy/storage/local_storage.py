import logging
import shutil
from datetime import UTC, datetime
from pathlib import Path
from typing import List, Optional

from .base_storage import BaseStorage, StoredObject

logger = logging.getLogger(__name__)


class LocalStorage(BaseStorage):
    provider_name = "local"

    def __init__(self, storage_path: str):
        """Initialize local storage with a base path."""
        self.storage_path = Path(storage_path)
        # Create storage directory if it doesn't exist
        self.storage_path.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        file_path = (self.storage_path / key).resolve()
        root = self.storage_path.resolve()
        if file_path != root and root not in file_path.parents:
            raise ValueError(f"Key escapes storage root: {key}")
        return file_path

    def _describe(self, key: str, file_path: Path) -> StoredObject:
        stat = file_path.stat()
        return StoredObject(
            key=key,
            size=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=UTC),
        )

    async def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> StoredObject:
        """Write content to local storage."""
        file_path = self._path(key)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        with open(file_path, "wb") as f:
            f.write(data)
        return self._describe(key, file_path)

    async def get(self, key: str) -> bytes:
        """Read a file from local storage."""
        file_path = self._path(key)
        if not file_path.is_file():
            raise FileNotFoundError(f"File not found: {file_path}")
        with open(file_path, "rb") as f:
            return f.read()

    async def list(self, prefix: str = "") -> List[StoredObject]:
        directory = prefix.rpartition("/")[0]
        base = self._path(directory) if directory else self.storage_path
        if not base.is_dir():
            return []

        objects: List[StoredObject] = []
        for file_path in base.rglob("*"):
            if not file_path.is_file():
                continue
            key = file_path.relative_to(self.storage_path).as_posix()
            if key.startswith(prefix):
                objects.append(self._describe(key, file_path))
        logger.debug(f"Listed {len(objects)} local files under '{prefix}'")
        return objects

    async def delete(self, key: str) -> bool:
        """Delete a file from local storage."""
        file_path = self._path(key)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        file_path.unlink()
        return True

    async def copy(self, source_key: str, destination_key: str) -> None:
        source = self._path(source_key)
        if not source.is_file():
            raise FileNotFoundError(f"File not found: {source}")
        destination = self._path(destination_key)
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)

    async def move(self, source_key: str, destination_key: str) -> None:
        """Rename a file in place; a single filesystem operation."""
        source = self._path(source_key)
        if not source.is_file():
            raise FileNotFoundError(f"File not found: {source}")
        destination = self._path(destination_key)
        destination.parent.mkdir(parents=True, exist_ok=True)
        source.replace(destination)

    async def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    async def get_download_url(self, key: str, expires_in: int = 3600) -> str:
        """
        Get local file path as URL.

        Args:
            key: Storage key/path
            expires_in: URL expiration in seconds (unused for local storage)

        Returns:
            str: Local file URL
        """
        file_path = self._path(key)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        return f"file://{file_path.absolute()}"
