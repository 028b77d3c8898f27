import asyncio
import json
import logging
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional

from diplomastudy.models.files import FileAssociation
from diplomastudy.storage.base_storage import BaseStorage

logger = logging.getLogger(__name__)


class MetadataDocumentError(ValueError):
    """A metadata document exists but does not hold a JSON array."""


class MetadataStore:
    """
    Flat JSON documents kept next to the uploaded files.

    ``folders.json`` holds every folder record and ``file-metadata.json`` holds the
    file-to-folder associations. Each document is read and rewritten as a whole; a
    per-document lock serialises the read-modify-write cycles issued by this process.
    Writers in other processes still race on a last-write-wins basis.
    """

    FOLDERS_FILE = "folders.json"
    FILE_METADATA_FILE = "file-metadata.json"

    def __init__(self, storage: BaseStorage, metadata_prefix: str = "diploma-study/metadata"):
        self.storage = storage
        self.metadata_prefix = metadata_prefix.strip("/")
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def _key(self, filename: str) -> str:
        return f"{self.metadata_prefix}/{filename}" if self.metadata_prefix else filename

    async def _read_document(self, filename: str) -> List[Dict[str, Any]]:
        """Load a document; a missing document reads as an empty collection."""
        key = self._key(filename)
        try:
            raw = await self.storage.get(key)
        except FileNotFoundError:
            logger.debug(f"Metadata document {key} does not exist yet")
            return []

        records = json.loads(raw.decode("utf-8")) if raw.strip() else []
        if not isinstance(records, list):
            raise MetadataDocumentError(f"Metadata document {key} is not a JSON array")
        return records

    async def _write_document(self, filename: str, records: List[Dict[str, Any]]) -> None:
        payload = json.dumps(records, indent=2).encode("utf-8")
        await self.storage.put(self._key(filename), payload, content_type="application/json")

    @asynccontextmanager
    async def editing(self, filename: str) -> AsyncIterator[List[Dict[str, Any]]]:
        """
        Hold the document lock, yield the records for in-place mutation and write them back.

        Nothing is written when the body raises.
        """
        async with self._locks[filename]:
            records = await self._read_document(filename)
            yield records
            await self._write_document(filename, records)

    # ------------------------------------------------------------------
    # Folder document
    # ------------------------------------------------------------------

    async def load_folders(self) -> List[Dict[str, Any]]:
        return await self._read_document(self.FOLDERS_FILE)

    def editing_folders(self):
        return self.editing(self.FOLDERS_FILE)

    # ------------------------------------------------------------------
    # File-to-folder associations
    # ------------------------------------------------------------------

    async def update_association(self, file_id: str, folder_id: Optional[str]) -> bool:
        """Point a file at a folder (None = root), replacing any previous record for it."""
        logger.info(f"Updating file {file_id} folder association to: {folder_id}")
        try:
            async with self.editing(self.FILE_METADATA_FILE) as records:
                records[:] = [record for record in records if record.get("fileId") != file_id]
                records.append(FileAssociation(file_id=file_id, folder_id=folder_id).model_dump(by_alias=True))
            return True
        except Exception as e:
            logger.error(f"Error updating file metadata for {file_id}: {e}")
            return False

    async def remove_association(self, file_id: str) -> bool:
        try:
            async with self.editing(self.FILE_METADATA_FILE) as records:
                records[:] = [record for record in records if record.get("fileId") != file_id]
            return True
        except Exception as e:
            logger.error(f"Error removing file metadata for {file_id}: {e}")
            return False

    async def rename_association(self, old_file_id: str, new_file_id: str) -> bool:
        """Carry a file's folder link over to its new id. A file without a record is left unfiled."""
        try:
            async with self.editing(self.FILE_METADATA_FILE) as records:
                previous = next((record for record in records if record.get("fileId") == old_file_id), None)
                records[:] = [
                    record for record in records if record.get("fileId") not in (old_file_id, new_file_id)
                ]
                if previous is not None:
                    records.append(
                        FileAssociation(file_id=new_file_id, folder_id=previous.get("folderId")).model_dump(
                            by_alias=True
                        )
                    )
            return True
        except Exception as e:
            logger.error(f"Error moving file metadata from {old_file_id} to {new_file_id}: {e}")
            return False

    async def get_association(self, file_id: str) -> Optional[str]:
        try:
            records = await self._read_document(self.FILE_METADATA_FILE)
        except Exception as e:
            logger.error(f"Error getting file metadata for {file_id}: {e}")
            return None

        for record in records:
            if record.get("fileId") == file_id:
                return record.get("folderId")
        return None

    async def get_all_associations(self) -> Dict[str, Optional[str]]:
        try:
            records = await self._read_document(self.FILE_METADATA_FILE)
        except Exception as e:
            logger.error(f"Error getting all file metadata: {e}")
            return {}

        return {record["fileId"]: record.get("folderId") for record in records if "fileId" in record}

    async def cleanup(self, live_ids: Iterable[str]) -> None:
        """Drop association records for files that no longer exist."""
        live = set(live_ids)
        try:
            async with self._locks[self.FILE_METADATA_FILE]:
                records = await self._read_document(self.FILE_METADATA_FILE)
                if not records:
                    return
                cleaned = [record for record in records if record.get("fileId") in live]
                await self._write_document(self.FILE_METADATA_FILE, cleaned)
            logger.info(f"Removed {len(records) - len(cleaned)} orphaned file metadata records")
        except Exception as e:
            logger.error(f"Error cleaning up file metadata: {e}")
