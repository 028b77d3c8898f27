import logging
import os
import re
from datetime import UTC, datetime
from typing import Dict, List, Optional, Union
from urllib.parse import quote

from diplomastudy.models.files import FileItem
from diplomastudy.services.metadata_store import MetadataStore
from diplomastudy.storage.base_storage import BaseStorage, StoredObject
from diplomastudy.storage.utils_file_extensions import PDF_MIME_TYPE

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")

# Sentinel for "no folder filter", distinct from None which selects the root.
ALL_FOLDERS = object()


class FileServiceError(Exception):
    """Raised when an upload cannot be written to storage."""


def upload_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC time with millisecond precision made filename-safe: 2025-01-31_12-30-45-123."""
    now = now or datetime.now(UTC)
    iso = now.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-").replace("T", "_").replace("Z", "")


def safe_pdf_name(name: str) -> str:
    """Strip directories, replace unsafe characters and force a .pdf extension."""
    safe_base_name = _UNSAFE_CHARS.sub("_", os.path.basename(name.replace("\\", "/")))
    return safe_base_name if safe_base_name.lower().endswith(".pdf") else f"{safe_base_name}.pdf"


def timestamped_name(name: str, now: Optional[datetime] = None) -> str:
    return f"{upload_timestamp(now)}_{safe_pdf_name(name)}"


class FileService:
    """
    Uploaded PDFs in the active storage backend, joined with their folder associations.

    A file's id is its storage key; renaming gives it a new key and therefore a new id.
    """

    def __init__(self, storage: BaseStorage, metadata: MetadataStore, prefix: str = "diploma-study"):
        self.storage = storage
        self.metadata = metadata
        self.prefix = prefix.strip("/")

    def key_for(self, name: str) -> str:
        return f"{self.prefix}/{name}" if self.prefix else name

    def is_file_id(self, file_id: str) -> bool:
        """Only PDFs stored directly under the prefix are files; metadata documents and other keys are not."""
        name = file_id.removeprefix(f"{self.prefix}/") if self.prefix else file_id
        if self.prefix and name == file_id:
            return False
        return bool(name) and "/" not in name and name.lower().endswith(".pdf")

    @staticmethod
    def url_for(name: str) -> str:
        return f"/uploads/{quote(name, safe='')}"

    def _to_item(self, stored: StoredObject, folder_id: Optional[str] = None, original_name: Optional[str] = None):
        return FileItem(
            id=stored.key,
            name=stored.name,
            original_name=original_name or stored.name,
            size=stored.size,
            uploaded_at=stored.last_modified.astimezone(UTC).isoformat(timespec="milliseconds"),
            url=self.url_for(stored.name),
            folder_id=folder_id,
        )

    async def upload(
        self,
        data: bytes,
        original_name: Optional[str],
        custom_name: Optional[str] = None,
        folder_id: Optional[str] = None,
    ) -> FileItem:
        original_name = original_name or "upload.pdf"
        name = timestamped_name(custom_name or original_name)
        key = self.key_for(name)

        try:
            stored = await self.storage.put(key, data, content_type=PDF_MIME_TYPE)
        except Exception as e:
            logger.error(f"Upload of {original_name} to {key} failed: {e}")
            raise FileServiceError("Failed to upload file") from e

        logger.info(f"Stored {original_name} as {key} ({stored.size} bytes)")

        if folder_id:
            # The blob is already written; a failed association leaves the file at the root.
            if not await self.metadata.update_association(stored.key, folder_id):
                logger.warning(f"File {stored.key} uploaded but folder association to {folder_id} failed")
                folder_id = None

        return self._to_item(stored, folder_id=folder_id or None, original_name=original_name)

    async def _list_pdf_objects(self) -> List[StoredObject]:
        stored_objects = await self.storage.list(f"{self.prefix}/" if self.prefix else "")
        return [stored for stored in stored_objects if self.is_file_id(stored.key)]

    async def list(self, folder_id: Union[str, None, object] = ALL_FOLDERS) -> List[FileItem]:
        """
        PDF files, newest first.

        Args:
            folder_id: Only return files associated with this folder; None selects unfiled
                files. Leave unset to return every file.
        """
        try:
            stored_objects = await self._list_pdf_objects()
        except Exception as e:
            logger.error(f"Error fetching files: {e}")
            return []

        associations = await self.metadata.get_all_associations()
        files = [
            self._to_item(stored, folder_id=associations.get(stored.key))
            for stored in stored_objects
        ]

        if folder_id is not ALL_FOLDERS:
            files = [file for file in files if file.folder_id == folder_id]

        files.sort(key=lambda file: file.uploaded_at, reverse=True)
        return files

    async def store_attachment(self, data: bytes, filename: str, content_type: Optional[str] = None) -> str:
        """Keep a non-PDF upload next to the PDFs; listings skip it. Returns the stored name."""
        name = f"{upload_timestamp()}_{_UNSAFE_CHARS.sub('_', os.path.basename(filename))}"
        await self.storage.put(self.key_for(name), data, content_type=content_type)
        logger.info(f"Stored attachment {filename} as {name}")
        return name

    async def get(self, file_id: str) -> Optional[FileItem]:
        return next((file for file in await self.list() if file.id == file_id), None)

    async def read(self, name: str) -> bytes:
        """Raw bytes of a stored file addressed by its name, as used in file URLs."""
        if "/" in name:
            raise FileNotFoundError(f"Not a stored file name: {name}")
        return await self.storage.get(self.key_for(name))

    async def download_url(self, name: str, expires_in: int = 3600) -> Optional[str]:
        if "/" in name:
            return None
        key = self.key_for(name)
        if not await self.storage.exists(key):
            return None
        return await self.storage.get_download_url(key, expires_in=expires_in)

    async def rename(self, file_id: str, new_name: str) -> bool:
        if not self.is_file_id(file_id):
            logger.warning(f"Refusing to rename {file_id}: not a stored PDF")
            return False
        new_key = self.key_for(timestamped_name(new_name))
        try:
            await self.storage.move(file_id, new_key)
        except Exception as e:
            logger.error(f"Error renaming file {file_id}: {e}")
            return False

        logger.info(f"Renamed {file_id} to {new_key}")
        if not await self.metadata.rename_association(file_id, new_key):
            logger.warning(f"File {new_key} renamed but its folder association was not carried over")
        return True

    async def move(self, file_id: str, new_folder_id: Optional[str]) -> bool:
        if not self.is_file_id(file_id):
            logger.warning(f"Refusing to move {file_id}: not a stored PDF")
            return False
        return await self.metadata.update_association(file_id, new_folder_id)

    async def move_many(self, file_ids: List[str], new_folder_id: Optional[str]) -> Dict[str, bool]:
        """Move files one at a time so each association write sees the previous one."""
        results: Dict[str, bool] = {}
        for file_id in file_ids:
            results[file_id] = await self.move(file_id, new_folder_id)
        return results

    async def delete(self, file_id: str) -> bool:
        """Delete the blob only; its association record stays until cleanup_metadata runs."""
        if not self.is_file_id(file_id):
            logger.warning(f"Refusing to delete {file_id}: not a stored PDF")
            return False
        try:
            deleted = await self.storage.delete(file_id)
        except Exception as e:
            logger.error(f"Error deleting file {file_id}: {e}")
            return False
        if deleted:
            logger.info(f"Deleted file {file_id}")
        return deleted

    async def cleanup_metadata(self) -> int:
        """Prune associations of deleted files. A failed listing raises instead of pruning everything."""
        live_ids = [stored.key for stored in await self._list_pdf_objects()]
        await self.metadata.cleanup(live_ids)
        return len(live_ids)
