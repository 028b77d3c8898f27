import logging
from typing import Dict, Iterable, List, Optional

from diplomastudy.models.files import FileItem
from diplomastudy.models.folders import BreadcrumbItem, FolderItem, FolderStats
from diplomastudy.services.metadata_store import MetadataStore

logger = logging.getLogger(__name__)

ROOT_BREADCRUMB_NAME = "Home"


class FolderServiceError(Exception):
    """Raised when a folder cannot be persisted."""


class FolderCycleError(ValueError):
    """Raised when a move would place a folder inside itself or one of its descendants."""


class FolderService:
    """
    CRUD over folder records kept in the folders metadata document.

    Hierarchy is expressed only through ``parentId`` references; children are found by
    a linear scan. Storage failures are logged and reported as ``False`` or an empty list.
    """

    def __init__(self, metadata: MetadataStore):
        self.metadata = metadata

    async def create(self, name: str, parent_id: Optional[str] = None) -> FolderItem:
        folder = FolderItem(name=name.strip(), parent_id=parent_id)
        try:
            async with self.metadata.editing_folders() as records:
                records.append(folder.model_dump(by_alias=True))
        except Exception as e:
            logger.error(f"Error saving folder {folder.name}: {e}")
            raise FolderServiceError("Failed to create folder") from e

        logger.info(f"Created folder {folder.id} ({folder.name}) under {parent_id}")
        return folder

    async def list_all(self) -> List[FolderItem]:
        try:
            records = await self.metadata.load_folders()
        except Exception as e:
            logger.error(f"Error fetching all folders: {e}")
            return []
        return [FolderItem.model_validate(record) for record in records]

    async def list(self, parent_id: Optional[str] = None) -> List[FolderItem]:
        """Folders whose parent is exactly ``parent_id``; ``None`` lists the root."""
        return [folder for folder in await self.list_all() if folder.parent_id == parent_id]

    async def get(self, folder_id: str) -> Optional[FolderItem]:
        return next((folder for folder in await self.list_all() if folder.id == folder_id), None)

    async def rename(self, folder_id: str, new_name: str) -> bool:
        try:
            async with self.metadata.editing_folders() as records:
                record = _find(records, folder_id)
                if record is None:
                    raise KeyError(folder_id)
                record["name"] = new_name.strip()
            return True
        except KeyError:
            logger.warning(f"Cannot rename missing folder {folder_id}")
            return False
        except Exception as e:
            logger.error(f"Error renaming folder {folder_id}: {e}")
            return False

    async def move(self, folder_id: str, new_parent_id: Optional[str]) -> bool:
        """
        Re-parent a folder.

        Raises:
            FolderCycleError: If new_parent_id is the folder itself or one of its descendants
        """
        try:
            async with self.metadata.editing_folders() as records:
                record = _find(records, folder_id)
                if record is None:
                    raise KeyError(folder_id)
                if new_parent_id is not None and _is_self_or_descendant(records, folder_id, new_parent_id):
                    raise FolderCycleError(f"Cannot move folder {folder_id} into itself or one of its subfolders")
                record["parentId"] = new_parent_id
            return True
        except FolderCycleError:
            raise
        except KeyError:
            logger.warning(f"Cannot move missing folder {folder_id}")
            return False
        except Exception as e:
            logger.error(f"Error moving folder {folder_id}: {e}")
            return False

    async def delete(self, folder_id: str) -> bool:
        """Remove a folder and its direct children. Grandchildren and files are left in place."""
        try:
            async with self.metadata.editing_folders() as records:
                records[:] = [
                    record
                    for record in records
                    if record.get("id") != folder_id and record.get("parentId") != folder_id
                ]
            return True
        except Exception as e:
            logger.error(f"Error deleting folder {folder_id}: {e}")
            return False

    async def breadcrumbs(self, folder_id: Optional[str]) -> List[BreadcrumbItem]:
        """Path from the root down to ``folder_id``; stops early on dangling or cyclic parent links."""
        trail: List[BreadcrumbItem] = []
        by_id: Dict[str, FolderItem] = {folder.id: folder for folder in await self.list_all()}

        seen = set()
        current = by_id.get(folder_id) if folder_id else None
        while current is not None and current.id not in seen:
            seen.add(current.id)
            trail.append(BreadcrumbItem(id=current.id, name=current.name))
            current = by_id.get(current.parent_id) if current.parent_id else None

        if current is not None:
            logger.warning(f"Folder hierarchy has a cycle through {current.id}")

        trail.append(BreadcrumbItem(id=None, name=ROOT_BREADCRUMB_NAME))
        trail.reverse()
        return trail

    @staticmethod
    def stats(folder_id: Optional[str], files: Iterable[FileItem]) -> FolderStats:
        contained = [file for file in files if file.folder_id == folder_id]
        return FolderStats(
            folder_id=folder_id,
            file_count=len(contained),
            total_size=sum(file.size for file in contained),
        )


def _find(records: List[dict], folder_id: str) -> Optional[dict]:
    return next((record for record in records if record.get("id") == folder_id), None)


def _is_self_or_descendant(records: List[dict], folder_id: str, candidate_id: str) -> bool:
    """Walk up from candidate_id; True when the walk reaches folder_id."""
    parents = {record.get("id"): record.get("parentId") for record in records}
    seen = set()
    current: Optional[str] = candidate_id
    while current is not None and current not in seen:
        if current == folder_id:
            return True
        seen.add(current)
        current = parents.get(current)
    return False
