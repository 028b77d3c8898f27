import random
import string
import time
from datetime import UTC, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

FOLDER_COLORS = [
    "#3B82F6",  # Blue
    "#10B981",  # Green
    "#F59E0B",  # Yellow
    "#EF4444",  # Red
    "#8B5CF6",  # Purple
    "#06B6D4",  # Cyan
    "#F97316",  # Orange
    "#84CC16",  # Lime
]


def generate_folder_id() -> str:
    """Current time in milliseconds plus a random base36 suffix; unique in practice, not guaranteed."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"folder_{int(time.time() * 1000)}_{suffix}"


def random_folder_color() -> str:
    return random.choice(FOLDER_COLORS)


class CamelModel(BaseModel):
    """Serialises to the camelCase field names used by the web client and the metadata documents."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FolderItem(CamelModel):
    """Represents a folder; parent_id None means the folder sits at the root"""

    id: str = Field(default_factory=generate_folder_id)
    name: str
    created_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat(timespec="milliseconds"))
    parent_id: Optional[str] = None
    type: Literal["folder"] = "folder"
    color: str = Field(default_factory=random_folder_color)

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if not isinstance(other, FolderItem):
            return False
        return self.id == other.id


class FolderCreate(CamelModel):
    """Request model for folder creation"""

    name: Optional[str] = None
    parent_id: Optional[str] = None


class FolderUpdate(CamelModel):
    """Request model for renaming and/or re-parenting a folder.

    A field left out of the payload is not applied; an explicit ``newParentId: null``
    moves the folder to the root.
    """

    folder_id: Optional[str] = None
    new_name: Optional[str] = None
    new_parent_id: Optional[str] = None

    @property
    def wants_rename(self) -> bool:
        return "new_name" in self.model_fields_set

    @property
    def wants_move(self) -> bool:
        return "new_parent_id" in self.model_fields_set


class FolderDelete(CamelModel):
    folder_id: Optional[str] = None


class BreadcrumbItem(CamelModel):
    id: Optional[str] = None
    name: str


class FolderStats(CamelModel):
    folder_id: Optional[str] = None
    file_count: int = 0
    total_size: int = 0
