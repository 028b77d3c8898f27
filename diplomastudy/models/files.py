from datetime import UTC, datetime
from typing import List, Literal, Optional

from pydantic import Field

from diplomastudy.models.folders import CamelModel


class FileItem(CamelModel):
    """An uploaded PDF.

    ``id`` is the storage key, so it changes whenever the file is renamed.
    ``folder_id`` is joined in from the association document at read time.
    """

    id: str
    name: str
    original_name: str
    size: int
    uploaded_at: str
    url: str
    type: Literal["file"] = "file"
    folder_id: Optional[str] = None


class FileAssociation(CamelModel):
    """One row of the file-to-folder association document"""

    file_id: str
    folder_id: Optional[str] = None
    updated_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat(timespec="milliseconds"))


class FileActionRequest(CamelModel):
    file_id: Optional[str] = None
    new_name: Optional[str] = None
    new_folder_id: Optional[str] = None

    @property
    def wants_move(self) -> bool:
        return "new_folder_id" in self.model_fields_set


class FileDeleteRequest(CamelModel):
    file_id: Optional[str] = None


class BulkMoveRequest(CamelModel):
    file_ids: List[str] = Field(default_factory=list)
    new_folder_id: Optional[str] = None
