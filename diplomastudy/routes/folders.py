import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from diplomastudy.dependencies import get_file_service, get_folder_service
from diplomastudy.models.folders import FolderCreate, FolderDelete, FolderStats, FolderUpdate
from diplomastudy.models.responses import (
    BreadcrumbsResponse,
    FolderResponse,
    FoldersResponse,
    SuccessResponse,
)
from diplomastudy.routes.utils import normalize_folder_ref, require_text
from diplomastudy.services.file_service import FileService
from diplomastudy.services.folder_service import FolderCycleError, FolderService, FolderServiceError

# ---------------------------------------------------------------------------
# Router initialization
# ---------------------------------------------------------------------------

router = APIRouter(prefix="/folders", tags=["Folders"])
logger = logging.getLogger(__name__)

ALL_FOLDERS_PARAM = "all"


# ---------------------------------------------------------------------------
# Folder management endpoints
# ---------------------------------------------------------------------------


@router.get("", response_model=FoldersResponse)
async def list_folders(
    parent_id: Optional[str] = Query(None, alias="parentId"),
    folder_service: FolderService = Depends(get_folder_service),
) -> FoldersResponse:
    """
    List the folders directly under ``parentId`` (root when empty), or every folder
    when ``parentId=all``.
    """
    if parent_id == ALL_FOLDERS_PARAM:
        folders = await folder_service.list_all()
    else:
        folders = await folder_service.list(normalize_folder_ref(parent_id))
    return FoldersResponse(folders=folders)


@router.post("", response_model=FolderResponse)
async def create_folder(
    folder_create: FolderCreate,
    folder_service: FolderService = Depends(get_folder_service),
) -> FolderResponse:
    """
    Create a new folder.
    """
    name = require_text(folder_create.name, "Folder name is required")
    try:
        folder = await folder_service.create(name, folder_create.parent_id or None)
    except FolderServiceError as e:
        logger.error(f"Error creating folder: {e}")
        raise HTTPException(status_code=500, detail="Failed to create folder")
    return FolderResponse(folder=folder)


@router.put("", response_model=SuccessResponse)
async def update_folder(
    folder_update: FolderUpdate,
    folder_service: FolderService = Depends(get_folder_service),
) -> SuccessResponse:
    """
    Rename and/or move a folder. Only the fields present in the payload are applied.

    The move runs first, so a rejected move leaves the name unchanged.
    """
    folder_id = require_text(folder_update.folder_id, "Folder ID is required")
    new_name = require_text(folder_update.new_name, "Folder name is required") if folder_update.wants_rename else None

    if folder_update.wants_move:
        try:
            moved = await folder_service.move(folder_id, folder_update.new_parent_id)
        except FolderCycleError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not moved:
            raise HTTPException(status_code=500, detail="Failed to move folder")

    if folder_update.wants_rename:
        if not await folder_service.rename(folder_id, new_name):
            raise HTTPException(status_code=500, detail="Failed to rename folder")

    return SuccessResponse(success=True)


@router.delete("", response_model=SuccessResponse)
async def delete_folder(
    folder_delete: FolderDelete,
    folder_service: FolderService = Depends(get_folder_service),
) -> SuccessResponse:
    """
    Delete a folder and its direct subfolders. Files inside are left untouched.
    """
    folder_id = require_text(folder_delete.folder_id, "Folder ID is required")
    if not await folder_service.delete(folder_id):
        raise HTTPException(status_code=500, detail="Failed to delete folder")
    return SuccessResponse(success=True)


@router.get("/stats", response_model=FolderStats)
async def folder_stats(
    folder_id: Optional[str] = Query(None, alias="folderId"),
    folder_service: FolderService = Depends(get_folder_service),
    file_service: FileService = Depends(get_file_service),
) -> FolderStats:
    """Number and total size of the files filed directly in a folder (root when empty)."""
    folder_ref = normalize_folder_ref(folder_id)
    return folder_service.stats(folder_ref, await file_service.list(folder_ref))


@router.get("/{folder_id}/breadcrumbs", response_model=BreadcrumbsResponse)
async def folder_breadcrumbs(
    folder_id: str,
    folder_service: FolderService = Depends(get_folder_service),
) -> BreadcrumbsResponse:
    folder = await folder_service.get(folder_id)
    if folder is None:
        raise HTTPException(status_code=404, detail=f"Folder {folder_id} not found")
    return BreadcrumbsResponse(breadcrumbs=await folder_service.breadcrumbs(folder_id))
