import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from diplomastudy.dependencies import get_file_service
from diplomastudy.models.files import BulkMoveRequest, FileActionRequest, FileDeleteRequest
from diplomastudy.models.responses import BulkMoveResponse, CleanupResponse, FilesResponse, MessageResponse
from diplomastudy.routes.utils import normalize_folder_ref, require_text
from diplomastudy.services.file_service import FileService

# ---------------------------------------------------------------------------
# Router initialization
# ---------------------------------------------------------------------------

router = APIRouter(prefix="/files", tags=["Files"])
logger = logging.getLogger(__name__)


@router.get("", response_model=FilesResponse)
async def list_files(
    request: Request,
    folder_id: Optional[str] = Query(None, alias="folderId"),
    file_service: FileService = Depends(get_file_service),
) -> FilesResponse:
    """
    List uploaded PDFs, newest first.

    Without ``folderId`` every file is returned; an empty ``folderId`` selects the
    files that are not in any folder.
    """
    if "folderId" in request.query_params:
        files = await file_service.list(normalize_folder_ref(folder_id))
    else:
        files = await file_service.list()
    return FilesResponse(files=files)


@router.put("/actions", response_model=MessageResponse)
async def update_file(
    action: FileActionRequest,
    file_service: FileService = Depends(get_file_service),
) -> MessageResponse:
    """
    Rename a file and/or move it to another folder (``newFolderId: null`` moves it to the root).
    """
    file_id = require_text(action.file_id, "File ID is required")
    if not file_service.is_file_id(file_id):
        raise HTTPException(status_code=400, detail="Invalid file ID")
    wants_rename = bool(action.new_name and action.new_name.strip())
    if not wants_rename and not action.wants_move:
        raise HTTPException(status_code=400, detail="File ID and new name or folder are required")

    # Move first: renaming changes the file id and carries the association along.
    if action.wants_move:
        if not await file_service.move(file_id, normalize_folder_ref(action.new_folder_id)):
            raise HTTPException(status_code=500, detail="Failed to move file")

    if wants_rename:
        if not await file_service.rename(file_id, action.new_name.strip()):
            raise HTTPException(status_code=500, detail="Failed to rename file")

    if wants_rename and action.wants_move:
        return MessageResponse(message="File updated successfully")
    if wants_rename:
        return MessageResponse(message="File renamed successfully")
    return MessageResponse(message="File moved successfully")


@router.delete("/actions", response_model=MessageResponse)
async def delete_file(
    action: FileDeleteRequest,
    file_service: FileService = Depends(get_file_service),
) -> MessageResponse:
    file_id = require_text(action.file_id, "File ID is required")
    if not file_service.is_file_id(file_id):
        raise HTTPException(status_code=400, detail="Invalid file ID")
    if not await file_service.delete(file_id):
        raise HTTPException(status_code=500, detail="Failed to delete file")
    return MessageResponse(message="File deleted successfully")


@router.put("/actions/bulk-move", response_model=BulkMoveResponse)
async def bulk_move_files(
    request: BulkMoveRequest,
    file_service: FileService = Depends(get_file_service),
) -> BulkMoveResponse:
    """Move several files into one folder, one after another."""
    if not request.file_ids:
        raise HTTPException(status_code=400, detail="At least one file ID is required")

    results = await file_service.move_many(request.file_ids, normalize_folder_ref(request.new_folder_id))
    moved = sum(1 for ok in results.values() if ok)
    if moved == 0:
        raise HTTPException(status_code=500, detail="Failed to move files")
    return BulkMoveResponse(message=f"Moved {moved} of {len(results)} files", results=results)


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup_file_metadata(
    file_service: FileService = Depends(get_file_service),
) -> CleanupResponse:
    """Remove folder associations that point at files which no longer exist."""
    try:
        live_files = await file_service.cleanup_metadata()
    except Exception as e:
        logger.error(f"Error cleaning up file metadata: {e}")
        raise HTTPException(status_code=500, detail="Failed to clean up file metadata")
    return CleanupResponse(message="File metadata cleaned up", live_files=live_files)
