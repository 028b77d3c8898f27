import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import RedirectResponse, Response

from diplomastudy.config import Settings
from diplomastudy.dependencies import get_app_settings, get_file_service, get_quiz_service
from diplomastudy.models.responses import DocxUploadResponse, UploadResponse
from diplomastudy.routes.utils import normalize_folder_ref
from diplomastudy.services.file_service import FileService, FileServiceError
from diplomastudy.services.quiz_service import QuizService, placeholder_questions
from diplomastudy.storage.utils_file_extensions import (
    DOCX_MIME_TYPE,
    content_type_for_filename,
    detect_content_type,
    is_pdf_upload,
)

router = APIRouter(tags=["Uploads"])
logger = logging.getLogger(__name__)


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    custom_name: Optional[str] = Form(None, alias="customName"),
    folder_id: Optional[str] = Form(None, alias="folderId"),
    file_service: FileService = Depends(get_file_service),
) -> UploadResponse:
    """
    Upload a PDF, optionally under a custom name and into a folder.

    The stored name is ``<timestamp>_<sanitised name>.pdf``.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")

    original_name = file.filename or "upload.pdf"
    content = await file.read()
    content_type = detect_content_type(content=content, filename=original_name, content_type_hint=file.content_type)
    if not is_pdf_upload(original_name, file.content_type) and not is_pdf_upload(None, content_type):
        raise HTTPException(status_code=400, detail="Only PDF files are allowed")

    try:
        stored = await file_service.upload(
            content,
            original_name,
            custom_name=custom_name or None,
            folder_id=normalize_folder_ref(folder_id),
        )
    except FileServiceError as e:
        logger.error(f"Upload error: {e}")
        raise HTTPException(status_code=500, detail="Upload failed")

    return UploadResponse(message="Uploaded successfully", file=stored)


@router.get("/uploads/{file_path:path}")
async def serve_upload(
    file_path: str,
    settings: Settings = Depends(get_app_settings),
    file_service: FileService = Depends(get_file_service),
):
    """
    Serve a stored file for in-browser viewing.

    Local storage streams the bytes; object storage redirects to a presigned URL.
    """
    if settings.uses_object_storage:
        url = await file_service.download_url(file_path, expires_in=settings.PRESIGNED_URL_EXPIRY)
        if not url:
            raise HTTPException(status_code=404, detail="File not found")
        return RedirectResponse(url)

    try:
        content = await file_service.read(file_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Error reading file {file_path}: {e}")
        raise HTTPException(status_code=404, detail="File not found")

    file_name = file_path.rsplit("/", 1)[-1]
    return Response(
        content=content,
        media_type=content_type_for_filename(file_name),
        headers={
            "Content-Disposition": f'inline; filename="{file_name}"',
            "Cache-Control": "public, max-age=31536000",
            "X-Frame-Options": "SAMEORIGIN",
        },
    )


@router.post("/upload-docx", response_model=DocxUploadResponse)
async def upload_docx(
    file: Optional[UploadFile] = File(None),
    file_service: FileService = Depends(get_file_service),
    quiz_service: QuizService = Depends(get_quiz_service),
) -> DocxUploadResponse:
    """
    Accept a DOCX question document and register a question set for it.

    The document is stored but not parsed: the set always holds two placeholder questions.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file uploaded")
    if not (file.filename or "").endswith(".docx"):
        raise HTTPException(status_code=400, detail="Please upload a .docx file")

    try:
        filename = await file_service.store_attachment(await file.read(), file.filename, DOCX_MIME_TYPE)
    except Exception as e:
        logger.error(f"Error processing file: {e}")
        raise HTTPException(status_code=500, detail="Failed to process file")

    questions = placeholder_questions(file.filename)
    quiz_service.register_question_set(file.filename.removesuffix(".docx"), filename, questions)

    return DocxUploadResponse(
        success=True,
        filename=filename,
        questions=questions,
        message="File uploaded successfully. Questions extracted from document.",
    )
