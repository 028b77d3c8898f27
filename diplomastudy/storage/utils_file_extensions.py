import mimetypes
from typing import Optional

import filetype

PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

# Extensions the /uploads route knows how to label; everything else is served as binary.
_SERVED_CONTENT_TYPES = {
    ".pdf": PDF_MIME_TYPE,
    ".docx": DOCX_MIME_TYPE,
}

_GENERIC_CONTENT_TYPES = {
    "application/octet-stream",
    "binary/octet-stream",
    "application/x-octet-stream",
}


def content_type_for_filename(filename: str) -> str:
    """Return the Content-Type used when serving a stored file, based on its extension."""
    lowered = filename.lower()
    for extension, mime in _SERVED_CONTENT_TYPES.items():
        if lowered.endswith(extension):
            return mime
    return "application/octet-stream"


def detect_content_type(
    content: Optional[bytes] = None,
    filename: Optional[str] = None,
    content_type_hint: Optional[str] = None,
) -> str:
    """
    Detect the most likely MIME type using content bytes, filename, and an optional hint.
    """
    hint = None
    if content_type_hint:
        hint = content_type_hint.split(";", 1)[0].strip().lower()
        if hint in _GENERIC_CONTENT_TYPES:
            hint = None

    if content:
        kind = filetype.guess(content)
        if kind and kind.mime:
            return kind.mime

    if hint:
        return hint

    if filename:
        guessed, _ = mimetypes.guess_type(filename)
        if guessed:
            return guessed

    return "application/octet-stream"


def is_pdf_upload(filename: Optional[str], content_type: Optional[str]) -> bool:
    """An upload counts as a PDF when either its MIME type or its extension says so."""
    is_pdf_by_mime = (content_type or "").split(";", 1)[0].strip().lower() == PDF_MIME_TYPE
    is_pdf_by_ext = (filename or "").lower().endswith(".pdf")
    return is_pdf_by_mime or is_pdf_by_ext
