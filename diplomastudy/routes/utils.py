from typing import Optional

from fastapi import HTTPException


def normalize_folder_ref(value: Optional[str]) -> Optional[str]:
    """Query/form folder references: an empty value means the root folder (None)."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def require_text(value: Optional[str], message: str) -> str:
    """Return the stripped value or answer 400 with message when it is missing or blank."""
    if value is None or not str(value).strip():
        raise HTTPException(status_code=400, detail=message)
    return str(value).strip()
