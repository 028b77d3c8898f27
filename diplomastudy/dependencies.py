from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from diplomastudy.config import Settings
    from diplomastudy.services.file_service import FileService
    from diplomastudy.services.folder_service import FolderService
    from diplomastudy.services.quiz_service import QuizService
    from diplomastudy.storage.base_storage import BaseStorage


async def get_app_settings(request: Request) -> "Settings":
    if not hasattr(request.app.state, "settings") or request.app.state.settings is None:
        raise RuntimeError("Settings not initialized or not available on app.state")
    return request.app.state.settings


async def get_storage(request: Request) -> "BaseStorage":
    if not hasattr(request.app.state, "storage") or request.app.state.storage is None:
        raise RuntimeError("Storage backend not initialized or not available on app.state")
    return request.app.state.storage


async def get_folder_service(request: Request) -> "FolderService":
    if not hasattr(request.app.state, "folder_service") or request.app.state.folder_service is None:
        raise RuntimeError("Folder service not initialized or not available on app.state")
    return request.app.state.folder_service


async def get_file_service(request: Request) -> "FileService":
    if not hasattr(request.app.state, "file_service") or request.app.state.file_service is None:
        raise RuntimeError("File service not initialized or not available on app.state")
    return request.app.state.file_service


async def get_quiz_service(request: Request) -> "QuizService":
    if not hasattr(request.app.state, "quiz_service") or request.app.state.quiz_service is None:
        raise RuntimeError("Quiz service not initialized or not available on app.state")
    return request.app.state.quiz_service
