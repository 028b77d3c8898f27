import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from diplomastudy.config import Settings, get_settings
from diplomastudy.logging_config import setup_logging
from diplomastudy.routes.files import router as files_router
from diplomastudy.routes.folders import router as folders_router
from diplomastudy.routes.health import router as health_router
from diplomastudy.routes.quiz import router as quiz_router
from diplomastudy.routes.uploads import router as uploads_router
from diplomastudy.services.file_service import FileService
from diplomastudy.services.folder_service import FolderService
from diplomastudy.services.metadata_store import MetadataStore
from diplomastudy.services.quiz_service import QuizService
from diplomastudy.storage import storage_factory
from diplomastudy.storage.base_storage import BaseStorage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(
        f"DiplomaStudy API starting ({settings.ENVIRONMENT}, storage={app.state.storage.provider_name}, "
        f"prefix={settings.STORAGE_PREFIX})"
    )
    yield
    logger.info("DiplomaStudy API shutting down")


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    logger.debug(f"Rejected request to {request.url.path}: {errors}")
    return JSONResponse(status_code=400, content={"error": message})


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[BaseStorage] = None,
    quiz_service: Optional[QuizService] = None,
) -> FastAPI:
    """
    Build the FastAPI application and wire its services onto ``app.state``.

    Args:
        settings: Configuration to use; defaults to the cached ``get_settings()``.
        storage: Storage backend override; defaults to the one selected by the settings.
        quiz_service: Quiz service override, e.g. with a seeded random generator.
    """
    settings = settings or get_settings()
    setup_logging(log_level=settings.LOG_LEVEL, log_dir=settings.LOG_DIR)

    storage = storage or storage_factory(settings)
    metadata = MetadataStore(storage, settings.METADATA_PREFIX)

    app = FastAPI(title="DiplomaStudy API", version=settings.VERSION, lifespan=lifespan)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Store on app.state for later access
    app.state.settings = settings
    app.state.storage = storage
    app.state.folder_service = FolderService(metadata)
    app.state.file_service = FileService(storage, metadata, prefix=settings.STORAGE_PREFIX)
    app.state.quiz_service = quiz_service or QuizService()
    logger.info(f"Services initialized with {storage.provider_name} storage and stored on app.state")

    app.include_router(health_router)
    app.include_router(files_router)
    app.include_router(folders_router)
    app.include_router(uploads_router)
    app.include_router(quiz_router)

    return app
