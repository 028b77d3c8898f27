import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from diplomastudy.config import Settings
from diplomastudy.dependencies import get_app_settings, get_storage
from diplomastudy.models.responses import HealthCheckResponse, StorageStatusResponse
from diplomastudy.storage.base_storage import BaseStorage

router = APIRouter(tags=["Health"])
logger = logging.getLogger(__name__)


@router.get("/health", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    return HealthCheckResponse(status="healthy", message="DiplomaStudy API is running")


@router.get("/storage/status", response_model=StorageStatusResponse)
async def storage_status(
    settings: Settings = Depends(get_app_settings),
    storage: BaseStorage = Depends(get_storage),
):
    """Report the active storage backend and check that it answers a listing."""
    if not settings.uses_object_storage:
        message = "Using local storage - object storage not configured"
    else:
        message = f"Using S3 bucket {settings.S3_BUCKET}"

    try:
        stored_objects = await storage.list(f"{settings.STORAGE_PREFIX}/")
    except Exception as e:
        logger.error(f"Storage status check failed: {e}")
        body = StorageStatusResponse(
            status="error",
            provider=storage.provider_name,
            message="Error testing storage configuration",
            prefix=settings.STORAGE_PREFIX,
            error=str(e),
        )
        return JSONResponse(status_code=500, content=body.model_dump(by_alias=True))

    file_count = sum(1 for stored in stored_objects if stored.key.lower().endswith(".pdf"))
    return StorageStatusResponse(
        status=storage.provider_name,
        provider=storage.provider_name,
        message=message,
        prefix=settings.STORAGE_PREFIX,
        file_count=file_count,
    )
