from diplomastudy.config import Settings
from .base_storage import BaseStorage, StoredObject
from .local_storage import LocalStorage
from .s3_storage import S3Storage


def storage_factory(settings: Settings) -> BaseStorage:
    prov = settings.STORAGE_PROVIDER
    if prov == "local":
        return LocalStorage(storage_path=settings.STORAGE_PATH)
    elif prov == "aws-s3":
        if not settings.AWS_ACCESS_KEY or not settings.AWS_SECRET_ACCESS_KEY:
            raise ValueError("AWS credentials are required for aws-s3 storage")
        return S3Storage(
            aws_access_key=settings.AWS_ACCESS_KEY,
            aws_secret_key=settings.AWS_SECRET_ACCESS_KEY,
            region_name=settings.AWS_REGION,
            default_bucket=settings.S3_BUCKET,
            endpoint_url=settings.S3_ENDPOINT_URL,
        )
    else:
        raise ValueError(f"Unknown storage provider selected: '{prov}'")


__all__ = ["BaseStorage", "LocalStorage", "S3Storage", "StoredObject", "storage_factory"]
