import logging
from datetime import UTC, datetime
from typing import List, Optional

import boto3
from botocore.exceptions import ClientError

from .base_storage import BaseStorage, StoredObject

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


def _is_missing(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code") in _MISSING_KEY_CODES


class S3Storage(BaseStorage):
    """AWS S3 (or S3-compatible) storage implementation."""

    provider_name = "aws-s3"

    def __init__(
        self,
        aws_access_key: Optional[str] = None,
        aws_secret_key: Optional[str] = None,
        region_name: str = "us-east-2",
        default_bucket: str = "diplomastudy-files",
        endpoint_url: Optional[str] = None,
        s3_client=None,
    ):
        self.default_bucket = default_bucket
        self.s3_client = s3_client or boto3.client(
            "s3",
            aws_access_key_id=aws_access_key,
            aws_secret_access_key=aws_secret_key,
            region_name=region_name,
            endpoint_url=endpoint_url,
        )

    async def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> StoredObject:
        """Upload bytes to S3."""
        extra_args = {}
        if content_type:
            extra_args["ContentType"] = content_type

        try:
            self.s3_client.put_object(Bucket=self.default_bucket, Key=key, Body=data, **extra_args)
        except ClientError as e:
            logger.error(f"Error uploading to S3: {e}")
            raise

        return StoredObject(key=key, size=len(data), last_modified=datetime.now(UTC))

    async def get(self, key: str) -> bytes:
        """Download file from S3."""
        try:
            response = self.s3_client.get_object(Bucket=self.default_bucket, Key=key)
            return response["Body"].read()
        except ClientError as e:
            if _is_missing(e):
                raise FileNotFoundError(f"Object not found: s3://{self.default_bucket}/{key}") from e
            logger.error(f"Error downloading from S3: {e}")
            raise

    async def list(self, prefix: str = "") -> List[StoredObject]:
        objects: List[StoredObject] = []
        paginator = self.s3_client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=self.default_bucket, Prefix=prefix):
                for item in page.get("Contents", []):
                    objects.append(
                        StoredObject(key=item["Key"], size=int(item.get("Size", 0)), last_modified=item["LastModified"])
                    )
        except ClientError as e:
            logger.error(f"Error listing S3 prefix {prefix}: {e}")
            raise
        return objects

    async def delete(self, key: str) -> bool:
        """Delete file from S3."""
        try:
            self.s3_client.delete_object(Bucket=self.default_bucket, Key=key)
            logger.info(f"File {key} deleted from bucket {self.default_bucket}")
            return True
        except ClientError as e:
            logger.error(f"Error deleting from S3: {e}")
            return False

    async def copy(self, source_key: str, destination_key: str) -> None:
        try:
            self.s3_client.copy_object(
                Bucket=self.default_bucket,
                Key=destination_key,
                CopySource={"Bucket": self.default_bucket, "Key": source_key},
            )
        except ClientError as e:
            if _is_missing(e):
                raise FileNotFoundError(f"Object not found: s3://{self.default_bucket}/{source_key}") from e
            logger.error(f"Error copying {source_key} to {destination_key}: {e}")
            raise

    async def exists(self, key: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.default_bucket, Key=key)
            return True
        except ClientError as e:
            if _is_missing(e):
                return False
            raise

    async def get_download_url(self, key: str, expires_in: int = 3600) -> str:
        """Generate presigned download URL."""
        if not key:
            return ""

        try:
            return self.s3_client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.default_bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except ClientError as e:
            logger.error(f"Error generating presigned URL: {e}")
            return ""
