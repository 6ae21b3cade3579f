"""DigitalOcean Spaces object storage (S3-compatible, via boto3).

boto3 is blocking, so every call is pushed to a worker thread with
``asyncio.to_thread``. Objects are uploaded with ACL ``private`` and read back
through presigned GET URLs.
"""


import asyncio
import logging
import os
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings
from app.core.exceptions import ExternalServiceError
from app.core.log import with_fields

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredObject:
    key: str
    size: int
    content_type: str


@dataclass(frozen=True)
class PresignedUrl:
    key: str
    url: str
    expires_at: datetime


def object_key(prefix: str, original_name: str) -> str:
    """``{prefix}/{uuid}_{unix}{ext}`` keeping the original extension (lower-cased)."""
    ext = os.path.splitext(original_name or "")[1].lower()
    return f"{prefix.strip('/')}/{uuid.uuid4()}_{int(time.time())}{ext}"


class ObjectStorage:
    def __init__(
        self,
        bucket: str,
        region: str,
        endpoint_url: str,
        access_key: str | None,
        secret_key: str | None,
    ):
        self._bucket = bucket
        self._region = region
        self._endpoint_url = endpoint_url
        self._access_key = access_key
        self._secret_key = secret_key
        self._client = None

    @property
    def enabled(self) -> bool:
        return bool(self._bucket and self._access_key and self._secret_key)

    def _s3(self):
        if not self.enabled:
            raise ExternalServiceError("Object storage is not configured")
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=self._region,
                endpoint_url=self._endpoint_url,
                aws_access_key_id=self._access_key,
                aws_secret_access_key=self._secret_key,
            )
        return self._client

    async def upload(self, prefix: str, original_name: str, body: bytes, content_type: str) -> StoredObject:
        key = object_key(prefix, original_name)
        client = self._s3()
        try:
            await asyncio.to_thread(
                client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
                ACL="private",
            )
        except (BotoCoreError, ClientError) as exc:
            with_fields(logger, key=key).error("Object upload failed: %s", exc)
            raise ExternalServiceError(f"Failed to upload file: {exc}") from exc
        with_fields(logger, key=key, size=len(body)).info("Object uploaded")
        return StoredObject(key=key, size=len(body), content_type=content_type)

    async def presign(self, key: str, ttl_minutes: int | None = None) -> PresignedUrl:
        ttl = timedelta(minutes=ttl_minutes or settings.presign_ttl_minutes)
        client = self._s3()
        try:
            url = await asyncio.to_thread(
                client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=int(ttl.total_seconds()),
            )
        except (BotoCoreError, ClientError) as exc:
            with_fields(logger, key=key).error("Presign failed: %s", exc)
            raise ExternalServiceError(f"Failed to generate download URL: {exc}") from exc
        return PresignedUrl(key=key, url=url, expires_at=datetime.now(timezone.utc) + ttl)

    async def exists(self, key: str) -> bool:
        client = self._s3()
        try:
            await asyncio.to_thread(client.head_object, Bucket=self._bucket, Key=key)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise ExternalServiceError(f"Failed to check file: {exc}") from exc
        return True

    async def delete(self, key: str) -> None:
        client = self._s3()
        try:
            await asyncio.to_thread(client.delete_object, Bucket=self._bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            with_fields(logger, key=key).error("Object delete failed: %s", exc)
            raise ExternalServiceError(f"Failed to delete file: {exc}") from exc


storage = ObjectStorage(
    bucket=settings.space_bucket,
    region=settings.spaces_region,
    endpoint_url=settings.spaces_endpoint,
    access_key=settings.space_access_key,
    secret_key=settings.space_secret_key,
)
