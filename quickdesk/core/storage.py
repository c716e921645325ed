"""Object storage for ticket attachments.

Keys are ``<folder>/<file name>``; the database stores the key, never a URL,
so the backend can change without a data migration.
"""

import os
import uuid
from pathlib import Path
from typing import Protocol

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError

from quickdesk.core.config import settings

PRESIGNED_URL_TTL_SECONDS = 3600


class StorageBackend(Protocol):
    def upload(
        self, file_content: bytes, folder: str, filename: str, content_type: str | None = None
    ) -> str:
        """Store the bytes and return the object key."""
        ...

    def public_url(self, path: str) -> str: ...

    def delete(self, path: str) -> None: ...

    def exists(self, path: str) -> bool: ...


class LocalStorage:
    """Files under ``UPLOAD_DIR``, served by the ``/uploads`` static mount."""

    def __init__(self, base_dir: str) -> None:
        self._root = Path(base_dir).resolve()

    def _path_for(self, key: str) -> Path:
        candidate = (self._root / key).resolve()
        if candidate != self._root and not str(candidate).startswith(f"{self._root}{os.sep}"):
            raise ValueError(f"Path traversal attempt detected: {key}")
        return candidate

    def upload(
        self, file_content: bytes, folder: str, filename: str, content_type: str | None = None
    ) -> str:
        key = f"{folder}/{filename}"
        target = self._path_for(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(file_content)
        return key

    def public_url(self, path: str) -> str:
        return f"{settings.BACKEND_URL}/uploads/{path}"

    def delete(self, path: str) -> None:
        self._path_for(path).unlink(missing_ok=True)

    def exists(self, path: str) -> bool:
        return self._path_for(path).is_file()


class S3Storage:
    """Any S3-compatible bucket (AWS, R2, MinIO)."""

    def __init__(self) -> None:
        self._bucket = settings.S3_BUCKET_NAME
        self._client = boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT_URL or None,
            aws_access_key_id=settings.S3_ACCESS_KEY_ID or None,
            aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY or None,
            config=BotoConfig(signature_version="s3v4", retries={"max_attempts": 3}),
        )

    def upload(
        self, file_content: bytes, folder: str, filename: str, content_type: str | None = None
    ) -> str:
        key = f"{folder}/{filename}"
        extra = {"ContentType": content_type} if content_type else {}
        self._client.put_object(Bucket=self._bucket, Key=key, Body=file_content, **extra)
        return key

    def public_url(self, path: str) -> str:
        if settings.S3_PUBLIC_URL:
            return f"{settings.S3_PUBLIC_URL.rstrip('/')}/{path}"
        url: str = self._client.generate_presigned_url(
            "get_object",
            Params={
                "Bucket": self._bucket,
                "Key": path,
                "ResponseContentDisposition": f'attachment; filename="{Path(path).name}"',
            },
            ExpiresIn=PRESIGNED_URL_TTL_SECONDS,
        )
        return url

    def delete(self, path: str) -> None:
        self._client.delete_object(Bucket=self._bucket, Key=path)

    def exists(self, path: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=path)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise
        return True


def get_storage() -> StorageBackend:
    if settings.STORAGE_BACKEND == "s3":
        return S3Storage()
    return LocalStorage(settings.UPLOAD_DIR)


def generate_unique_filename(extension: str = "") -> str:
    """Random object name. ``extension`` decides how the file is served, so
    callers pass one derived from the validated content type."""
    return f"{uuid.uuid4().hex}{extension}"
