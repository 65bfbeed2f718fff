"""Photo storage backends (local filesystem or S3-compatible)."""

from __future__ import annotations

import os
import re
import time
from typing import BinaryIO
from uuid import UUID

import boto3
from botocore.client import BaseClient
from botocore.exceptions import BotoCoreError, ClientError

from fixmypidge.core.config import settings
from fixmypidge.core.exceptions import DependencyError, ValidationError


# =============================================================================
# Configuration
# =============================================================================

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "webp", "gif", "heic"}
ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/gif",
    "image/heic",
}

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


# =============================================================================
# Storage Backend
# =============================================================================

def get_s3_client() -> BaseClient:
    """Return a configured S3 client (supports S3-compatible endpoints)."""
    return boto3.client(
        "s3",
        region_name=settings.S3_REGION or None,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
        endpoint_url=settings.S3_ENDPOINT_URL.rstrip("/") or None,
    )


def _get_local_storage_path() -> str:
    path = settings.LOCAL_STORAGE_PATH
    os.makedirs(path, exist_ok=True)
    return path


# =============================================================================
# File Operations
# =============================================================================

def validate_photo(filename: str, content_type: str, file_size: int) -> None:
    """Raise ValidationError unless the upload is an image within the size cap."""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(f"File extension '.{ext}' not allowed")
    if content_type not in ALLOWED_MIME_TYPES:
        raise ValidationError(f"Content type '{content_type}' not allowed")
    if file_size <= 0:
        raise ValidationError("File is empty")
    if file_size > settings.MAX_PHOTO_BYTES:
        max_mb = settings.MAX_PHOTO_BYTES / (1024 * 1024)
        raise ValidationError(f"File size exceeds {max_mb:.0f} MB limit")


def build_storage_key(case_id: UUID, filename: str) -> str:
    """cases/<case_id>/<epoch_ms>-<filename>"""
    safe_name = _UNSAFE_FILENAME_CHARS.sub("_", os.path.basename(filename)) or "photo"
    return f"cases/{case_id}/{int(time.time() * 1000)}-{safe_name}"


def public_url(storage_key: str) -> str:
    """Durable URL for a stored object."""
    if settings.STORAGE_BACKEND == "s3":
        if settings.S3_ENDPOINT_URL:
            return f"{settings.S3_ENDPOINT_URL.rstrip('/')}/{settings.S3_BUCKET}/{storage_key}"
        return f"https://{settings.S3_BUCKET}.s3.{settings.S3_REGION}.amazonaws.com/{storage_key}"
    return f"{settings.PUBLIC_STORAGE_BASE_URL.rstrip('/')}/{storage_key}"


def local_file_path(storage_key: str) -> str | None:
    """
    Absolute path of a locally stored object.

    None when the key escapes LOCAL_STORAGE_PATH or the file is missing.
    """
    root = os.path.realpath(settings.LOCAL_STORAGE_PATH)
    path = os.path.realpath(os.path.join(root, storage_key))
    if os.path.commonpath([root, path]) != root or path == root:
        return None
    if not os.path.isfile(path):
        return None
    return path


def store_file(storage_key: str, file: BinaryIO, content_type: str) -> str:
    """Store file to configured backend and return its public URL."""
    file.seek(0)
    if settings.STORAGE_BACKEND == "s3":
        try:
            get_s3_client().upload_fileobj(
                file,
                settings.S3_BUCKET,
                storage_key,
                ExtraArgs={"ContentType": content_type},
            )
        except (BotoCoreError, ClientError) as exc:
            raise DependencyError("Photo storage unavailable") from exc
    else:
        path = os.path.join(_get_local_storage_path(), storage_key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, "wb") as f:
                f.write(file.read())
        except OSError as exc:
            raise DependencyError("Photo storage unavailable") from exc
    return public_url(storage_key)
