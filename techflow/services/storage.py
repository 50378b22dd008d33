"""
Attachment storage
Files live under UPLOAD_DIR ("local") or in a private Cloudflare R2 bucket ("r2").
The database only stores the object key.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import HTTPException

from ..config import (
    MAX_UPLOAD_MB,
    R2_ACCESS_KEY_ID,
    R2_ACCOUNT_ID,
    R2_BUCKET_NAME,
    R2_SECRET_ACCESS_KEY,
    STORAGE_BACKEND,
    UPLOAD_DIR,
)

logger = logging.getLogger(__name__)

# Presigned URL expiration time (1 hour)
PRESIGNED_URL_EXPIRATION = 3600

MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024

ALLOWED_CONTENT_TYPES = [
    # Images
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "image/gif",
    "image/heic",
    "image/heif",
    # Documents
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/plain",
    "text/csv",
    # Audio (technician voice notes)
    "audio/mpeg",
    "audio/mp4",
    "audio/wav",
    "audio/x-wav",
    "audio/webm",
    "audio/ogg",
]

DANGEROUS_FILENAME_CHARS = ["..", "/", "\\", "<", ">", ":", '"', "|", "?", "*"]


def get_r2_client():
    """Get configured boto3 client for Cloudflare R2"""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=R2_ACCESS_KEY_ID,
        aws_secret_access_key=R2_SECRET_ACCESS_KEY,
        config=Config(signature_version="s3v4"),
        region_name="auto",
    )


def file_type_for(content_type: Optional[str]) -> str:
    """Attachment category from a MIME type"""
    content_type = (content_type or "").lower()
    if content_type.startswith("image/"):
        return "image"
    if content_type.startswith("audio/"):
        return "audio"
    return "document"


def validate_filename(filename: Optional[str]) -> str:
    if not filename or not filename.strip():
        raise HTTPException(status_code=400, detail="Filename is required")

    for char in DANGEROUS_FILENAME_CHARS:
        if char in filename:
            logger.warning(f"❌ Dangerous character '{char}' detected in filename: '{filename}'")
            raise HTTPException(
                status_code=400, detail=f"Invalid filename - contains dangerous character '{char}'"
            )

    if len(filename) > 255:
        raise HTTPException(status_code=400, detail="Filename too long - maximum 255 characters")
    return filename.strip()


def validate_upload(filename: Optional[str], content_type: Optional[str], size_bytes: int) -> str:
    """
    Check an upload before it is stored.

    Returns:
        The validated filename

    Raises:
        HTTPException: 400 for a bad type or filename, 413 when too large
    """
    safe_name = validate_filename(filename)

    if (content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(status_code=400, detail=f"File type not allowed: {content_type}")

    if size_bytes == 0:
        raise HTTPException(status_code=400, detail="File is empty")

    if size_bytes > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=(
                f"File size exceeds {MAX_UPLOAD_MB}MB limit. "
                f"Your file is {size_bytes / (1024 * 1024):.2f}MB."
            ),
        )
    return safe_name


def build_key(order_id: int, filename: str) -> str:
    """Unique storage key: service-orders/{order_id}/{uuid}_{filename}"""
    safe_filename = "".join(c for c in filename if c.isalnum() or c in "._-")[:100] or "file"
    return f"service-orders/{order_id}/{uuid.uuid4().hex}_{safe_filename}"


def local_path(key: str) -> Path:
    root = Path(UPLOAD_DIR).resolve()
    path = (root / key).resolve()
    if root not in path.parents:
        raise HTTPException(status_code=400, detail="Invalid storage key")
    return path


def save_file(key: str, contents: bytes, content_type: str) -> None:
    if STORAGE_BACKEND == "r2":
        try:
            get_r2_client().put_object(
                Bucket=R2_BUCKET_NAME, Key=key, Body=contents, ContentType=content_type
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"❌ R2 upload failed for {key}: {e}")
            raise HTTPException(status_code=502, detail="File storage is unavailable") from e
    else:
        path = local_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(contents)

    logger.info(f"📤 Stored {key} ({len(contents)} bytes, {STORAGE_BACKEND})")


def delete_file(key: str) -> bool:
    """Remove a stored object. Missing objects are not an error"""
    try:
        if STORAGE_BACKEND == "r2":
            get_r2_client().delete_object(Bucket=R2_BUCKET_NAME, Key=key)
        else:
            path = local_path(key)
            if path.exists():
                os.remove(path)
        logger.info(f"🗑️ Deleted stored file {key}")
        return True
    except (BotoCoreError, ClientError, OSError) as e:
        logger.error(f"❌ Failed to delete stored file {key}: {e}")
        return False


def generate_presigned_url(key: str, expiration: int = PRESIGNED_URL_EXPIRATION) -> str:
    """Generate a presigned URL for accessing a private object in R2"""
    try:
        url = get_r2_client().generate_presigned_url(
            "get_object",
            Params={"Bucket": R2_BUCKET_NAME, "Key": key},
            ExpiresIn=expiration,
        )
        logger.info(f"✅ Generated presigned URL for key: {key}")
        return url
    except (BotoCoreError, ClientError) as e:
        logger.error(f"❌ Failed to generate presigned URL for key {key}: {e}")
        raise
