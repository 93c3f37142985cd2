"""
MinIO (S3-compatible) client for media storage.

Photos are stored as `<uuid>.jpg` objects in a single bucket. Clients can
either push bytes through the API (`upload`) or ask for a short-lived
pre-signed PUT URL and upload directly (`request_upload_key`).
"""
import logging
import uuid
from io import BytesIO
from typing import Any, Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from socialgraph.config import settings

logger = logging.getLogger(__name__)

_s3 = None


def init_minio() -> None:
    """Create the S3 client and ensure the media bucket exists."""
    global _s3
    client = boto3.client(
        "s3",
        endpoint_url=f"http://{settings.minio_endpoint}",
        aws_access_key_id=settings.minio_access_key,
        aws_secret_access_key=settings.minio_secret_key,
        config=Config(signature_version="s3v4"),
        region_name="us-east-1",
    )

    existing = [b["Name"] for b in client.list_buckets().get("Buckets", [])]
    if settings.minio_bucket not in existing:
        client.create_bucket(Bucket=settings.minio_bucket)
        logger.info("Created MinIO bucket '%s'", settings.minio_bucket)
    else:
        logger.info("MinIO bucket '%s' already exists", settings.minio_bucket)
    _s3 = client


def is_configured() -> bool:
    return _s3 is not None


def reset() -> None:
    global _s3
    _s3 = None


def object_url(key: str) -> str:
    return f"{settings.minio_public_url.rstrip('/')}/{settings.minio_bucket}/{key}"


def upload(data: bytes) -> Optional[str]:
    """Store `data` as a new jpeg object; return its URL, or None on failure."""
    if _s3 is None:
        logger.warning("Media storage not configured, cannot upload")
        return None

    key = f"{uuid.uuid4()}.jpg"
    try:
        _s3.put_object(
            Bucket=settings.minio_bucket,
            Key=key,
            Body=BytesIO(data),
            ContentType="image/jpeg",
        )
    except (BotoCoreError, ClientError) as exc:
        logger.error("Failed to upload media object %s: %s", key, exc)
        return None

    logger.debug("Uploaded media to MinIO: %s (%d bytes)", key, len(data))
    return object_url(key)


def request_upload_key() -> dict[str, Any]:
    """
    Pre-signed PUT for a fresh object. Shape:
      {"blob": {"uuid", "url"},
       "permissions": {"saskey", "readaccess", "writeaccess", "expiresIn"}}
    or {"error": ...} when storage is unavailable.
    """
    if _s3 is None:
        logger.warning("Media storage not configured, cannot issue upload key")
        return {"error": "Blob storage not configured"}

    blob_id = str(uuid.uuid4())
    key = f"{blob_id}.jpg"
    expires_in = settings.upload_key_expiry_seconds
    try:
        signed = _s3.generate_presigned_url(
            "put_object",
            Params={"Bucket": settings.minio_bucket, "Key": key},
            ExpiresIn=expires_in,
        )
    except (BotoCoreError, ClientError) as exc:
        logger.error("Failed to generate upload key: %s", exc)
        return {"error": "Failed to generate upload key"}

    logger.debug("Generated upload key for blob %s", blob_id)
    return {
        "blob": {"uuid": blob_id, "url": object_url(key)},
        "permissions": {
            "saskey": signed,
            "readaccess": True,
            "writeaccess": True,
            "expiresIn": expires_in,
        },
    }
