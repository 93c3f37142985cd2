"""
Media endpoints:
  POST /upload               — raw image bytes in the body, stored in MinIO
  POST /request/storage/key  — pre-signed URL for a direct client upload
"""
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from socialgraph.clients import minio_client
from socialgraph.dependencies import Principal, current_user
from socialgraph.errors import IncompleteRequest

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/upload")
async def upload_media(request: Request, principal: Principal = Depends(current_user)):
    data = await request.body()
    if not data:
        raise IncompleteRequest("Request body must contain the media bytes")

    logger.debug("Upload requested by %s, size: %d bytes", principal.uid, len(data))
    # boto3 is blocking
    url = await run_in_threadpool(minio_client.upload, data)
    if url is None:
        return JSONResponse(status_code=500, content={"error": "Upload failed"})
    return {"url": url}


@router.post("/request/storage/key")
async def request_storage_key(principal: Principal = Depends(current_user)):
    logger.debug("Storage key requested by %s", principal.uid)
    return await run_in_threadpool(minio_client.request_upload_key)
