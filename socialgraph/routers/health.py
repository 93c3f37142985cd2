from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from socialgraph.config import settings

router = APIRouter()


@router.get("/ping", response_class=PlainTextResponse)
async def ping():
    return "hello"


@router.get("/status")
async def service_status():
    return {
        "status": "UP",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.version,
    }
