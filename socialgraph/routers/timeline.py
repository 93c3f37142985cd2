"""
Timeline endpoints — GET /timeline[/personal|/everyone]?index=&count=

/timeline reads the FIFO list (newest first); the two importance variants
read the ranked sets in ascending score order.
"""
from fastapi import APIRouter, Depends, Query

from socialgraph.dependencies import Principal, current_user, get_timeline_reader
from socialgraph.models import Importance
from socialgraph.schemas import TimelineResponse
from socialgraph.services.timeline import TimelineReader

router = APIRouter()


@router.get("/timeline", response_model=TimelineResponse)
async def get_timeline(
    index: int = Query(0, ge=0),
    count: int = Query(20, ge=0, le=500),
    principal: Principal = Depends(current_user),
    reader: TimelineReader = Depends(get_timeline_reader),
):
    return await reader.get_timeline(principal.uid, index, count)


@router.get("/timeline/personal", response_model=TimelineResponse)
async def get_personal_timeline(
    index: int = Query(0, ge=0),
    count: int = Query(20, ge=0, le=500),
    principal: Principal = Depends(current_user),
    reader: TimelineReader = Depends(get_timeline_reader),
):
    return await reader.get_timeline_by_importance(principal.uid, Importance.PERSONAL, index, count)


@router.get("/timeline/everyone", response_model=TimelineResponse)
async def get_everyone_timeline(
    index: int = Query(0, ge=0),
    count: int = Query(20, ge=0, le=500),
    principal: Principal = Depends(current_user),
    reader: TimelineReader = Depends(get_timeline_reader),
):
    return await reader.get_timeline_by_importance(principal.uid, Importance.EVERYONE, index, count)
