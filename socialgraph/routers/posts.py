"""
Post endpoints:
  POST /status                  — create a post and fan it out to followers
  POST /reshare                 — deliver an existing post to the caller's followers
  POST /like, /love, /fav, /share            — perform an action
  POST /unlike, /unlove, /unfav, /unshare    — reverse it
  GET  /likes, /loves, /faves, /shares       — list who performed it
"""
import logging

from fastapi import APIRouter, Depends, Query
from opentelemetry import trace

from socialgraph.dependencies import (
    Principal,
    current_user,
    get_action_engine,
    get_fanout_engine,
)
from socialgraph.models import Action
from socialgraph.schemas import (
    ActionListResponse,
    ActionRequest,
    PostResponse,
    ReshareRequest,
    StatusRequest,
)
from socialgraph.services.actions import SocialActionEngine
from socialgraph.services.fanout import FanoutEngine

logger = logging.getLogger(__name__)
router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post("/status", response_model=PostResponse)
async def create_status(
    body: StatusRequest,
    principal: Principal = Depends(current_user),
    fanout: FanoutEngine = Depends(get_fanout_engine),
):
    post = await fanout.create_status(principal.uid, body.content, body.type, body.url, body.md5)
    return PostResponse(
        id=post.id,
        type=post.type,
        uid=post.uid,
        content=post.content or "",
        url=post.url or "",
        created=post.created,
    )


@router.post("/reshare")
async def reshare_status(
    body: ReshareRequest,
    principal: Principal = Depends(current_user),
    fanout: FanoutEngine = Depends(get_fanout_engine),
):
    post = await fanout.reshare_status(principal.uid, body.uuid)
    return {"success": post is not None, "resharedPost": body.uuid}


def _perform_route(action: Action):
    async def perform(
        body: ActionRequest,
        principal: Principal = Depends(current_user),
        engine: SocialActionEngine = Depends(get_action_engine),
    ):
        with tracer.start_as_current_span(f"{action.noun}_post"):
            return await engine.perform(action, body.uuid, principal.uid)

    perform.__name__ = action.noun
    return perform


def _reverse_route(action: Action):
    async def reverse(
        body: ActionRequest,
        principal: Principal = Depends(current_user),
        engine: SocialActionEngine = Depends(get_action_engine),
    ):
        with tracer.start_as_current_span(f"un{action.noun}_post"):
            return await engine.reverse(action, body.uuid, principal.uid)

    reverse.__name__ = f"un{action.noun}"
    return reverse


def _list_route(action: Action):
    async def list_actions(
        uuid: str = Query(..., min_length=1),
        index: int = Query(0, ge=0),
        count: int = Query(20, ge=0, le=500),
        principal: Principal = Depends(current_user),
        engine: SocialActionEngine = Depends(get_action_engine),
    ):
        return await engine.list_actions(action, uuid, index, count)

    list_actions.__name__ = f"list_{action.plural}"
    return list_actions


for _action in Action:
    router.add_api_route(f"/{_action.noun}", _perform_route(_action), methods=["POST"])
    router.add_api_route(f"/un{_action.noun}", _reverse_route(_action), methods=["POST"])
    router.add_api_route(
        f"/{_action.plural}",
        _list_route(_action),
        methods=["GET"],
        response_model=ActionListResponse,
    )
