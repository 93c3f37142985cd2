"""
Social graph endpoints:
  GET  /me, /user/{uid}            — profiles
  POST /follow, /unfollow          — follow-edge mutations
  GET  /followers, /following, ... — one listing route per relation set
  POST /add/keyword/negative       — hide posts containing a word
  POST /add/image/block            — block an image by md5
  GET  /devices/registered, /me/rsa/public/key, /rsa/public/key
"""
import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, Query

from socialgraph.dependencies import (
    Principal,
    current_user,
    get_account_service,
    get_graph_engine,
)
from socialgraph.models import Relation
from socialgraph.schemas import FollowRequest, MembersResponse, UserResponse
from socialgraph.services.accounts import AccountService
from socialgraph.services.graph_engine import GraphEngine

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def me(
    principal: Principal = Depends(current_user),
    accounts: AccountService = Depends(get_account_service),
):
    return await accounts.profile(principal.uid)


@router.get("/user/{uid}", response_model=UserResponse)
async def get_user(
    uid: str,
    principal: Principal = Depends(current_user),
    accounts: AccountService = Depends(get_account_service),
):
    return await accounts.profile(uid)


@router.post("/follow")
async def follow(
    body: FollowRequest,
    principal: Principal = Depends(current_user),
    engine: GraphEngine = Depends(get_graph_engine),
):
    await engine.follow(principal.uid, body.uid, body.username)
    return {
        "success": True,
        "following.uid": body.uid or "",
        "following.username": body.username or "",
    }


@router.post("/unfollow")
async def unfollow(
    body: FollowRequest,
    principal: Principal = Depends(current_user),
    engine: GraphEngine = Depends(get_graph_engine),
):
    await engine.unfollow(principal.uid, body.uid, body.username)
    return {"success": True, "unfollowed": body.uid or body.username}


def _members_route(relation: Relation):
    async def list_members(
        principal: Principal = Depends(current_user),
        engine: GraphEngine = Depends(get_graph_engine),
    ):
        return await engine.list_members(principal.uid, relation)

    list_members.__name__ = f"list_{relation.value}"
    return list_members


for _relation in Relation:
    router.add_api_route(
        f"/{_relation.value}",
        _members_route(_relation),
        methods=["GET"],
        response_model=MembersResponse,
    )


@router.post("/add/keyword/negative")
async def add_negative_keyword(
    keyword: str = Query(..., min_length=1),
    principal: Principal = Depends(current_user),
    engine: GraphEngine = Depends(get_graph_engine),
):
    added = await engine.add_negative_keyword(principal.uid, keyword)
    return {"keyword": keyword, "added": added}


@router.post("/add/image/block")
async def block_image(
    md5: str = Query(..., min_length=1),
    principal: Principal = Depends(current_user),
    engine: GraphEngine = Depends(get_graph_engine),
):
    blocked = await engine.block_image(principal.uid, md5)
    return {"md5": md5, "blocked": blocked}


@router.get("/devices/registered")
async def registered_devices(
    principal: Principal = Depends(current_user),
    engine: GraphEngine = Depends(get_graph_engine),
):
    start = time.perf_counter()
    devices = await engine.registered_devices(principal.uid)
    duration = (time.perf_counter() - start) * 1000
    return {"devices": devices, "count": len(devices), "duration": round(duration, 2)}


@router.get("/me/rsa/public/key")
async def my_public_key(
    principal: Principal = Depends(current_user),
    engine: GraphEngine = Depends(get_graph_engine),
):
    return {"publicKey": await engine.public_rsa_key(principal.uid)}


@router.get("/rsa/public/key")
async def public_key(
    uid: Optional[str] = None,
    principal: Principal = Depends(current_user),
    engine: GraphEngine = Depends(get_graph_engine),
):
    return {"publicKey": await engine.public_rsa_key(uid or principal.uid)}
