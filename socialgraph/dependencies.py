"""
FastAPI dependencies: the shared storage port and the engines built on it,
plus bearer-token authentication.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from socialgraph.errors import Unauthenticated
from socialgraph.services.accounts import AccountService
from socialgraph.services.actions import SocialActionEngine
from socialgraph.services.fanout import FanoutEngine
from socialgraph.services.graph_engine import GraphEngine
from socialgraph.services.timeline import TimelineReader
from socialgraph.storage.graph_store import GraphStore
from socialgraph.storage.port import StoragePort
from socialgraph.storage.post_store import PostStore
from socialgraph.storage.token_store import TokenStore

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class Principal:
    uid: str
    username: str
    token: str


def get_store(request: Request) -> StoragePort:
    return request.app.state.store


def get_graph_store(store: StoragePort = Depends(get_store)) -> GraphStore:
    return GraphStore(store)


def get_post_store(store: StoragePort = Depends(get_store)) -> PostStore:
    return PostStore(store)


def get_account_service(
    store: StoragePort = Depends(get_store),
    graph: GraphStore = Depends(get_graph_store),
) -> AccountService:
    return AccountService(graph, TokenStore(store))


def get_graph_engine(graph: GraphStore = Depends(get_graph_store)) -> GraphEngine:
    return GraphEngine(graph)


def get_action_engine(
    posts: PostStore = Depends(get_post_store),
    graph: GraphStore = Depends(get_graph_store),
) -> SocialActionEngine:
    return SocialActionEngine(posts, graph)


def get_fanout_engine(
    posts: PostStore = Depends(get_post_store),
    graph: GraphStore = Depends(get_graph_store),
) -> FanoutEngine:
    return FanoutEngine(posts, graph)


def get_timeline_reader(
    posts: PostStore = Depends(get_post_store),
    graph: GraphStore = Depends(get_graph_store),
) -> TimelineReader:
    return TimelineReader(posts, graph)


async def current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    accounts: AccountService = Depends(get_account_service),
) -> Principal:
    """Resolve the bearer token to the calling user; 401 otherwise."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Full authentication is required to access this resource")
    claims = await accounts.verify_token(credentials.credentials)
    return Principal(uid=claims["uid"], username=claims["sub"], token=credentials.credentials)
