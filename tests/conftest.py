import os

# Settings are read at import time; pin the test environment first.
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["OTEL_ENABLED"] = "false"
os.environ["MINIO_ENABLED"] = "false"
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-at-least-32-bytes")

import pytest  # noqa: E402

from socialgraph.models import User  # noqa: E402
from socialgraph.services.actions import SocialActionEngine  # noqa: E402
from socialgraph.services.fanout import FanoutEngine  # noqa: E402
from socialgraph.services.graph_engine import GraphEngine  # noqa: E402
from socialgraph.services.timeline import TimelineReader  # noqa: E402
from socialgraph.storage.graph_store import GraphStore  # noqa: E402
from socialgraph.storage.memory import MemoryStore  # noqa: E402
from socialgraph.storage.post_store import PostStore  # noqa: E402


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def graph(store):
    return GraphStore(store)


@pytest.fixture
def posts(store):
    return PostStore(store)


@pytest.fixture
def graph_engine(graph):
    return GraphEngine(graph)


@pytest.fixture
def action_engine(posts, graph):
    return SocialActionEngine(posts, graph)


@pytest.fixture
def fanout(posts, graph):
    return FanoutEngine(posts, graph)


@pytest.fixture
def reader(posts, graph):
    return TimelineReader(posts, graph)


@pytest.fixture
def make_user(graph):
    """Register a bare user record directly in the graph store."""

    async def _make(uid: str, username: str | None = None, fullname: str | None = None) -> User:
        username = username or uid
        user = User(uid=uid, username=username, fullname=fullname or username.title())
        assert await graph.claim_username(username, uid)
        await graph.save(user)
        return user

    return _make
