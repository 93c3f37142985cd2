"""
Timeline read path.

A page of post ids comes from either the FIFO list or one of the
importance sets; each id is then hydrated into a TimelineEntity with the
viewer's like/love/fav flags and the author's public profile. Ids whose
post hash is gone are dropped from the page rather than failing it.
"""
import logging
import time

from opentelemetry import trace

from socialgraph.models import Action, Importance
from socialgraph.schemas import Activity, Actor, TimelineEntity, TimelineResponse
from socialgraph.storage.graph_store import GraphStore
from socialgraph.storage.post_store import PostStore
from socialgraph.telemetry import TIMELINE_LATENCY

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class TimelineReader:

    def __init__(self, posts: PostStore, graph: GraphStore):
        self.posts = posts
        self.graph = graph

    async def get_timeline(self, viewer_uid: str, offset: int = 0, limit: int = 20) -> TimelineResponse:
        with tracer.start_as_current_span("get_timeline") as span:
            span.set_attribute("user.id", viewer_uid)
            start = time.perf_counter()
            post_ids = await self.posts.timeline_page(viewer_uid, offset, limit)
            return await self._compose(viewer_uid, post_ids, start, "fifo")

    async def get_timeline_by_importance(
        self,
        viewer_uid: str,
        kind: Importance,
        offset: int = 0,
        limit: int = 20,
    ) -> TimelineResponse:
        with tracer.start_as_current_span("get_timeline_by_importance") as span:
            span.set_attribute("user.id", viewer_uid)
            span.set_attribute("timeline.kind", kind.value)
            start = time.perf_counter()
            post_ids = await self.posts.importance_page(viewer_uid, kind, offset, limit)
            return await self._compose(viewer_uid, post_ids, start, kind.value)

    async def _compose(
        self, viewer_uid: str, post_ids: list[str], start: float, source: str
    ) -> TimelineResponse:
        entities: list[TimelineEntity] = []
        for post_id in post_ids:
            post = await self.posts.find_by_id(post_id)
            if post is None:
                logger.debug("Dropping dangling post %s from %s timeline of %s", post_id, source, viewer_uid)
                continue

            activity = Activity(
                uuid=post.id,
                type=post.type,
                content=post.content,
                url=post.url,
                created=post.created,
                md5=post.md5,
                is_liked=await self.posts.has_action(post.id, viewer_uid, Action.LIKE),
                is_loved=await self.posts.has_action(post.id, viewer_uid, Action.LOVE),
                is_faved=await self.posts.has_action(post.id, viewer_uid, Action.FAV),
            )

            actor = None
            if post.uid:
                actor = Actor(
                    uuid=post.uid,
                    username=await self.graph.find_username_by_uid(post.uid),
                    fullname=await self.graph.get_field(post.uid, "fullname"),
                )

            entities.append(TimelineEntity(activity=activity, actor=actor))

        elapsed = time.perf_counter() - start
        TIMELINE_LATENCY.labels(source=source).observe(elapsed)
        return TimelineResponse(
            entities=entities,
            count=len(entities),
            duration=round(elapsed * 1000, 2),
        )
