"""
Fan-out on write.

CreateStatus persists the post and then pushes its id into every
follower's three timeline structures:

  user:{uid}:timeline                       FIFO list, newest at head
  user:{uid}:timeline:personal:importance   ZSET, score 0
  user:{uid}:timeline:everyone:importance   ZSET, score 0

A follower whose negative-keyword list contains any token of the post is
skipped entirely. Delivery is sequential and not transactional: if the
store fails half way, the followers already written keep the post.
"""
import logging
import re
import time
from typing import Optional

from opentelemetry import trace

from socialgraph.config import settings
from socialgraph.models import Importance, Post, PostType, Relation, new_id
from socialgraph.storage.graph_store import GraphStore
from socialgraph.storage.post_store import PostStore
from socialgraph.telemetry import FANOUT_DELIVERIES_TOTAL, POST_CREATED_TOTAL

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

# A word is a run of word characters, optionally joined by an apostrophe or
# a dot ("don't", "3.14"). Punctuation and whitespace are never tokens.
_WORD = re.compile(r"\w+(?:['’.]\w+)*")

# Importance scores are not computed yet; every entry ranks equally.
DEFAULT_IMPORTANCE = 0.0


def tokenize(text: Optional[str]) -> list[str]:
    """
    Split `text` into distinct words, first-seen order, case preserved.
    Only tokens starting with a letter or digit are kept.
    """
    if not text:
        return []
    tokens = (t for t in _WORD.findall(text) if t[0].isalnum())
    return list(dict.fromkeys(tokens))


class FanoutEngine:

    def __init__(self, posts: PostStore, graph: GraphStore, max_timeline_size: Optional[int] = None):
        self.posts = posts
        self.graph = graph
        self.max_timeline_size = (
            settings.timeline_max_size if max_timeline_size is None else max_timeline_size
        )

    async def create_status(
        self,
        author_uid: str,
        content: str,
        post_type: str = PostType.TEXT.value,
        url: Optional[str] = None,
        md5: Optional[str] = None,
    ) -> Post:
        with tracer.start_as_current_span("create_status") as span:
            kind = PostType.parse(post_type)
            post = Post(
                id=new_id(),
                uid=author_uid,
                type=kind.value,
                content=content,
                url=url,
                md5=md5,
                created=str(int(time.time())),
            )
            await self.posts.save(post)
            span.set_attribute("post.id", post.id)
            span.set_attribute("post.uid", author_uid)

            # the author sees their own post in the FIFO timeline
            await self.posts.push_to_timeline(author_uid, post.id, self.max_timeline_size)

            if kind is PostType.PHOTO:
                await self.graph.increment_media_tally(author_uid, "photos")
            elif kind is PostType.VIDEO:
                await self.graph.increment_media_tally(author_uid, "videos")

            POST_CREATED_TOTAL.labels(type=kind.value).inc()
            logger.info("Post created: %s by user %s", post.id, author_uid)

            await self._fan_out(author_uid, post.id, tokenize(content))
            return post

    async def reshare_status(self, actor_uid: str, post_id: str) -> Optional[Post]:
        """
        Deliver an existing post to the actor's followers. No new post is
        created. A missing post is a no-op and returns None.
        """
        post = await self.posts.find_by_id(post_id)
        if post is None:
            logger.debug("Reshare of missing post %s by %s ignored", post_id, actor_uid)
            return None

        with tracer.start_as_current_span("reshare_status") as span:
            span.set_attribute("post.id", post_id)
            span.set_attribute("reshare.uid", actor_uid)
            await self._fan_out(actor_uid, post_id, tokenize(post.content))
        return post

    async def _fan_out(self, source_uid: str, post_id: str, tokens: list[str]) -> int:
        with tracer.start_as_current_span("fanout") as span:
            t0 = time.perf_counter()
            followers = await self.graph.members(source_uid, Relation.FOLLOWERS)
            span.set_attribute("fanout.follower_count", len(followers))

            if not followers:
                logger.info("Post %s — %s has no followers, skipping fan-out", post_id, source_uid)
                return 0

            delivered = 0
            for follower in followers:
                if await self._is_filtered(follower, tokens):
                    FANOUT_DELIVERIES_TOTAL.labels(outcome="filtered").inc()
                    continue
                await self._deliver(follower, post_id)
                FANOUT_DELIVERIES_TOTAL.labels(outcome="delivered").inc()
                delivered += 1

            elapsed = (time.perf_counter() - t0) * 1000
            span.set_attribute("fanout.delivered", delivered)
            logger.info(
                "Fan-out complete: post %s → %d/%d followers (%.1fms)",
                post_id, delivered, len(followers), elapsed,
            )
            return delivered

    async def _is_filtered(self, follower_uid: str, tokens: list[str]) -> bool:
        if not tokens:
            return False
        negative = await self.graph.negative_keywords(follower_uid)
        return bool(negative) and any(token in negative for token in tokens)

    async def _deliver(self, follower_uid: str, post_id: str) -> None:
        evicted = await self.posts.push_to_timeline(follower_uid, post_id, self.max_timeline_size)
        for kind in Importance:
            await self.posts.add_to_importance_set(follower_uid, kind, post_id, DEFAULT_IMPORTANCE)
        # importance sets hold exactly what the FIFO window holds
        await self.posts.remove_from_importance_sets(follower_uid, evicted)
