"""
PostStore — post records, timelines and action bookkeeping.

Keys:
  post:{id}                              HASH  post record
  post:{id}{action.key}                  LIST  actor uids, newest at head
  post:{id}:flags:{uid}                  HASH  action noun → "1"
  user:{uid}:timeline                    LIST  post ids, newest at head
  user:{uid}:timeline:{kind}:importance  ZSET  post id → importance score
"""
import logging
from typing import Optional

from socialgraph.models import Action, Importance, Post
from socialgraph.storage.port import StoragePort

logger = logging.getLogger(__name__)


def post_key(post_id: str) -> str:
    return f"post:{post_id}"


def timeline_key(uid: str) -> str:
    return f"user:{uid}:timeline"


def importance_key(uid: str, kind: Importance) -> str:
    return f"user:{uid}:timeline:{kind.value}:importance"


def action_list_key(post_id: str, action: Action) -> str:
    return f"post:{post_id}{action.key}"


def action_flag_key(post_id: str, actor_uid: str) -> str:
    return f"post:{post_id}:flags:{actor_uid}"


class PostStore:

    def __init__(self, store: StoragePort):
        self.store = store

    # ── Posts ─────────────────────────────────────────────────────────────

    async def exists(self, post_id: str) -> bool:
        return await self.store.exists(post_key(post_id))

    async def find_by_id(self, post_id: str) -> Optional[Post]:
        data = await self.store.hgetall(post_key(post_id))
        if not data:
            return None
        return Post.from_map(data)

    async def save(self, post: Post) -> Post:
        await self.store.hset(post_key(post.id), post.to_map())
        logger.debug("Saved post %s by user %s", post.id, post.uid)
        return post

    # ── FIFO timeline ─────────────────────────────────────────────────────

    async def push_to_timeline(
        self, uid: str, post_id: str, max_size: int = 0
    ) -> list[str]:
        """Prepend to the FIFO timeline and trim it to ``max_size``.

        Returns the ids that fell off the tail and are no longer anywhere in
        the kept window, so callers can drop them from the importance sets.
        """
        key = timeline_key(uid)
        length = await self.store.lpush(key, post_id)
        if not max_size or length <= max_size:
            return []
        dropped = await self.store.lrange(key, max_size, -1)
        await self.store.ltrim(key, 0, max_size - 1)
        kept = set(await self.store.lrange(key, 0, -1))
        return [pid for pid in dict.fromkeys(dropped) if pid not in kept]

    async def timeline_page(self, uid: str, offset: int, limit: int) -> list[str]:
        if limit <= 0:
            return []
        return await self.store.lrange(timeline_key(uid), offset, offset + limit - 1)

    # ── Importance-ranked timelines ───────────────────────────────────────

    async def add_to_importance_set(
        self, uid: str, kind: Importance, post_id: str, score: float
    ) -> int:
        return await self.store.zadd(importance_key(uid, kind), {post_id: score})

    async def remove_from_importance_sets(self, uid: str, post_ids: list[str]) -> int:
        if not post_ids:
            return 0
        removed = 0
        for kind in Importance:
            removed += await self.store.zrem(importance_key(uid, kind), *post_ids)
        return removed

    async def importance_page(
        self, uid: str, kind: Importance, offset: int, limit: int
    ) -> list[str]:
        if limit <= 0:
            return []
        return await self.store.zrange(importance_key(uid, kind), offset, offset + limit - 1)

    # ── Actions ───────────────────────────────────────────────────────────

    async def add_action(self, post_id: str, action: Action, actor_uid: str) -> int:
        return await self.store.lpush(action_list_key(post_id, action), actor_uid)

    async def remove_action(self, post_id: str, action: Action, actor_uid: str) -> int:
        """Remove every occurrence of the actor; returns how many were removed."""
        return await self.store.lrem(action_list_key(post_id, action), 0, actor_uid)

    async def action_actors(
        self, post_id: str, action: Action, offset: int, limit: int
    ) -> list[str]:
        if limit <= 0:
            return []
        return await self.store.lrange(
            action_list_key(post_id, action), offset, offset + limit - 1
        )

    async def action_count(self, post_id: str, action: Action) -> int:
        return await self.store.llen(action_list_key(post_id, action))

    async def has_action(self, post_id: str, actor_uid: str, action: Action) -> bool:
        return await self.store.hexists(action_flag_key(post_id, actor_uid), action.noun)

    async def set_action_flag(self, post_id: str, actor_uid: str, action: Action) -> bool:
        """True only for the call that created the flag."""
        return await self.store.hsetnx(action_flag_key(post_id, actor_uid), action.noun, "1")

    async def clear_action_flag(self, post_id: str, actor_uid: str, action: Action) -> int:
        return await self.store.hdel(action_flag_key(post_id, actor_uid), action.noun)
