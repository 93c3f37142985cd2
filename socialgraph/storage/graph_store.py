"""
GraphStore — users, their relationship sets and per-user scalar data.

Keys:
  users:by_name                      HASH  username → uid
  users:by_uid                       HASH  uid → username
  user:{uid}                         HASH  profile + counters
  user:{uid}:{relation}              SET   member uids
  user:{uid}:crypto                  HASH  publicKey
  user:{uid}:devices                 SET   device ids
  user:{uid}:negative:keywords       HASH  keyword → keyword
  user:{uid}:images:blocked:md5      HASH  md5 → md5
  photos / videos                    HASH  uid → tally
"""
import logging
from typing import Optional

from socialgraph.models import Relation, User
from socialgraph.storage.port import StoragePort

logger = logging.getLogger(__name__)

USERS_BY_NAME = "users:by_name"
USERS_BY_UID = "users:by_uid"


def user_key(uid: str) -> str:
    return f"user:{uid}"


def relation_key(uid: str, relation: Relation) -> str:
    return f"user:{uid}:{relation.value}"


class GraphStore:

    def __init__(self, store: StoragePort):
        self.store = store

    # ── Identity ──────────────────────────────────────────────────────────

    async def claim_username(self, username: str, uid: str) -> bool:
        """Atomically reserve `username` for `uid`. False if already taken."""
        return await self.store.hsetnx(USERS_BY_NAME, username, uid)

    async def release_username(self, username: str) -> int:
        return await self.store.hdel(USERS_BY_NAME, username)

    async def save(self, user: User) -> User:
        await self.store.hset(user_key(user.uid), user.to_map())
        await self.store.hset(USERS_BY_UID, {user.uid: user.username})
        logger.debug("Saved user %s (%s)", user.username, user.uid)
        return user

    async def exists(self, uid: str) -> bool:
        return await self.store.hexists(USERS_BY_UID, uid)

    async def find_uid_by_username(self, username: str) -> Optional[str]:
        return await self.store.hget(USERS_BY_NAME, username)

    async def find_username_by_uid(self, uid: str) -> Optional[str]:
        return await self.store.hget(USERS_BY_UID, uid)

    async def find_by_uid(self, uid: str) -> Optional[User]:
        data = await self.store.hgetall(user_key(uid))
        if not data:
            return None
        return User.from_map(data)

    async def find_by_username(self, username: str) -> Optional[User]:
        uid = await self.find_uid_by_username(username)
        if uid is None:
            return None
        return await self.find_by_uid(uid)

    async def get_field(self, uid: str, field: str) -> Optional[str]:
        return await self.store.hget(user_key(uid), field)

    async def update_field(self, uid: str, field: str, value: str) -> None:
        await self.store.hset(user_key(uid), {field: value})

    async def increment_field(self, uid: str, field: str, delta: int = 1) -> int:
        return await self.store.hincrby(user_key(uid), field, delta)

    # ── Relationship sets ─────────────────────────────────────────────────

    async def add_member(self, uid: str, relation: Relation, member_uid: str) -> int:
        return await self.store.sadd(relation_key(uid, relation), member_uid)

    async def remove_member(self, uid: str, relation: Relation, member_uid: str) -> int:
        return await self.store.srem(relation_key(uid, relation), member_uid)

    async def is_member(self, uid: str, relation: Relation, member_uid: str) -> bool:
        return await self.store.sismember(relation_key(uid, relation), member_uid)

    async def members(self, uid: str, relation: Relation) -> set[str]:
        return await self.store.smembers(relation_key(uid, relation))

    async def member_count(self, uid: str, relation: Relation) -> int:
        return await self.store.scard(relation_key(uid, relation))

    # ── Per-user scalar data ──────────────────────────────────────────────

    async def get_public_rsa_key(self, uid: str) -> Optional[str]:
        return await self.store.hget(f"user:{uid}:crypto", "publicKey")

    async def set_public_rsa_key(self, uid: str, public_key: str) -> None:
        await self.store.hset(f"user:{uid}:crypto", {"publicKey": public_key})

    async def get_devices(self, uid: str) -> set[str]:
        return await self.store.smembers(f"user:{uid}:devices")

    async def add_device(self, uid: str, device_id: str) -> int:
        return await self.store.sadd(f"user:{uid}:devices", device_id)

    async def negative_keywords(self, uid: str) -> set[str]:
        return set(await self.store.hgetall(f"user:{uid}:negative:keywords"))

    async def add_negative_keyword(self, uid: str, keyword: str) -> bool:
        return await self.store.hsetnx(f"user:{uid}:negative:keywords", keyword, keyword)

    async def block_image(self, uid: str, md5: str) -> bool:
        return await self.store.hsetnx(f"user:{uid}:images:blocked:md5", md5, md5)

    async def increment_media_tally(self, uid: str, tally: str) -> int:
        """`tally` is 'photos' or 'videos'."""
        return await self.store.hincrby(tally, uid, 1)
