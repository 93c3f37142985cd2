"""
Redis adapter for the storage port.

Keyspace (all values are strings, decode_responses=True):
  • users:by_name / users:by_uid        — HASH  username ↔ uid
  • user:{uid}                         — HASH  profile + counters
  • user:{uid}:{relation}              — SET   followers, following, friends, …
  • user:{uid}:timeline                — LIST  FIFO timeline, newest at head
  • user:{uid}:timeline:{kind}:importance — ZSET importance-ranked timeline
  • post:{id}                          — HASH  post record
  • post:{id}:{plural}                 — LIST  action actors, newest at head
  • post:{id}:flags:{uid}              — HASH  action noun → "1"

Each method maps to exactly one Redis command so the port never promises
more atomicity than the server gives.
"""
from __future__ import annotations

import logging
from typing import Mapping, Optional

import redis.asyncio as aioredis

from socialgraph.config import settings

logger = logging.getLogger(__name__)


class RedisStore:

    def __init__(self, client: aioredis.Redis):
        self._r = client

    @classmethod
    async def connect(
        cls,
        host: Optional[str] = None,
        port: Optional[int] = None,
        db: Optional[int] = None,
    ) -> "RedisStore":
        host = host or settings.redis_host
        port = port or settings.redis_port
        client = aioredis.Redis(
            host=host,
            port=port,
            db=settings.redis_db if db is None else db,
            decode_responses=True,
        )
        await client.ping()
        logger.info("Redis connected at %s:%s", host, port)
        return cls(client)

    async def close(self) -> None:
        await self._r.aclose()

    # ── Plain keys ────────────────────────────────────────────────────────

    async def get(self, key: str) -> Optional[str]:
        return await self._r.get(key)

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> None:
        await self._r.set(key, value, ex=ex)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return await self._r.delete(*keys)

    async def exists(self, key: str) -> bool:
        return bool(await self._r.exists(key))

    async def incr(self, key: str) -> int:
        return await self._r.incr(key)

    async def expire(self, key: str, seconds: int) -> bool:
        return bool(await self._r.expire(key, seconds))

    # ── Hashes ────────────────────────────────────────────────────────────

    async def hget(self, key: str, field: str) -> Optional[str]:
        return await self._r.hget(key, field)

    async def hgetall(self, key: str) -> dict[str, str]:
        return await self._r.hgetall(key)

    async def hset(self, key: str, mapping: Mapping[str, str]) -> int:
        if not mapping:
            return 0
        return await self._r.hset(key, mapping=dict(mapping))

    async def hsetnx(self, key: str, field: str, value: str) -> bool:
        return bool(await self._r.hsetnx(key, field, value))

    async def hdel(self, key: str, *fields: str) -> int:
        if not fields:
            return 0
        return await self._r.hdel(key, *fields)

    async def hexists(self, key: str, field: str) -> bool:
        return bool(await self._r.hexists(key, field))

    async def hincrby(self, key: str, field: str, amount: int = 1) -> int:
        return await self._r.hincrby(key, field, amount)

    # ── Sets ──────────────────────────────────────────────────────────────

    async def sadd(self, key: str, *members: str) -> int:
        return await self._r.sadd(key, *members)

    async def srem(self, key: str, *members: str) -> int:
        return await self._r.srem(key, *members)

    async def sismember(self, key: str, member: str) -> bool:
        return bool(await self._r.sismember(key, member))

    async def smembers(self, key: str) -> set[str]:
        return set(await self._r.smembers(key))

    async def scard(self, key: str) -> int:
        return await self._r.scard(key)

    # ── Lists ─────────────────────────────────────────────────────────────

    async def lpush(self, key: str, *values: str) -> int:
        return await self._r.lpush(key, *values)

    async def lrange(self, key: str, start: int, stop: int) -> list[str]:
        return await self._r.lrange(key, start, stop)

    async def lrem(self, key: str, count: int, value: str) -> int:
        return await self._r.lrem(key, count, value)

    async def ltrim(self, key: str, start: int, stop: int) -> None:
        await self._r.ltrim(key, start, stop)

    async def llen(self, key: str) -> int:
        return await self._r.llen(key)

    # ── Sorted sets ───────────────────────────────────────────────────────

    async def zadd(self, key: str, mapping: Mapping[str, float]) -> int:
        return await self._r.zadd(key, dict(mapping))

    async def zrange(self, key: str, start: int, stop: int) -> list[str]:
        return await self._r.zrange(key, start, stop)

    async def zrem(self, key: str, *members: str) -> int:
        if not members:
            return 0
        return await self._r.zrem(key, *members)

    async def zcard(self, key: str) -> int:
        return await self._r.zcard(key)
