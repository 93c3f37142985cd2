"""
Storage port — the only surface the stores and engines touch.

The contract mirrors the Redis command set the keyspace is modelled on:
plain keys, hashes, sets, lists and sorted sets, each operation atomic on
its own key and nothing atomic across keys. Two adapters implement it:

  • RedisStore   — redis.asyncio, used in every deployment
  • MemoryStore  — in-process dictionaries with the same semantics
"""
from __future__ import annotations

from typing import Mapping, Optional, Protocol

from socialgraph.errors import Internal


class StorageError(Internal):
    """A storage operation failed or was applied to a key of the wrong type."""

    def __init__(self, description: str):
        super().__init__(description, error="storage_error")


class StoragePort(Protocol):

    # ── Plain keys ────────────────────────────────────────────────────────
    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> None: ...

    async def delete(self, *keys: str) -> int: ...

    async def exists(self, key: str) -> bool: ...

    async def incr(self, key: str) -> int: ...

    async def expire(self, key: str, seconds: int) -> bool: ...

    # ── Hashes ────────────────────────────────────────────────────────────
    async def hget(self, key: str, field: str) -> Optional[str]: ...

    async def hgetall(self, key: str) -> dict[str, str]: ...

    async def hset(self, key: str, mapping: Mapping[str, str]) -> int: ...

    async def hsetnx(self, key: str, field: str, value: str) -> bool:
        """Set `field` only if absent. True when this call created it."""
        ...

    async def hdel(self, key: str, *fields: str) -> int: ...

    async def hexists(self, key: str, field: str) -> bool: ...

    async def hincrby(self, key: str, field: str, amount: int = 1) -> int: ...

    # ── Sets ──────────────────────────────────────────────────────────────
    async def sadd(self, key: str, *members: str) -> int: ...

    async def srem(self, key: str, *members: str) -> int: ...

    async def sismember(self, key: str, member: str) -> bool: ...

    async def smembers(self, key: str) -> set[str]: ...

    async def scard(self, key: str) -> int: ...

    # ── Lists ─────────────────────────────────────────────────────────────
    async def lpush(self, key: str, *values: str) -> int:
        """Prepend values; returns the list length after the push."""
        ...

    async def lrange(self, key: str, start: int, stop: int) -> list[str]:
        """Inclusive range, negative indexes count from the tail."""
        ...

    async def lrem(self, key: str, count: int, value: str) -> int:
        """Remove occurrences of value (count=0 removes all)."""
        ...

    async def ltrim(self, key: str, start: int, stop: int) -> None: ...

    async def llen(self, key: str) -> int: ...

    # ── Sorted sets ───────────────────────────────────────────────────────
    async def zadd(self, key: str, mapping: Mapping[str, float]) -> int: ...

    async def zrange(self, key: str, start: int, stop: int) -> list[str]:
        """Ascending by score, ties broken by member byte order."""
        ...

    async def zrem(self, key: str, *members: str) -> int: ...

    async def zcard(self, key: str) -> int: ...

    async def close(self) -> None: ...
