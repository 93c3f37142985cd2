"""
In-process implementation of the storage port.

Follows Redis semantics closely enough that engines cannot tell the
difference: empty collections disappear, list/zset ranges are inclusive
and accept negative indexes, sorted-set ties order by member, and keys
expire lazily on access.
"""
from __future__ import annotations

import time
from typing import Any, Mapping, Optional

from socialgraph.storage.port import StorageError


class _SortedSet(dict):
    """member -> score"""


def _bounds(length: int, start: int, stop: int) -> Optional[tuple[int, int]]:
    """Translate Redis inclusive (start, stop) into a python slice, or None if empty."""
    if start < 0:
        start = max(length + start, 0)
    if stop < 0:
        stop = length + stop
    stop = min(stop, length - 1)
    if start > stop or start >= length:
        return None
    return start, stop + 1


class MemoryStore:

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._expiry: dict[str, float] = {}

    async def close(self) -> None:
        self._data.clear()
        self._expiry.clear()

    # ── Internals ─────────────────────────────────────────────────────────

    def _live(self, key: str) -> Any:
        deadline = self._expiry.get(key)
        if deadline is not None and deadline <= time.monotonic():
            self._data.pop(key, None)
            self._expiry.pop(key, None)
        return self._data.get(key)

    def _typed(self, key: str, kind: type, create: bool = False) -> Any:
        value = self._live(key)
        if value is None:
            if not create:
                return None
            value = kind()
            self._data[key] = value
            return value
        if type(value) is not kind:
            raise StorageError(f"WRONGTYPE operation against key '{key}'")
        return value

    def _drop_if_empty(self, key: str) -> None:
        value = self._data.get(key)
        if value is not None and not isinstance(value, str) and len(value) == 0:
            self._data.pop(key, None)
            self._expiry.pop(key, None)

    # ── Plain keys ────────────────────────────────────────────────────────

    async def get(self, key: str) -> Optional[str]:
        return self._typed(key, str)

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> None:
        self._data[key] = str(value)
        self._expiry.pop(key, None)
        if ex is not None:
            self._expiry[key] = time.monotonic() + ex

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._live(key) is not None:
                removed += 1
            self._data.pop(key, None)
            self._expiry.pop(key, None)
        return removed

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

    async def incr(self, key: str) -> int:
        current = self._typed(key, str)
        try:
            value = int(current or 0) + 1
        except ValueError as exc:
            raise StorageError(f"value at '{key}' is not an integer") from exc
        self._data[key] = str(value)
        return value

    async def expire(self, key: str, seconds: int) -> bool:
        if self._live(key) is None:
            return False
        self._expiry[key] = time.monotonic() + seconds
        return True

    # ── Hashes ────────────────────────────────────────────────────────────

    async def hget(self, key: str, field: str) -> Optional[str]:
        h = self._typed(key, dict)
        return h.get(field) if h else None

    async def hgetall(self, key: str) -> dict[str, str]:
        h = self._typed(key, dict)
        return dict(h) if h else {}

    async def hset(self, key: str, mapping: Mapping[str, str]) -> int:
        if not mapping:
            return 0
        h = self._typed(key, dict, create=True)
        added = sum(1 for f in mapping if f not in h)
        h.update({f: str(v) for f, v in mapping.items()})
        return added

    async def hsetnx(self, key: str, field: str, value: str) -> bool:
        h = self._typed(key, dict, create=True)
        if field in h:
            return False
        h[field] = str(value)
        return True

    async def hdel(self, key: str, *fields: str) -> int:
        h = self._typed(key, dict)
        if not h:
            return 0
        removed = sum(1 for f in fields if h.pop(f, None) is not None)
        self._drop_if_empty(key)
        return removed

    async def hexists(self, key: str, field: str) -> bool:
        h = self._typed(key, dict)
        return bool(h) and field in h

    async def hincrby(self, key: str, field: str, amount: int = 1) -> int:
        h = self._typed(key, dict, create=True)
        try:
            value = int(h.get(field, 0)) + amount
        except ValueError as exc:
            raise StorageError(f"hash value at '{key}'.'{field}' is not an integer") from exc
        h[field] = str(value)
        return value

    # ── Sets ──────────────────────────────────────────────────────────────

    async def sadd(self, key: str, *members: str) -> int:
        s = self._typed(key, set, create=True)
        before = len(s)
        s.update(members)
        return len(s) - before

    async def srem(self, key: str, *members: str) -> int:
        s = self._typed(key, set)
        if not s:
            return 0
        before = len(s)
        s.difference_update(members)
        removed = before - len(s)
        self._drop_if_empty(key)
        return removed

    async def sismember(self, key: str, member: str) -> bool:
        s = self._typed(key, set)
        return bool(s) and member in s

    async def smembers(self, key: str) -> set[str]:
        s = self._typed(key, set)
        return set(s) if s else set()

    async def scard(self, key: str) -> int:
        s = self._typed(key, set)
        return len(s) if s else 0

    # ── Lists ─────────────────────────────────────────────────────────────

    async def lpush(self, key: str, *values: str) -> int:
        lst = self._typed(key, list, create=True)
        for value in values:
            lst.insert(0, value)
        return len(lst)

    async def lrange(self, key: str, start: int, stop: int) -> list[str]:
        lst = self._typed(key, list)
        if not lst:
            return []
        window = _bounds(len(lst), start, stop)
        return lst[window[0]:window[1]] if window else []

    async def lrem(self, key: str, count: int, value: str) -> int:
        lst = self._typed(key, list)
        if not lst:
            return 0
        if count == 0:
            kept = [v for v in lst if v != value]
            removed = len(lst) - len(kept)
        else:
            kept, removed = [], 0
            source = lst if count > 0 else list(reversed(lst))
            for v in source:
                if v == value and removed < abs(count):
                    removed += 1
                    continue
                kept.append(v)
            if count < 0:
                kept.reverse()
        lst[:] = kept
        self._drop_if_empty(key)
        return removed

    async def ltrim(self, key: str, start: int, stop: int) -> None:
        lst = self._typed(key, list)
        if not lst:
            return
        window = _bounds(len(lst), start, stop)
        lst[:] = lst[window[0]:window[1]] if window else []
        self._drop_if_empty(key)

    async def llen(self, key: str) -> int:
        lst = self._typed(key, list)
        return len(lst) if lst else 0

    # ── Sorted sets ───────────────────────────────────────────────────────

    def _ranked(self, z: dict[str, float]) -> list[str]:
        return [m for m, _ in sorted(z.items(), key=lambda item: (item[1], item[0].encode()))]

    async def zadd(self, key: str, mapping: Mapping[str, float]) -> int:
        z = self._typed(key, _SortedSet, create=True)
        added = sum(1 for m in mapping if m not in z)
        z.update({m: float(score) for m, score in mapping.items()})
        return added

    async def zrange(self, key: str, start: int, stop: int) -> list[str]:
        z = self._typed(key, _SortedSet)
        if not z:
            return []
        ranked = self._ranked(z)
        window = _bounds(len(ranked), start, stop)
        return ranked[window[0]:window[1]] if window else []

    async def zrem(self, key: str, *members: str) -> int:
        z = self._typed(key, _SortedSet)
        if not z:
            return 0
        removed = sum(1 for m in members if z.pop(m, None) is not None)
        self._drop_if_empty(key)
        return removed

    async def zcard(self, key: str) -> int:
        z = self._typed(key, _SortedSet)
        return len(z) if z else 0
