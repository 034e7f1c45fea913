"""
In-memory backend for the sorted associative store.

Used in local development when no Redis is reachable, and by the test suite.
State belongs to the instance, so every service graph gets its own store.
"""

import asyncio
from fnmatch import fnmatchcase
from typing import Dict, List, Optional, Tuple

from rankings.storage.base import SortedStore


class InMemorySortedStore(SortedStore):
    """SortedStore kept in process memory, guarded by an asyncio lock."""

    def __init__(self):
        self._sorted_sets: Dict[str, Dict[str, float]] = {}
        self._strings: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    async def write_if_greater(self, key: str, member: str, score: float) -> bool:
        async with self._lock:
            members = self._sorted_sets.setdefault(key, {})
            current = members.get(member)
            if current is not None and score <= current:
                return False
            members[member] = float(score)
            return True

    async def range_by_rank_desc(self, key: str, start: int, stop: int) -> List[Tuple[str, float]]:
        async with self._lock:
            # Redis orders equal scores by member, reversed for ZREVRANGE
            ranked = sorted(
                self._sorted_sets.get(key, {}).items(),
                key=lambda item: (item[1], item[0]),
                reverse=True,
            )
        end = len(ranked) if stop == -1 else stop + 1
        return ranked[start:end]

    async def point_get(self, key: str, member: str) -> Optional[float]:
        async with self._lock:
            return self._sorted_sets.get(key, {}).get(member)

    async def scan(self, cursor: int, match: str, count: int) -> Tuple[int, List[str]]:
        async with self._lock:
            keys = sorted(set(self._sorted_sets) | set(self._strings))
        page = keys[cursor:cursor + count]
        next_cursor = cursor + count
        if next_cursor >= len(keys):
            next_cursor = 0
        return next_cursor, [key for key in page if fnmatchcase(key, match)]

    async def delete(self, *keys: str) -> int:
        removed = 0
        async with self._lock:
            for key in keys:
                if self._sorted_sets.pop(key, None) is not None:
                    removed += 1
                elif self._strings.pop(key, None) is not None:
                    removed += 1
        return removed

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            return self._strings.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            self._strings[key] = value

    async def ping(self) -> bool:
        return True
