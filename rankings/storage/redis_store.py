"""
Redis backend for the sorted associative store.

Scores live in Redis sorted sets. The monotonic write uses ``ZADD ... GT CH`` so the
compare and the write happen atomically on the server (Redis 6.2+).
"""

import logging
from typing import Awaitable, List, Optional, Tuple, TypeVar

import redis.asyncio as redis
from redis.exceptions import RedisError

from rankings.storage.base import SortedStore
from rankings.utils.leaderboard_exceptions import BackingStoreUnavailable

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _decode(value) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisSortedStore(SortedStore):
    """SortedStore backed by a ``redis.asyncio`` client."""

    def __init__(self, client: redis.Redis):
        self.client = client

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        """Await a Redis call, translating client errors into BackingStoreUnavailable."""
        try:
            return await awaitable
        except (RedisError, OSError) as e:
            logger.error(f"Redis {operation} failed: {e}")
            raise BackingStoreUnavailable(operation, str(e)) from e

    async def write_if_greater(self, key: str, member: str, score: float) -> bool:
        changed = await self._call(
            "write_if_greater",
            self.client.zadd(key, {member: score}, gt=True, ch=True),
        )
        return bool(changed)

    async def range_by_rank_desc(self, key: str, start: int, stop: int) -> List[Tuple[str, float]]:
        rows = await self._call(
            "range_by_rank_desc",
            self.client.zrevrange(key, start, stop, withscores=True),
        )
        return [(_decode(member), float(score)) for member, score in rows]

    async def point_get(self, key: str, member: str) -> Optional[float]:
        score = await self._call("point_get", self.client.zscore(key, member))
        return None if score is None else float(score)

    async def scan(self, cursor: int, match: str, count: int) -> Tuple[int, List[str]]:
        next_cursor, keys = await self._call(
            "scan",
            self.client.scan(cursor=cursor, match=match, count=count),
        )
        return int(next_cursor), [_decode(key) for key in keys]

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(await self._call("delete", self.client.delete(*keys)))

    async def get(self, key: str) -> Optional[str]:
        value = await self._call("get", self.client.get(key))
        return None if value is None else _decode(value)

    async def set(self, key: str, value: str) -> None:
        await self._call("set", self.client.set(key, value))

    async def ping(self) -> bool:
        return bool(await self._call("ping", self.client.ping()))

    async def close(self) -> None:
        await self.client.aclose()
