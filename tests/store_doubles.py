"""
Store doubles for the ranking engine tests.

Wrappers around InMemorySortedStore that inject latency and failures to exercise
interleavings and partial-failure behavior.
"""

import asyncio
from typing import Dict, Optional, Set

from rankings.storage.memory_store import InMemorySortedStore
from rankings.utils.leaderboard_exceptions import BackingStoreUnavailable


class DelayedWriteStore(InMemorySortedStore):
    """Delays write_if_greater per score so concurrent writes complete in a chosen order."""

    def __init__(self, delays: Dict[float, float]):
        super().__init__()
        self.delays = delays
        self.completed = []

    async def write_if_greater(self, key, member, score):
        await asyncio.sleep(self.delays.get(score, 0))
        result = await super().write_if_greater(key, member, score)
        self.completed.append(score)
        return result


class FailingStore(InMemorySortedStore):
    """Raises BackingStoreUnavailable once ``fail_after`` calls of an operation succeeded."""

    def __init__(self, fail_operation: str = "write_if_greater", fail_after: int = 0,
                 fail_members: Optional[Set[str]] = None):
        super().__init__()
        self.fail_operation = fail_operation
        self.fail_after = fail_after
        self.fail_members = fail_members
        self.calls = 0
        self.armed = True

    def _check(self, operation, member=None):
        if not self.armed or operation != self.fail_operation:
            return
        if self.fail_members is not None:
            if member in self.fail_members:
                raise BackingStoreUnavailable(operation, "simulated outage")
            return
        self.calls += 1
        if self.calls > self.fail_after:
            raise BackingStoreUnavailable(operation, "simulated outage")

    async def write_if_greater(self, key, member, score):
        self._check("write_if_greater", member)
        return await super().write_if_greater(key, member, score)

    async def point_get(self, key, member):
        self._check("point_get", member)
        return await super().point_get(key, member)

    async def range_by_rank_desc(self, key, start, stop):
        self._check("range_by_rank_desc")
        return await super().range_by_rank_desc(key, start, stop)

    async def get(self, key):
        self._check("get", key)
        return await super().get(key)

    async def set(self, key, value):
        self._check("set", key)
        return await super().set(key, value)
