"""
Storage backends for the ranking engine.
"""

from rankings.storage.base import SortedStore
from rankings.storage.memory_store import InMemorySortedStore
from rankings.storage.redis_store import RedisSortedStore

__all__ = ["SortedStore", "InMemorySortedStore", "RedisSortedStore"]
