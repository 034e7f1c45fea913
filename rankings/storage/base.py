"""
Sorted associative store contract.

Every backend offers the same small set of primitives the ranking services are
built on: an atomic write-if-greater, ranked range reads, point lookups, a
cursor-paginated key scan, deletion, and plain string records.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple


class SortedStore(ABC):
    """Async sorted associative store used by the ranking services."""

    @abstractmethod
    async def write_if_greater(self, key: str, member: str, score: float) -> bool:
        """
        Store ``score`` for ``member`` only if absent or greater than the stored value.

        Must be atomic with respect to concurrent calls on the same key/member.

        Returns:
            True if the stored value changed
        """

    @abstractmethod
    async def range_by_rank_desc(self, key: str, start: int, stop: int) -> List[Tuple[str, float]]:
        """Return (member, score) pairs ranked by descending score, inclusive bounds, -1 for the end."""

    @abstractmethod
    async def point_get(self, key: str, member: str) -> Optional[float]:
        """Return the score of ``member`` in ``key`` or None."""

    @abstractmethod
    async def scan(self, cursor: int, match: str, count: int) -> Tuple[int, List[str]]:
        """
        One step of a cursor-paginated key scan.

        Start with cursor 0; the iteration is complete when the returned cursor is 0.
        Keys may be returned more than once.
        """

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Delete keys, returning how many existed."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Read a plain string record."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Write a plain string record."""

    @abstractmethod
    async def ping(self) -> bool:
        """Check that the store is reachable."""

    async def close(self) -> None:
        """Release backend resources."""
