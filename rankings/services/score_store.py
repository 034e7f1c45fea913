"""
Per-scope score storage.

Each scope owns an independent sorted set of identity -> best score. Writes go
through the store's atomic write-if-greater primitive, so a stored score is
always the maximum ever submitted to that exact scope regardless of the order in
which concurrent submissions complete.
"""

import logging
from typing import List, Optional, Tuple

from rankings.constants import KeyTemplates
from rankings.data_models.leaderboard import Scope, ScopeKind
from rankings.services.base import BaseService
from rankings.utils.leaderboard_exceptions import ScoreValidationError

logger = logging.getLogger(__name__)


class ScoreStore(BaseService):
    """Monotonic per-scope scores with ranked range queries."""

    def scope_key(self, scope: Scope) -> str:
        """Return the sorted-set key that holds ``scope``."""
        if scope.kind is ScopeKind.CONTEXT:
            return self.make_key(KeyTemplates.CONTEXT_SCORES, context_id=scope.context_id)
        if scope.kind is ScopeKind.DAILY:
            return self.make_key(KeyTemplates.DAILY_SCORES, date=scope.date)
        return self.make_key(KeyTemplates.GLOBAL_SCORES)

    @staticmethod
    def validate_score(score) -> int:
        """Scores are non-negative integers; booleans are rejected."""
        if isinstance(score, bool) or not isinstance(score, int):
            raise ScoreValidationError(score, "Score must be a whole number")
        if score < 0:
            raise ScoreValidationError(score, "Score cannot be negative")
        return score

    async def submit(self, scope: Scope, identity_id: str, score: int) -> bool:
        """
        Record ``score`` for ``identity_id`` in ``scope`` if it beats the stored value.

        Returns:
            True if the stored score changed (first entry or improvement)
        """
        score = self.validate_score(score)
        updated = await self.store.write_if_greater(self.scope_key(scope), identity_id, score)
        if updated:
            logger.debug(f"New best score {score} for {identity_id} in {scope}")
        return updated

    async def get(self, scope: Scope, identity_id: str) -> Optional[int]:
        score = await self.store.point_get(self.scope_key(scope), identity_id)
        return None if score is None else int(score)

    async def top_n(self, scope: Scope, n: int) -> List[Tuple[str, int]]:
        """Return at most ``n`` (member, score) pairs, highest score first."""
        if n < 1:
            return []
        rows = await self.store.range_by_rank_desc(self.scope_key(scope), 0, n - 1)
        return [(member, int(score)) for member, score in rows]

    async def all(self, scope: Scope) -> List[Tuple[str, int]]:
        rows = await self.store.range_by_rank_desc(self.scope_key(scope), 0, -1)
        return [(member, int(score)) for member, score in rows]

    async def delete_scope(self, scope: Scope) -> None:
        await self.store.delete(self.scope_key(scope))
        logger.info(f"Deleted scores for {scope}")
