"""
Scope discovery for the cross-scope aggregate view.

Finds the context scopes holding a score for an identity by scanning all
context score keys and probing each one. Cost grows with the number of context
scopes, which is acceptable because the aggregate view is requested rarely (end
of a match). The scan has no snapshot isolation: scopes created or removed while
it runs may be missed or reported. Results are best effort.
"""

import logging
from typing import Set

from rankings.config import Config
from rankings.constants import KeyTemplates
from rankings.data_models.leaderboard import Scope
from rankings.services.score_store import ScoreStore
from rankings.utils.leaderboard_exceptions import MalformedMemberError

logger = logging.getLogger(__name__)


class ScopeIndex:
    """Discovers which context scopes contain an identity."""

    def __init__(self, score_store: ScoreStore, scan_batch_size: int = None):
        self.score_store = score_store
        self.scan_batch_size = scan_batch_size or Config.SCAN_BATCH_SIZE

    def _context_id_from_key(self, key: str) -> str:
        prefix = self.score_store.make_key(KeyTemplates.CONTEXT_SCORES_PREFIX)
        if not key.startswith(prefix):
            raise MalformedMemberError(key, "not a context score key")
        context_id = key[len(prefix):]
        if not context_id:
            raise MalformedMemberError(key, "missing context id")
        return context_id

    async def context_scopes(self) -> Set[str]:
        """Return every context id that currently has a score set."""
        pattern = self.score_store.make_key(KeyTemplates.CONTEXT_SCORES_PATTERN)
        store = self.score_store.store
        context_ids: Set[str] = set()
        cursor = 0
        while True:
            cursor, keys = await store.scan(cursor, pattern, self.scan_batch_size)
            for key in keys:
                try:
                    context_ids.add(self._context_id_from_key(key))
                except MalformedMemberError as e:
                    logger.warning(f"Skipping scope key during scan: {e}")
            if cursor == 0:
                break
        return context_ids

    async def context_scopes_containing(self, identity_id: str) -> Set[str]:
        """Return the ids of context scopes that hold a score for ``identity_id``."""
        found: Set[str] = set()
        for context_id in await self.context_scopes():
            score = await self.score_store.get(Scope.context(context_id), identity_id)
            if score is not None:
                found.add(context_id)
        logger.debug(f"Identity {identity_id} found in {len(found)} context scope(s)")
        return found
