"""
Leaderboard aggregation for the ranking engine.

Builds ranked, name-resolved views for a single scope, for a daily challenge, and
the cross-scope aggregate that reports each player's best score anywhere.
"""

import logging
import re
from typing import Dict, List, Optional, Tuple

from rankings.config import Config
from rankings.constants import KeyTemplates
from rankings.data_models.leaderboard import LeaderboardEntry, Scope, ScopeKind
from rankings.services.identity_directory import IdentityDirectory
from rankings.services.scope_index import ScopeIndex
from rankings.services.score_store import ScoreStore
from rankings.utils.leaderboard_exceptions import (
    BackingStoreUnavailable,
    IdentityNotFoundError,
    LeaderboardException,
    MalformedMemberError,
)

logger = logging.getLogger(__name__)

# (display_name, score, origin_scope)
Candidate = Tuple[str, int, Scope]


class LeaderboardAggregator:
    """Builds ranked leaderboard views from the score store and identity directory."""

    def __init__(
        self,
        score_store: ScoreStore,
        identity_directory: IdentityDirectory,
        scope_index: ScopeIndex,
        legacy_member_pattern: Optional[str] = None,
    ):
        self.score_store = score_store
        self.identity_directory = identity_directory
        self.scope_index = scope_index
        self._legacy_pattern = re.compile(legacy_member_pattern or Config.LEGACY_MEMBER_PATTERN)

    def identity_from_member(self, member: str) -> str:
        """
        Extract the identity id from a sorted-set member.

        Only legacy compound members (``t3_xyz_t2_abc``) are rewritten to the
        identity they embed; every other member is the identity id verbatim.

        Raises:
            MalformedMemberError: If the member is empty
        """
        if not isinstance(member, str) or not member.strip():
            raise MalformedMemberError(member, "empty member")
        match = self._legacy_pattern.fullmatch(member)
        if match:
            return match.group(1)
        return member

    async def _resolve_name(self, identity_id: str) -> Optional[str]:
        """Return the display name, or None when the entry must be dropped."""
        try:
            return await self.identity_directory.lookup_name(identity_id)
        except IdentityNotFoundError:
            logger.debug(f"No display name for {identity_id}, dropping entry")
        except BackingStoreUnavailable as e:
            logger.warning(f"Name lookup failed for {identity_id}, dropping entry: {e}")
        return None

    async def _origin_label(self, scope: Scope, cache: Dict[Scope, str]) -> str:
        if scope in cache:
            return cache[scope]
        if scope.kind is ScopeKind.GLOBAL:
            label = Config.GLOBAL_ORIGIN_LABEL
        elif scope.kind is ScopeKind.DAILY:
            label = Config.DAILY_ORIGIN_LABEL
        else:
            label = scope.context_id
            key = self.score_store.make_key(KeyTemplates.CONTEXT_LABEL, context_id=scope.context_id)
            try:
                label = await self.score_store.store.get(key) or scope.context_id
            except BackingStoreUnavailable as e:
                logger.warning(f"Context label lookup failed for {scope}: {e}")
        cache[scope] = label
        return label

    async def _rank(self, candidates: List[Candidate], limit: int, dedupe: bool = True) -> List[LeaderboardEntry]:
        """Collapse by display name (keeping the higher score), sort, rank 1..k, truncate."""
        if dedupe:
            best: Dict[str, Candidate] = {}
            for candidate in candidates:
                existing = best.get(candidate[0])
                if existing is None or candidate[1] > existing[1]:
                    best[candidate[0]] = candidate
            candidates = list(best.values())

        ordered = sorted(candidates, key=lambda c: c[1], reverse=True)[:limit]
        labels: Dict[Scope, str] = {}
        entries = []
        for rank, (display_name, score, origin) in enumerate(ordered, start=1):
            entries.append(LeaderboardEntry(
                rank=rank,
                display_name=display_name,
                score=score,
                origin_scope=origin,
                origin_label=await self._origin_label(origin, labels),
            ))
        return entries

    async def _named_candidates(self, scope: Scope, limit: int) -> List[Candidate]:
        candidates = []
        for member, score in await self.score_store.top_n(scope, limit):
            try:
                identity_id = self.identity_from_member(member)
            except MalformedMemberError as e:
                logger.warning(f"Skipping member in {scope}: {e}")
                continue
            display_name = await self._resolve_name(identity_id)
            if display_name is not None:
                candidates.append((display_name, score, scope))
        return candidates

    async def build_scope_view(self, scope: Scope, limit: int) -> List[LeaderboardEntry]:
        """Ranked, deduplicated view of a single scope."""
        candidates = await self._named_candidates(scope, limit)
        return await self._rank(candidates, limit)

    async def build_daily_view(self, date: str, limit: int) -> List[LeaderboardEntry]:
        """Ranked view of one daily challenge; the daily scope is self-contained."""
        candidates = await self._named_candidates(Scope.daily(date), limit)
        return await self._rank(candidates, limit, dedupe=False)

    async def _best_anywhere(self, identity_id: str, seed_score: int) -> Tuple[int, Scope]:
        best_score, origin = seed_score, Scope.global_scope()
        for context_id in sorted(await self.scope_index.context_scopes_containing(identity_id)):
            scope = Scope.context(context_id)
            score = await self.score_store.get(scope, identity_id)
            if score is not None and score > best_score:
                best_score, origin = score, scope
        return best_score, origin

    async def build_global_aggregate(self, limit: int) -> List[LeaderboardEntry]:
        """
        Cross-scope view: each seed candidate's best score across the global board
        and every context scope it appears in.

        Candidates are seeded from the global top ``limit`` only; an identity whose
        global score falls outside that window is not discovered even if a context
        score would rank it. A failed lookup drops that candidate, not the build.
        """
        candidates = []
        for member, seed_score in await self.score_store.top_n(Scope.global_scope(), limit):
            try:
                identity_id = self.identity_from_member(member)
                best_score, origin = await self._best_anywhere(identity_id, seed_score)
                display_name = await self.identity_directory.lookup_name(identity_id)
            except IdentityNotFoundError:
                logger.debug(f"No display name for global member {member!r}, dropping entry")
                continue
            except LeaderboardException as e:
                logger.warning(f"Skipping global candidate {member!r}: {e}")
                continue
            candidates.append((display_name, best_score, origin))
        return await self._rank(candidates, limit)
