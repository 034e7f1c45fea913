"""
Ranking service facade.

Accepts score submissions, fans them out to the relevant scopes, keeps the
identity directory current, and serves leaderboard reads and scope clears.

Writes to different scopes are independent calls, not a transaction: if the
store fails part way through a submission, the scopes already written keep their
new values and the caller is told the submission failed. There is no implicit
retry.
"""

import logging
from typing import List, Optional, Union

from rankings.config import Config
from rankings.constants import KeyTemplates, LeaderboardTabs
from rankings.data_models.leaderboard import LeaderboardView, Scope, SubmitResult
from rankings.data_models.requests import (
    ClearResult,
    ClearScope,
    OperationFailed,
    RankingRequest,
    ReadLeaderboard,
    SubmitScore,
    normalize_tab,
    parse_request,
)
from rankings.services.base import BaseService
from rankings.services.identity_directory import IdentityDirectory
from rankings.services.leaderboard import LeaderboardAggregator
from rankings.services.scope_index import ScopeIndex
from rankings.services.score_store import ScoreStore
from rankings.storage.base import SortedStore
from rankings.utils.daily_dates import resolve_daily_date
from rankings.utils.leaderboard_exceptions import (
    InvalidRequestError,
    LeaderboardException,
    MalformedMemberError,
)

logger = logging.getLogger(__name__)

RankingResponse = Union[SubmitResult, LeaderboardView, ClearResult, OperationFailed]


class RankingService(BaseService):
    """Facade over score storage, identities and leaderboard aggregation."""

    def __init__(
        self,
        store: SortedStore,
        key_prefix: str = None,
        clear_global_on_scope_clear: Optional[bool] = None,
    ):
        super().__init__(store, key_prefix)
        self.score_store = ScoreStore(store, self.key_prefix)
        self.identity_directory = IdentityDirectory(store, self.key_prefix)
        self.scope_index = ScopeIndex(self.score_store)
        self.aggregator = LeaderboardAggregator(
            self.score_store, self.identity_directory, self.scope_index
        )
        if clear_global_on_scope_clear is None:
            clear_global_on_scope_clear = Config.CLEAR_GLOBAL_ON_SCOPE_CLEAR
        self.clear_global_on_scope_clear = clear_global_on_scope_clear

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    @staticmethod
    def target_scopes(is_daily: bool, context_id: Optional[str], date: Optional[str]) -> List[Scope]:
        """Daily submissions touch only their day; others touch global and their context."""
        if is_daily:
            return [Scope.daily(date)]
        return [Scope.global_scope(), Scope.context(context_id)]

    async def submit_score(
        self,
        identity_id: str,
        display_name: str,
        score: int,
        context_id: Optional[str] = None,
        is_daily: bool = False,
        date: Optional[str] = None,
        context_label: Optional[str] = None,
    ) -> SubmitResult:
        """
        Submit a score.

        Args:
            identity_id: Stable player key
            display_name: Player's current display name
            score: Non-negative integer score
            context_id: Context the game was played in (required unless daily)
            is_daily: Whether this is a daily challenge submission
            date: Daily challenge date (YYYY-MM-DD, defaults to today UTC)
            context_label: Human readable context name to show as origin

        Returns:
            SubmitResult with any_scope_updated set if any stored score improved

        Raises:
            ScoreValidationError, InvalidRequestError: Rejected before any write
            BackingStoreUnavailable: Store failed; earlier writes are kept
        """
        if not isinstance(identity_id, str) or not identity_id.strip():
            raise InvalidRequestError("Player identity is required")
        if not isinstance(display_name, str) or not display_name.strip():
            raise InvalidRequestError("Display name is required")
        if self.aggregator.identity_from_member(identity_id) != identity_id:
            raise InvalidRequestError("Player identity must not be a legacy compound member")
        ScoreStore.validate_score(score)
        if is_daily:
            date = resolve_daily_date(date)
        elif not context_id:
            raise InvalidRequestError("Context id is required for non-daily scores")

        logger.debug(f"Submitting score {score} for {identity_id} (daily={is_daily})")
        updated = []
        for scope in self.target_scopes(is_daily, context_id, date):
            if await self.score_store.submit(scope, identity_id, score):
                updated.append(scope)

        if not is_daily and context_label:
            await self.store.set(
                self.make_key(KeyTemplates.CONTEXT_LABEL, context_id=context_id), context_label
            )

        # The directory follows the latest submitted name whatever the score outcome
        await self.identity_directory.upsert(identity_id, display_name)

        logger.info(
            f"Committed score {score} for {identity_id}; "
            f"updated scopes: {', '.join(str(s) for s in updated) or 'none'}"
        )
        return SubmitResult(accepted=True, any_scope_updated=bool(updated), updated_scopes=tuple(updated))

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @staticmethod
    def validate_limit(limit: Optional[int]) -> int:
        if limit is None:
            return Config.DEFAULT_LEADERBOARD_LIMIT
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise InvalidRequestError("Limit must be a positive integer")
        if limit > Config.MAX_LEADERBOARD_LIMIT:
            raise InvalidRequestError(f"Limit cannot exceed {Config.MAX_LEADERBOARD_LIMIT}")
        return limit

    async def read_leaderboard(
        self,
        tab: str,
        context_id: Optional[str] = None,
        date: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> LeaderboardView:
        """Read one leaderboard tab; an empty view means no scores yet."""
        tab = normalize_tab(tab)
        limit = self.validate_limit(limit)

        if tab == LeaderboardTabs.CONTEXT:
            if not context_id:
                raise InvalidRequestError("Context id is required for the context leaderboard")
            scope = Scope.context(context_id)
            entries = await self.aggregator.build_scope_view(scope, limit)
        elif tab == LeaderboardTabs.GLOBAL:
            scope = Scope.global_scope()
            entries = await self.aggregator.build_global_aggregate(limit)
        else:
            scope = Scope.daily(resolve_daily_date(date))
            entries = await self.aggregator.build_daily_view(scope.date, limit)

        return LeaderboardView(tab=tab, entries=entries, scope=scope)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def clear_scope(self, context_id: str) -> ClearResult:
        """
        Clear a context leaderboard and the identity records of its members.

        With clear_global_on_scope_clear enabled the global board is deleted
        as well.
        """
        if not context_id:
            raise InvalidRequestError("Context id is required")
        scope = Scope.context(context_id)
        members = await self.score_store.all(scope)

        await self.score_store.delete_scope(scope)
        await self.store.delete(self.make_key(KeyTemplates.CONTEXT_LABEL, context_id=context_id))
        if self.clear_global_on_scope_clear:
            await self.score_store.delete_scope(Scope.global_scope())

        for member, _ in members:
            try:
                identity_id = self.aggregator.identity_from_member(member)
            except MalformedMemberError as e:
                logger.warning(f"Skipping member while clearing {scope}: {e}")
                continue
            await self.identity_directory.delete(identity_id)

        logger.info(f"Cleared {scope} ({len(members)} members)")
        return ClearResult(context_id=context_id)

    # ------------------------------------------------------------------
    # Request dispatch
    # ------------------------------------------------------------------

    async def _dispatch(self, request: RankingRequest):
        if isinstance(request, SubmitScore):
            return await self.submit_score(
                identity_id=request.identity_id,
                display_name=request.display_name,
                score=request.score,
                context_id=request.context_id,
                is_daily=request.is_daily,
                date=request.date,
                context_label=request.context_label,
            )
        if isinstance(request, ReadLeaderboard):
            return await self.read_leaderboard(
                tab=request.tab,
                context_id=request.context_id,
                date=request.date,
                limit=request.limit,
            )
        if isinstance(request, ClearScope):
            return await self.clear_scope(request.context_id)
        raise InvalidRequestError(f"Unsupported request {type(request).__name__}")

    async def handle(self, request: RankingRequest) -> RankingResponse:
        """Run a request, reporting engine errors as a generic failure outcome."""
        operation = type(request).__name__
        try:
            return await self._dispatch(request)
        except LeaderboardException as e:
            logger.error(f"{operation} failed: {e}")
            return OperationFailed(operation=operation, message=e.user_message)

    async def handle_message(self, payload: dict) -> RankingResponse:
        """Parse a relay message and run it."""
        try:
            request = parse_request(payload)
        except InvalidRequestError as e:
            logger.warning(f"Rejected message: {e}")
            return OperationFailed(operation="parse", message=e.user_message)
        return await self.handle(request)
