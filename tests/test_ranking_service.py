"""
Tests for RankingService: submissions, reads, scope clearing and request dispatch.
"""

import asyncio

import pytest

from rankings.data_models.leaderboard import LeaderboardView, Scope, SubmitResult
from rankings.data_models.requests import (
    ClearResult,
    ClearScope,
    OperationFailed,
    ReadLeaderboard,
    SubmitScore,
)
from rankings.services.ranking_service import RankingService
from rankings.utils.daily_dates import today_utc
from rankings.utils.leaderboard_exceptions import (
    BackingStoreUnavailable,
    InvalidRequestError,
    ScoreValidationError,
)
from store_doubles import DelayedWriteStore, FailingStore

GLOBAL = Scope.global_scope()
C1 = Scope.context("c1")


@pytest.mark.asyncio
class TestScenarios:

    async def test_lower_resubmission_keeps_best_score(self, service):
        await service.submit_score("t2_a", "Alice", 10, context_id="c1")
        result = await service.submit_score("t2_a", "Alice", 7, context_id="c1")

        assert result.accepted is True
        assert result.any_scope_updated is False
        assert await service.score_store.get(C1, "t2_a") == 10

    async def test_context_and_daily_scores_are_independent(self, service):
        await service.submit_score("t2_b", "Bob", 15, context_id="c1")
        await service.submit_score("t2_b", "Bob", 20, is_daily=True, date="2024-01-01")

        context_view = await service.read_leaderboard("context", context_id="c1")
        daily_view = await service.read_leaderboard("daily", date="2024-01-01")

        assert [(e.display_name, e.score) for e in context_view.entries] == [("Bob", 15)]
        assert [(e.display_name, e.score) for e in daily_view.entries] == [("Bob", 20)]

    async def test_empty_scope_read_is_an_empty_view(self, service):
        view = await service.read_leaderboard("context", context_id="nothing-here")

        assert view.entries == []
        assert view.is_empty
        assert view.to_dict()["empty"] is True


@pytest.mark.asyncio
class TestSubmitScore:

    async def test_regular_submission_writes_global_and_context(self, service):
        result = await service.submit_score("t2_a", "Alice", 12, context_id="c1")

        assert result.updated_scopes == (GLOBAL, C1)
        assert await service.score_store.get(GLOBAL, "t2_a") == 12
        assert await service.score_store.get(C1, "t2_a") == 12
        assert await service.scope_index.context_scopes_containing("t2_a") == {"c1"}

    async def test_daily_submission_touches_only_its_day(self, service):
        result = await service.submit_score("t2_a", "Alice", 12, is_daily=True, date="2024-01-01")

        assert result.updated_scopes == (Scope.daily("2024-01-01"),)
        assert await service.score_store.get(GLOBAL, "t2_a") is None
        assert await service.scope_index.context_scopes_containing("t2_a") == set()

    async def test_regular_submission_never_writes_daily(self, service):
        await service.submit_score("t2_a", "Alice", 12, context_id="c1")
        assert await service.score_store.get(Scope.daily(today_utc()), "t2_a") is None

    async def test_daily_date_defaults_to_today(self, service):
        await service.submit_score("t2_a", "Alice", 3, is_daily=True)

        assert await service.score_store.get(Scope.daily(today_utc()), "t2_a") == 3

    async def test_name_is_updated_even_without_score_change(self, service):
        await service.submit_score("t2_a", "Alice", 10, context_id="c1")
        result = await service.submit_score("t2_a", "Alicia", 1, context_id="c1")

        record = await service.identity_directory.get("t2_a")
        assert result.any_scope_updated is False
        assert record.display_name == "Alicia"
        assert record.version == 2

    async def test_context_label_is_stored(self, service):
        await service.submit_score("t2_a", "Alice", 10, context_id="c1", context_label="r/words")

        view = await service.read_leaderboard("context", context_id="c1")
        assert view.entries[0].origin_label == "r/words"

    @pytest.mark.parametrize("kwargs, error", [
        ({"score": -1, "context_id": "c1"}, ScoreValidationError),
        ({"score": 1.5, "context_id": "c1"}, ScoreValidationError),
        ({"score": 5}, InvalidRequestError),
        ({"score": 5, "is_daily": True, "date": "01/02/2024"}, InvalidRequestError),
    ])
    async def test_invalid_submissions_are_rejected_before_writing(self, service, store, kwargs, error):
        with pytest.raises(error):
            await service.submit_score("t2_a", "Alice", **kwargs)

        assert await store.scan(0, "*", 100) == (0, [])

    async def test_blank_display_name_is_rejected(self, service):
        with pytest.raises(InvalidRequestError):
            await service.submit_score("t2_a", "  ", 5, context_id="c1")

    async def test_concurrent_submissions_keep_the_maximum(self):
        service = RankingService(DelayedWriteStore({10: 0.05, 7: 0.0}), key_prefix="test:")

        await asyncio.gather(
            service.submit_score("t2_a", "Alice", 10, context_id="c1"),
            service.submit_score("t2_a", "Alice", 7, context_id="c1"),
        )

        assert await service.score_store.get(C1, "t2_a") == 10
        assert await service.score_store.get(GLOBAL, "t2_a") == 10


@pytest.mark.asyncio
class TestPartialFailure:

    async def test_failure_between_scope_writes_is_not_rolled_back(self):
        store = FailingStore(fail_operation="write_if_greater", fail_after=1)
        service = RankingService(store, key_prefix="test:")

        with pytest.raises(BackingStoreUnavailable):
            await service.submit_score("t2_a", "Alice", 10, context_id="c1")

        store.armed = False
        assert await service.score_store.get(GLOBAL, "t2_a") == 10
        assert await service.score_store.get(C1, "t2_a") is None
        assert await service.identity_directory.get("t2_a") is None

    async def test_handle_reports_generic_failure(self):
        service = RankingService(FailingStore(fail_operation="write_if_greater"), key_prefix="test:")

        outcome = await service.handle(SubmitScore("t2_a", "Alice", 10, context_id="c1"))

        assert isinstance(outcome, OperationFailed)
        assert outcome.operation == "SubmitScore"
        assert outcome.message == "❌ Operation failed. Please try again later."

    async def test_failed_read_reports_generic_failure(self):
        service = RankingService(FailingStore(fail_operation="range_by_rank_desc"), key_prefix="test:")

        outcome = await service.handle(ReadLeaderboard(tab="context", context_id="c1"))

        assert isinstance(outcome, OperationFailed)
        assert outcome.to_dict()["success"] is False


@pytest.mark.asyncio
class TestReadLeaderboard:

    async def test_default_limit_is_ten(self, service):
        for i in range(12):
            await service.submit_score(f"t2_{i}", f"P{i}", i, context_id="c1")

        view = await service.read_leaderboard("context", context_id="c1")

        assert len(view.entries) == 10
        assert view.entries[0].score == 11

    async def test_global_tab_returns_aggregate(self, service):
        await service.submit_score("t2_a", "Alice", 10, context_id="c1")
        await service.submit_score("t2_b", "Bob", 25, context_id="c2")

        view = await service.read_leaderboard("global")

        assert view.scope == GLOBAL
        assert [(e.rank, e.display_name, e.score) for e in view.entries] == [(1, "Bob", 25), (2, "Alice", 10)]

    async def test_web_view_tab_aliases(self, service):
        await service.submit_score("t2_a", "Alice", 10, context_id="c1")

        view = await service.read_leaderboard("this-subreddit", context_id="c1")

        assert view.tab == "context"
        assert len(view.entries) == 1

    @pytest.mark.parametrize("kwargs", [
        {"tab": "context"},
        {"tab": "weekly"},
        {"tab": "global", "limit": 0},
        {"tab": "global", "limit": 101},
    ])
    async def test_invalid_reads(self, service, kwargs):
        with pytest.raises(InvalidRequestError):
            await service.read_leaderboard(**kwargs)


@pytest.mark.asyncio
class TestClearScope:

    async def test_clear_removes_context_members_and_global_board(self, service):
        await service.submit_score("t2_a", "Alice", 10, context_id="c1", context_label="r/one")
        await service.submit_score("t2_b", "Bob", 20, context_id="c2")

        result = await service.clear_scope("c1")

        assert result == ClearResult(context_id="c1")
        assert await service.score_store.all(C1) == []
        assert await service.score_store.all(GLOBAL) == []
        assert await service.identity_directory.get("t2_a") is None
        assert await service.identity_directory.get("t2_b") is not None
        assert await service.score_store.get(Scope.context("c2"), "t2_b") == 20

    async def test_cleared_identity_drops_out_of_other_contexts(self, service):
        await service.submit_score("t2_a", "Alice", 10, context_id="c1")
        await service.submit_score("t2_a", "Alice", 5, context_id="c2")

        await service.clear_scope("c1")

        view = await service.read_leaderboard("context", context_id="c2")
        assert view.entries == []

    async def test_strict_clear_keeps_global_board(self, store):
        service = RankingService(store, key_prefix="test:", clear_global_on_scope_clear=False)
        await service.submit_score("t2_a", "Alice", 10, context_id="c1")
        await service.submit_score("t2_b", "Bob", 20, context_id="c2")

        await service.clear_scope("c1")

        assert await service.score_store.all(GLOBAL) == [("t2_b", 20), ("t2_a", 10)]
        assert await service.score_store.all(C1) == []


@pytest.mark.asyncio
class TestDispatch:

    async def test_handle_routes_each_request_variant(self, service):
        submitted = await service.handle(SubmitScore("t2_a", "Alice", 10, context_id="c1"))
        view = await service.handle(ReadLeaderboard(tab="context", context_id="c1"))
        cleared = await service.handle(ClearScope(context_id="c1"))

        assert isinstance(submitted, SubmitResult) and submitted.accepted
        assert isinstance(view, LeaderboardView) and view.entries[0].display_name == "Alice"
        assert isinstance(cleared, ClearResult) and cleared.ok

    async def test_unknown_request_type_fails(self, service):
        outcome = await service.handle(object())
        assert isinstance(outcome, OperationFailed)

    async def test_handle_message_from_relay_payloads(self, service):
        submitted = await service.handle_message({
            "type": "submitScore",
            "data": {"t2": "t2_a", "playerName": "Alice", "score": 9, "t3": "c1", "subreddit": "r/one"},
        })
        view = await service.handle_message({
            "type": "fetchLeaderboard",
            "data": {"tab": "this-subreddit", "t3": "c1"},
        })

        assert submitted.accepted
        assert view.to_dict()["entries"][0] == {
            "rank": 1,
            "display_name": "Alice",
            "score": 9,
            "origin_scope": "context:c1",
            "origin_label": "r/one",
        }

    async def test_unparseable_message_is_reported(self, service):
        outcome = await service.handle_message({"type": "wordSubmission", "data": {}})

        assert isinstance(outcome, OperationFailed)
        assert outcome.operation == "parse"


@pytest.mark.asyncio
class TestOpaqueIdentities:

    @pytest.mark.parametrize("identity_id", ["u-42", "a.b", "x_t2_y", "user_t2_x.9", "player one"])
    async def test_submit_read_clear_round_trip(self, service, identity_id):
        await service.submit_score(identity_id, "Alice", 10, context_id="c1")

        context_view = await service.read_leaderboard("context", context_id="c1")
        global_view = await service.read_leaderboard("global")

        assert [(e.display_name, e.score) for e in context_view.entries] == [("Alice", 10)]
        assert [(e.display_name, e.score) for e in global_view.entries] == [("Alice", 10)]
        assert await service.scope_index.context_scopes_containing(identity_id) == {"c1"}

        await service.clear_scope("c1")

        assert await service.identity_directory.get(identity_id) is None

    async def test_clear_removes_only_the_stored_identity(self, service):
        await service.submit_score("user_t2_x.9", "Alice", 10, context_id="c1")
        await service.submit_score("t2_x", "Bob", 20, context_id="c2")

        await service.clear_scope("c1")

        assert await service.identity_directory.get("t2_x") is not None

    async def test_legacy_compound_identity_is_rejected(self, service, store):
        with pytest.raises(InvalidRequestError):
            await service.submit_score("t3_post1_t2_abc", "Alice", 10, context_id="c1")

        assert await store.scan(0, "*", 100) == (0, [])
