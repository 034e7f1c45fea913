"""
Data models for the ranking engine.
"""

from rankings.data_models.leaderboard import (
    IdentityRecord,
    LeaderboardEntry,
    LeaderboardView,
    Scope,
    ScopeKind,
    SubmitResult,
)
from rankings.data_models.requests import (
    ClearResult,
    ClearScope,
    OperationFailed,
    RankingRequest,
    ReadLeaderboard,
    SubmitScore,
    parse_request,
)

__all__ = [
    "IdentityRecord",
    "LeaderboardEntry",
    "LeaderboardView",
    "Scope",
    "ScopeKind",
    "SubmitResult",
    "ClearResult",
    "ClearScope",
    "OperationFailed",
    "RankingRequest",
    "ReadLeaderboard",
    "SubmitScore",
    "parse_request",
]
