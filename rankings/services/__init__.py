"""
Services package for the ranking engine.

Score storage, identity directory, scope discovery, leaderboard aggregation
and the ranking service facade.
"""

from .base import BaseService
from .identity_directory import IdentityDirectory
from .leaderboard import LeaderboardAggregator
from .ranking_service import RankingService
from .scope_index import ScopeIndex
from .score_store import ScoreStore

__all__ = [
    'BaseService',
    'IdentityDirectory',
    'LeaderboardAggregator',
    'RankingService',
    'ScopeIndex',
    'ScoreStore',
]
