"""
Service construction for the ranking engine.

Wires a RankingService to Redis, or to an in-memory store when running in
development without a reachable Redis.
"""

from typing import Optional

from rankings.config import Config
from rankings.services.ranking_service import RankingService
from rankings.storage.base import SortedStore
from rankings.storage.memory_store import InMemorySortedStore
from rankings.storage.redis_store import RedisSortedStore
from rankings.utils.leaderboard_exceptions import BackingStoreUnavailable
from rankings.utils.logger import setup_logger
from rankings.utils.redis_utils import RedisUtils

logger = setup_logger(__name__)


async def create_store() -> SortedStore:
    """Connect to Redis; fall back to an in-memory store only in debug mode."""
    client = await RedisUtils.create_redis_client()
    if client is not None:
        return RedisSortedStore(client)

    if Config.DEBUG:
        logger.warning("Redis unavailable: using in-memory store. Scores will not persist!")
        return InMemorySortedStore()

    raise BackingStoreUnavailable("connect", "no Redis connection could be established")


async def create_ranking_service(store: Optional[SortedStore] = None) -> RankingService:
    """Build the ranking service on ``store`` or on the configured backend."""
    Config.validate()
    if store is None:
        store = await create_store()
    service = RankingService(store)
    logger.info(f"Ranking service ready ({type(store).__name__})")
    return service
