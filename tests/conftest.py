"""
Pytest fixtures for the ranking engine tests.

Services run on InMemorySortedStore with a dedicated key prefix.
"""

import pytest

from rankings.services.ranking_service import RankingService
from rankings.storage.memory_store import InMemorySortedStore

TEST_PREFIX = "test:"


@pytest.fixture
def store():
    return InMemorySortedStore()


@pytest.fixture
def service(store):
    return RankingService(store, key_prefix=TEST_PREFIX, clear_global_on_scope_clear=True)


@pytest.fixture
def score_store(service):
    return service.score_store


@pytest.fixture
def identity_directory(service):
    return service.identity_directory


@pytest.fixture
def aggregator(service):
    return service.aggregator
