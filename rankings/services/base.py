"""
Base service class for the ranking engine.

Provides the shared store handle and key construction for all service layer
operations.
"""

from rankings.config import Config
from rankings.storage.base import SortedStore


class BaseService:
    """Base class for all services backed by the sorted associative store."""

    def __init__(self, store: SortedStore, key_prefix: str = None):
        """
        Initialize base service with a store.

        Args:
            store: Sorted associative store shared by the service graph
            key_prefix: Namespace prepended to every key (defaults to Config.KEY_PREFIX)
        """
        self.store = store
        self.key_prefix = Config.KEY_PREFIX if key_prefix is None else key_prefix

    def make_key(self, template: str, **fields) -> str:
        """Build a prefixed store key from a KeyTemplates entry."""
        return self.key_prefix + template.format(**fields)
