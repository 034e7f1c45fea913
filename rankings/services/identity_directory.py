"""
Identity directory: identity -> current display name.

The display name is kept twice: on its own key for reliable lookup, and inside a
JSON identity record whose version moves only when the name changes.
"""

import json
import logging
from typing import Optional

from rankings.constants import KeyTemplates
from rankings.data_models.leaderboard import IdentityRecord
from rankings.services.base import BaseService
from rankings.utils.leaderboard_exceptions import IdentityNotFoundError

logger = logging.getLogger(__name__)


class IdentityDirectory(BaseService):
    """Persistent mapping of identity to display name, versioned on rename."""

    def _record_key(self, identity_id: str) -> str:
        return self.make_key(KeyTemplates.IDENTITY_RECORD, identity_id=identity_id)

    def _name_key(self, identity_id: str) -> str:
        return self.make_key(KeyTemplates.DISPLAY_NAME, identity_id=identity_id)

    async def get(self, identity_id: str) -> Optional[IdentityRecord]:
        """Load the identity record; corrupt records are treated as absent."""
        raw = await self.store.get(self._record_key(identity_id))
        if raw is None:
            return None
        try:
            return IdentityRecord.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Invalid identity record for '{identity_id}', ignoring: {e}")
            return None

    async def upsert(self, identity_id: str, display_name: str) -> IdentityRecord:
        """
        Create or rename an identity.

        Args:
            identity_id: Stable opaque player key
            display_name: Name submitted with the latest score

        Returns:
            The stored record (version 1 on creation, +1 on each rename)

        Versioning is best effort: concurrent renames of one identity may both
        write the same version.
        """
        existing = await self.get(identity_id)
        if existing is None:
            record = IdentityRecord(identity_id=identity_id, display_name=display_name)
        elif existing.display_name != display_name:
            record = IdentityRecord(
                identity_id=identity_id,
                display_name=display_name,
                version=existing.version + 1,
                avatar_url=existing.avatar_url,
            )
            logger.info(f"Identity {identity_id} renamed to '{display_name}' (v{record.version})")
        else:
            record = existing

        if record is not existing:
            await self.store.set(self._record_key(identity_id), json.dumps(record.to_dict()))
        await self.store.set(self._name_key(identity_id), display_name)
        return record

    async def lookup_name(self, identity_id: str) -> str:
        """Resolve the current display name, falling back to the identity record."""
        name = await self.store.get(self._name_key(identity_id))
        if name:
            return name

        record = await self.get(identity_id)
        if record is not None and record.display_name:
            return record.display_name

        raise IdentityNotFoundError(identity_id)

    async def delete(self, identity_id: str) -> None:
        await self.store.delete(self._record_key(identity_id), self._name_key(identity_id))
