"""
Leaderboard data models for the ranking engine.

Provides immutable data transfer objects for scopes, identities and ranked views.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ScopeKind(Enum):
    """Families of ranking namespaces."""
    GLOBAL = "global"
    CONTEXT = "context"
    DAILY = "daily"


@dataclass(frozen=True)
class Scope:
    """An isolated ranking namespace: the global board, one context or one day."""
    kind: ScopeKind
    context_id: Optional[str] = None
    date: Optional[str] = None

    def __post_init__(self):
        if self.kind is ScopeKind.CONTEXT and not self.context_id:
            raise ValueError("context scope requires a context_id")
        if self.kind is ScopeKind.DAILY and not self.date:
            raise ValueError("daily scope requires a date")

    @classmethod
    def global_scope(cls) -> "Scope":
        return cls(ScopeKind.GLOBAL)

    @classmethod
    def context(cls, context_id: str) -> "Scope":
        return cls(ScopeKind.CONTEXT, context_id=context_id)

    @classmethod
    def daily(cls, date: str) -> "Scope":
        return cls(ScopeKind.DAILY, date=date)

    @property
    def is_daily(self) -> bool:
        return self.kind is ScopeKind.DAILY

    def __str__(self) -> str:
        if self.kind is ScopeKind.CONTEXT:
            return f"context:{self.context_id}"
        if self.kind is ScopeKind.DAILY:
            return f"daily:{self.date}"
        return "global"


@dataclass(frozen=True)
class IdentityRecord:
    """Stored player identity; version moves only when the display name changes."""
    identity_id: str
    display_name: str
    version: int = 1
    avatar_url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identity_id": self.identity_id,
            "display_name": self.display_name,
            "version": self.version,
            "avatar_url": self.avatar_url,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IdentityRecord":
        return cls(
            identity_id=str(data["identity_id"]),
            display_name=str(data["display_name"]),
            version=int(data.get("version", 1)),
            avatar_url=str(data.get("avatar_url", "")),
        )


@dataclass(frozen=True)
class LeaderboardEntry:
    """Single leaderboard row."""
    rank: int
    display_name: str
    score: int
    origin_scope: Scope
    origin_label: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "display_name": self.display_name,
            "score": self.score,
            "origin_scope": str(self.origin_scope),
            "origin_label": self.origin_label,
        }


@dataclass(frozen=True)
class LeaderboardView:
    """Ranked leaderboard for one tab. An empty view means no scores yet."""
    tab: str
    entries: List[LeaderboardEntry]
    scope: Optional[Scope] = None

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tab": self.tab,
            "scope": str(self.scope) if self.scope else None,
            "entries": [entry.to_dict() for entry in self.entries],
            "empty": self.is_empty,
        }


@dataclass(frozen=True)
class SubmitResult:
    """Outcome of a score submission."""
    accepted: bool
    any_scope_updated: bool
    updated_scopes: Tuple[Scope, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "accepted": self.accepted,
            "any_scope_updated": self.any_scope_updated,
            "updated_scopes": [str(scope) for scope in self.updated_scopes],
        }
