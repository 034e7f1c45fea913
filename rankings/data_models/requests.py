"""
Request and response models at the engine boundary.

The client relay sends loosely typed JSON messages; they are mapped here onto a
closed set of request variants so the ranking service can dispatch exhaustively.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from rankings.constants import LeaderboardTabs, MessageTypes
from rankings.utils.leaderboard_exceptions import InvalidRequestError


@dataclass(frozen=True)
class SubmitScore:
    """Submit a score for one identity."""
    identity_id: str
    display_name: str
    score: int
    context_id: Optional[str] = None
    is_daily: bool = False
    date: Optional[str] = None
    context_label: Optional[str] = None


@dataclass(frozen=True)
class ReadLeaderboard:
    """Read one leaderboard tab."""
    tab: str
    context_id: Optional[str] = None
    date: Optional[str] = None
    limit: Optional[int] = None


@dataclass(frozen=True)
class ClearScope:
    """Clear the leaderboard of one context."""
    context_id: str


@dataclass(frozen=True)
class ClearResult:
    context_id: str
    ok: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {"context_id": self.context_id, "ok": self.ok}


@dataclass(frozen=True)
class OperationFailed:
    """Generic failure outcome returned to the client surface."""
    operation: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"operation": self.operation, "success": False, "error": self.message}


RankingRequest = Union[SubmitScore, ReadLeaderboard, ClearScope]


def _first(data: Dict[str, Any], *names: str) -> Any:
    """Return the first present value among alternative field names."""
    for name in names:
        if data.get(name) is not None:
            return data[name]
    return None


def normalize_tab(tab: Any) -> str:
    """Map a tab name (including web view aliases) to a canonical tab."""
    if not isinstance(tab, str):
        raise InvalidRequestError("Leaderboard tab is required")
    tab = LeaderboardTabs.ALIASES.get(tab, tab)
    if tab not in LeaderboardTabs.ALL:
        raise InvalidRequestError(f"Unknown leaderboard tab '{tab}'")
    return tab


def parse_request(payload: Dict[str, Any]) -> RankingRequest:
    """
    Map a relay message onto a request variant.

    Args:
        payload: Message of the form ``{"type": ..., "data": {...}}``

    Returns:
        SubmitScore, ReadLeaderboard or ClearScope

    Raises:
        InvalidRequestError: If the message type is unknown or fields are missing
    """
    if not isinstance(payload, dict):
        raise InvalidRequestError("Request must be an object")

    message_type = payload.get("type")
    data = payload.get("data") or {}
    if not isinstance(data, dict):
        raise InvalidRequestError("Request data must be an object")

    if message_type == MessageTypes.SUBMIT_SCORE:
        identity_id = _first(data, "identity", "identityId", "t2")
        display_name = _first(data, "displayName", "playerName")
        score = data.get("score")
        if not identity_id:
            raise InvalidRequestError("Player identity is required")
        if not display_name:
            raise InvalidRequestError("Display name is required")
        if isinstance(score, bool) or not isinstance(score, int):
            raise InvalidRequestError("Score must be an integer")
        is_daily = data.get("isDaily", False)
        if not isinstance(is_daily, bool):
            raise InvalidRequestError("isDaily must be a boolean")
        return SubmitScore(
            identity_id=str(identity_id),
            display_name=str(display_name),
            score=score,
            context_id=_first(data, "contextId", "t3"),
            is_daily=is_daily,
            date=data.get("date"),
            context_label=_first(data, "contextLabel", "subreddit"),
        )

    if message_type == MessageTypes.FETCH_LEADERBOARD:
        limit = data.get("limit")
        if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int)):
            raise InvalidRequestError("Limit must be an integer")
        return ReadLeaderboard(
            tab=normalize_tab(_first(data, "scopeTab", "tab")),
            context_id=_first(data, "contextId", "t3"),
            date=data.get("date"),
            limit=limit,
        )

    if message_type == MessageTypes.CLEAR_LEADERBOARDS:
        context_id = _first(data, "contextId", "t3")
        if not context_id:
            raise InvalidRequestError("Context id is required")
        return ClearScope(context_id=str(context_id))

    raise InvalidRequestError(f"Unknown message type '{message_type}'")
