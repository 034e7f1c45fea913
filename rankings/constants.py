"""
Engine-wide constants for the ranking engine.

This module contains the store key layout and the fixed values shared by the
services, so that every component builds keys the same way.
"""

class KeyTemplates:
    """Key templates for the sorted associative store (prefix is added by callers)."""

    # identity ids ordered by best score across all contexts
    GLOBAL_SCORES = "score_z:global"

    # identity ids ordered by score inside one context
    CONTEXT_SCORES = "score_z:ctx:{context_id}"
    CONTEXT_SCORES_PREFIX = "score_z:ctx:"
    CONTEXT_SCORES_PATTERN = "score_z:ctx:*"

    # identity ids ordered by score for one daily challenge
    DAILY_SCORES = "score_z:daily:{date}"

    # JSON identity record
    IDENTITY_RECORD = "identity:{identity_id}"

    # display name stored on its own for reliable lookup
    DISPLAY_NAME = "display_name:{identity_id}"

    # human readable context name
    CONTEXT_LABEL = "context_label:{context_id}"


class LeaderboardTabs:
    """Leaderboard tab names accepted at the engine boundary."""

    CONTEXT = "context"
    GLOBAL = "global"
    DAILY = "daily"

    ALL = (CONTEXT, GLOBAL, DAILY)

    # Tab names used by the web view
    ALIASES = {
        "this-subreddit": CONTEXT,
        "all-subreddits": GLOBAL,
        "daily-challenge": DAILY,
    }


class MessageTypes:
    """Message types relayed from the client surface."""

    SUBMIT_SCORE = "submitScore"
    FETCH_LEADERBOARD = "fetchLeaderboard"
    CLEAR_LEADERBOARDS = "clearLeaderboards"


# ISO calendar date used for daily scopes
DAILY_DATE_FORMAT = "%Y-%m-%d"
