"""
Custom exceptions for the ranking engine with user-friendly error messages.
"""

class LeaderboardException(Exception):
    """Base exception for leaderboard-related errors."""
    def __init__(self, message: str, user_message: str = None):
        super().__init__(message)
        self.user_message = user_message or message

class IdentityNotFoundError(LeaderboardException):
    """Raised when no display name can be resolved for an identity."""
    def __init__(self, identity_id: str):
        self.identity_id = identity_id
        super().__init__(
            f"Identity '{identity_id}' not found",
            "❌ Player not found."
        )

class BackingStoreUnavailable(LeaderboardException):
    """Raised when the backing store cannot be reached or rejects a call."""
    def __init__(self, operation: str, details: str = None):
        self.operation = operation
        super().__init__(
            f"Backing store error during {operation}: {details}",
            "❌ Operation failed. Please try again later."
        )

class MalformedMemberError(LeaderboardException):
    """Raised when a stored key or member does not have the expected shape."""
    def __init__(self, value: str, reason: str):
        self.value = value
        super().__init__(
            f"Malformed entry {value!r}: {reason}",
            "❌ Leaderboard data is malformed."
        )

class ScoreValidationError(LeaderboardException):
    """Raised when score validation fails."""
    def __init__(self, score, reason: str):
        super().__init__(
            f"Invalid score {score!r}: {reason}",
            f"❌ {reason}"
        )

class InvalidRequestError(LeaderboardException):
    """Raised when a request cannot be mapped to a known operation."""
    def __init__(self, reason: str):
        super().__init__(
            f"Invalid request: {reason}",
            f"❌ {reason}"
        )
