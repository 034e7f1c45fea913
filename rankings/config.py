import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Ranking engine configuration settings"""

    # Redis settings
    REDIS_URL = os.getenv('REDIS_URL')
    KEY_PREFIX = os.getenv('KEY_PREFIX', 'wordlink:')
    SCAN_BATCH_SIZE = int(os.getenv('SCAN_BATCH_SIZE', 100))

    # Runtime settings
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    LOG_DIR = os.getenv('LOG_DIR', 'logs')
    LOG_TO_FILE = os.getenv('LOG_TO_FILE', 'False').lower() == 'true'

    # Leaderboard settings
    DEFAULT_LEADERBOARD_LIMIT = int(os.getenv('DEFAULT_LEADERBOARD_LIMIT', 10))
    MAX_LEADERBOARD_LIMIT = int(os.getenv('MAX_LEADERBOARD_LIMIT', 100))
    GLOBAL_ORIGIN_LABEL = os.getenv('GLOBAL_ORIGIN_LABEL', 'All Contexts')
    DAILY_ORIGIN_LABEL = os.getenv('DAILY_ORIGIN_LABEL', 'Daily Challenge')

    # Legacy compound members (t3_<post>_t2_<player>) embed the player key
    LEGACY_MEMBER_PATTERN = os.getenv('LEGACY_MEMBER_PATTERN', r't3_[A-Za-z0-9]+_(t2_[A-Za-z0-9]+)')

    # Clearing a context also wipes the global board (observed behavior)
    CLEAR_GLOBAL_ON_SCOPE_CLEAR = os.getenv('CLEAR_GLOBAL_ON_SCOPE_CLEAR', 'True').lower() == 'true'

    @classmethod
    def validate(cls):
        """Validate that the configuration is consistent"""
        if cls.DEFAULT_LEADERBOARD_LIMIT < 1:
            raise ValueError("DEFAULT_LEADERBOARD_LIMIT must be a positive integer")
        if cls.MAX_LEADERBOARD_LIMIT < cls.DEFAULT_LEADERBOARD_LIMIT:
            raise ValueError("MAX_LEADERBOARD_LIMIT must be >= DEFAULT_LEADERBOARD_LIMIT")
        if cls.SCAN_BATCH_SIZE < 1:
            raise ValueError("SCAN_BATCH_SIZE must be a positive integer")
