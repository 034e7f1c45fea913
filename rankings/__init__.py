"""
Ranking engine for word chain scores across global, context and daily boards.
"""

__version__ = "1.0.0"
