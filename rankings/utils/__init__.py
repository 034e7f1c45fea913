"""
Utilities for the ranking engine.
"""
