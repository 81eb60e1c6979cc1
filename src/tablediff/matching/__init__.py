"""
Row matching strategies.

Provides:
- PrimaryKeyMatcher: hash join on key columns
- ContentMatcher: greedy similarity matching for keyless datasets
"""

from .content import SIMILARITY_THRESHOLD, ContentMatcher
from .primary_key import PrimaryKeyMatcher

__all__ = ["PrimaryKeyMatcher", "ContentMatcher", "SIMILARITY_THRESHOLD"]
