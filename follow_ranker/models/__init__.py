"""
Data models for Follow Ranker.

Usage:
    from follow_ranker.models import RelationSnapshot, ProfileRecord, Category
"""

from .enums import Category
from .profile import ClassifiedRow, ProfileRecord
from .relations import CacheEntry, RelationSnapshot

__all__ = [
    "Category",
    "CacheEntry",
    "ClassifiedRow",
    "ProfileRecord",
    "RelationSnapshot",
]
