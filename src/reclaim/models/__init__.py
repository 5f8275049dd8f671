"""Reclaim data models."""

from reclaim.models.category import Category, CategoryItem, CategoryItems
from reclaim.models.clean_result import CleanupFailure, CleanupResult
from reclaim.models.large_item import LargeItem
from reclaim.models.rule import CategoryRule
from reclaim.models.volume import HibernationInfo, VolumeInfo

__all__ = [
    "Category",
    "CategoryItem",
    "CategoryItems",
    "CategoryRule",
    "CleanupFailure",
    "CleanupResult",
    "HibernationInfo",
    "LargeItem",
    "VolumeInfo",
]
