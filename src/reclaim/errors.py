"""Exceptions raised by the cleanup engine."""

from __future__ import annotations


class ReclaimError(Exception):
    """Base class for all engine errors."""


class VolumeUnavailable(ReclaimError):
    """Raised when the capacity of the target volume cannot be read."""


class UnknownCategory(ReclaimError, KeyError):
    """Raised when a category identifier is not one of the fixed set."""

    def __init__(self, category_id: str) -> None:
        super().__init__(category_id)
        self.category_id = category_id

    def __str__(self) -> str:
        return f"Unknown cleanup category: {self.category_id!r}"


class ScanError(ReclaimError):
    """Raised when a scan fails as a whole; no partial result is returned."""


class ScanCancelled(ScanError):
    """Raised when a walk is abandoned through its cancel event."""


class SelectionError(ReclaimError):
    """Raised when a selection change breaks the selection contract."""


class HibernationError(ReclaimError):
    """Raised when the hibernation state cannot be read or changed."""


class RevealError(ReclaimError):
    """Raised when a path cannot be shown in the file manager."""
