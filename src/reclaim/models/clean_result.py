"""Cleaning result dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable


@dataclass(frozen=True, slots=True)
class CleanupFailure:
    """A path that could not be deleted and why."""

    path: str
    reason: str

    def to_dict(self) -> dict:
        return {"path": self.path, "message": self.reason}


@dataclass(frozen=True, slots=True)
class CleanupResult:
    """Result of one deletion batch."""

    deleted_bytes: int = 0
    deleted_count: int = 0
    failed: tuple[CleanupFailure, ...] = field(default_factory=tuple)

    @classmethod
    def merge(cls, results: Iterable[CleanupResult]) -> CleanupResult:
        """Combine several results, keeping failures in order."""
        deleted_bytes = 0
        deleted_count = 0
        failed: list[CleanupFailure] = []
        for result in results:
            deleted_bytes += result.deleted_bytes
            deleted_count += result.deleted_count
            failed.extend(result.failed)
        return cls(deleted_bytes=deleted_bytes, deleted_count=deleted_count, failed=tuple(failed))

    def to_dict(self) -> dict:
        return {
            "deletedBytes": self.deleted_bytes,
            "deletedCount": self.deleted_count,
            "failed": [f.to_dict() for f in self.failed],
        }
