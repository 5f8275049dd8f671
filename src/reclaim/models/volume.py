"""Volume capacity snapshot."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class VolumeInfo:
    """Capacity counters of one volume, read at a single point in time."""

    mount_point: str
    total_bytes: int
    free_bytes: int
    used_bytes: int

    @property
    def used_fraction(self) -> float:
        if self.total_bytes == 0:
            return 0.0
        return self.used_bytes / self.total_bytes

    @property
    def used_percent(self) -> float:
        return self.used_fraction * 100

    def to_dict(self) -> dict:
        return {
            "mountPoint": self.mount_point,
            "totalBytes": self.total_bytes,
            "freeBytes": self.free_bytes,
            "usedBytes": self.used_bytes,
            "usedPercent": self.used_percent,
        }


@dataclass(frozen=True, slots=True)
class HibernationInfo:
    """State of the hibernation file on the system drive."""

    enabled: bool
    size_bytes: int
    path: str

    def to_dict(self) -> dict:
        return {"enabled": self.enabled, "sizeBytes": self.size_bytes, "path": self.path}
