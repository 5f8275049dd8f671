"""System update and package caches."""

from __future__ import annotations

from pathlib import Path

from reclaim.models.rule import CategoryRule
from reclaim.utils import IS_WINDOWS, system_root

_POSIX_CACHE_DIRS: tuple[Path, ...] = (
    Path("/var/cache/apt/archives"),
    Path("/var/cache/pacman/pkg"),
    Path("/var/cache/dnf"),
)


class SystemCacheRule(CategoryRule):
    """Downloaded update payloads and package archives."""

    id = "system_cache"
    title = "System Cache"
    description = "Cached system updates and package downloads that have already been installed."

    def _roots(self) -> list[Path]:
        if IS_WINDOWS:
            distribution = system_root() / "SoftwareDistribution"
            return [distribution / "Download", distribution / "DeliveryOptimization" / "Cache"]
        return list(_POSIX_CACHE_DIRS)
