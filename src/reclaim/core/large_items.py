"""Large file and folder discovery across the whole volume."""

from __future__ import annotations

import logging
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable

from reclaim.core.protected import protection_reason, pruned_dirs
from reclaim.core.registry import CategoryRegistry
from reclaim.models.large_item import LargeItem
from reclaim.utils import system_drive_root, walk_files

log = logging.getLogger(__name__)

MIB = 1024 * 1024
DEFAULT_MIN_SIZE_BYTES = 1024 * MIB
DEFAULT_LIMIT = 200
MAX_LIMIT = 1000
DEFAULT_KEYWORDS: tuple[str, ...] = ("log", "cache", "temp", "tmp")


class SuspicionPolicy(ABC):
    """Decides which large items look disposable.

    Advisory only: a suspicious item is never selected automatically.
    """

    @abstractmethod
    def is_suspicious_name(self, name: str) -> bool:
        """Check a single file or directory name."""

    def is_suspicious(self, path: str, root: str) -> bool:
        """Check a path by every component below the scan root."""
        rel = os.path.relpath(path, root)
        return any(self.is_suspicious_name(part) for part in Path(rel).parts)


class KeywordPolicy(SuspicionPolicy):
    """Flags names containing any of a few keywords, case-insensitively."""

    def __init__(self, keywords: Iterable[str] = DEFAULT_KEYWORDS) -> None:
        self.keywords = tuple(k.lower() for k in keywords)

    def is_suspicious_name(self, name: str) -> bool:
        lowered = name.lower()
        return any(keyword in lowered for keyword in self.keywords)


class LargeItemScanner:
    """Finds large files and large suspicious folders on one volume.

    Files at or above the threshold are reported individually.  Folders are
    reported when the policy flags their name and the files credited to them
    reach the threshold.  Each file is credited to its innermost flagged
    ancestor, so a user folder whose name merely contains a keyword is not
    reported because of a cache folder somewhere below it.  A reported
    folder's size is the recursive total of everything deleting it frees,
    so reported items may nest.
    """

    def __init__(
        self,
        registry: CategoryRegistry,
        root: Path | str | None = None,
        *,
        min_size_bytes: int = DEFAULT_MIN_SIZE_BYTES,
        limit: int = DEFAULT_LIMIT,
        policy: SuspicionPolicy | None = None,
    ) -> None:
        self.registry = registry
        self.root = Path(root) if root is not None else system_drive_root()
        self.min_size_bytes = max(0, min_size_bytes)
        self.limit = max(0, min(limit, MAX_LIMIT))
        self.policy = policy or KeywordPolicy()

    def scan(self, cancel: threading.Event | None = None) -> list[LargeItem]:
        """Walk the volume and return the largest items, biggest first.

        Results are only assembled once the walk completes, so a cancelled
        scan publishes nothing.

        Raises:
            ScanCancelled: *cancel* was set during the walk.
        """
        root = os.fspath(self.root)
        files: list[LargeItem] = []
        credited: dict[str, int] = {}
        folder_sizes: dict[str, int] = {}
        flagged: dict[str, list[str]] = {}

        for path, st in walk_files(root, cancel=cancel, prune=pruned_dirs(root), same_device=True):
            size = st.st_size
            if size >= self.min_size_bytes:
                files.append(
                    LargeItem(
                        path=path,
                        name=os.path.basename(path),
                        size_bytes=size,
                        is_dir=False,
                        suspicious=self.policy.is_suspicious(path, root),
                        category_id=self.registry.owner_of(path, st),
                    )
                )

            parent = os.path.dirname(path)
            if parent not in flagged:
                flagged[parent] = self._flagged_ancestors(parent, root)
            ancestors = flagged[parent]
            if ancestors:
                credited[ancestors[-1]] = credited.get(ancestors[-1], 0) + size
                for folder in ancestors:
                    folder_sizes[folder] = folder_sizes.get(folder, 0) + size

        folders: list[LargeItem] = []
        for folder, own in credited.items():
            if own < self.min_size_bytes:
                continue
            size = folder_sizes[folder]
            reason = protection_reason(folder, root)
            if reason:
                log.debug("Skipping protected folder %s: %s", folder, reason)
                continue
            folders.append(
                LargeItem(
                    path=folder,
                    name=os.path.basename(folder) or folder,
                    size_bytes=size,
                    is_dir=True,
                    suspicious=True,
                    category_id=self.registry.owner_of(folder),
                )
            )

        items = files + folders
        items.sort(key=lambda item: (-item.size_bytes, item.path))
        log.info("Large-item scan of %s found %d items (%d reported)", root, len(items), min(len(items), self.limit))
        return items[: self.limit]

    def _flagged_ancestors(self, directory: str, root: str) -> list[str]:
        """Directories between *root* and *directory* the policy flags, outermost first."""
        rel = os.path.relpath(directory, root)
        if rel == os.curdir:
            return []
        found: list[str] = []
        current = root
        for part in Path(rel).parts:
            current = os.path.join(current, part)
            if self.policy.is_suspicious_name(part):
                found.append(current)
        return found
