"""Scanning and cleaning orchestration engine."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from reclaim.core import hibernation, reveal
from reclaim.core.executor import DEFAULT_MAX_WORKERS, DeletionExecutor
from reclaim.core.large_items import (
    DEFAULT_KEYWORDS,
    DEFAULT_LIMIT,
    DEFAULT_MIN_SIZE_BYTES,
    MIB,
    KeywordPolicy,
    LargeItemScanner,
    SuspicionPolicy,
)
from reclaim.core.registry import CategoryRegistry
from reclaim.core.rule_loader import load_rules
from reclaim.core.scanner import DEFAULT_ITEM_LIMIT, CategoryScanner, ProgressCallback
from reclaim.core.selection import ScanSnapshot, Selection
from reclaim.core.volume import get_volume_info
from reclaim.errors import SelectionError
from reclaim.models.category import Category, CategoryItems
from reclaim.models.clean_result import CleanupResult
from reclaim.models.large_item import LargeItem
from reclaim.models.volume import HibernationInfo, VolumeInfo
from reclaim.settings import Settings
from reclaim.utils import system_drive_root

log = logging.getLogger(__name__)


class ReclaimEngine:
    """Boundary operations offered to the CLI and the D-Bus service.

    The engine keeps configuration and the category registry only; every
    call works on live filesystem state and returns fresh values.
    """

    def __init__(
        self,
        registry: CategoryRegistry,
        root: Path | str | None = None,
        *,
        min_size_bytes: int = DEFAULT_MIN_SIZE_BYTES,
        large_limit: int = DEFAULT_LIMIT,
        policy: SuspicionPolicy | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.registry = registry
        self.root = Path(root) if root is not None else system_drive_root()
        self.scanner = CategoryScanner(registry)
        self.large_scanner = LargeItemScanner(
            registry,
            self.root,
            min_size_bytes=min_size_bytes,
            limit=large_limit,
            policy=policy,
        )
        self.executor = DeletionExecutor(registry, self.root, max_workers=max_workers)

    @classmethod
    def from_settings(cls, settings: Settings | None = None, **overrides) -> ReclaimEngine:
        """Build an engine with the built-in rules configured from *settings*."""
        settings = settings or Settings.instance()
        registry = CategoryRegistry()
        load_rules(registry, settings)
        options = {
            "root": settings.get("volume.root"),
            "min_size_bytes": int(settings.get("large_items.min_size_mb", 1024)) * MIB,
            "large_limit": int(settings.get("large_items.limit", DEFAULT_LIMIT)),
            "policy": KeywordPolicy(settings.get("large_items.keywords") or DEFAULT_KEYWORDS),
            "max_workers": int(settings.get("cleanup.max_workers", DEFAULT_MAX_WORKERS)),
        }
        options.update(overrides)
        return cls(registry, **options)

    # -- Scanning --

    def get_disk_info(self) -> VolumeInfo:
        return get_volume_info(self.root)

    def scan_cleanup_items(
        self,
        cancel: threading.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[Category]:
        return self.scanner.scan(cancel=cancel, on_progress=on_progress)

    def list_category_items(self, category_id: str, limit: int = DEFAULT_ITEM_LIMIT) -> CategoryItems:
        return self.scanner.list_items(category_id, limit)

    def scan_large_items(self, cancel: threading.Event | None = None) -> list[LargeItem]:
        return self.large_scanner.scan(cancel=cancel)

    def scan(
        self,
        include_large: bool = False,
        cancel: threading.Event | None = None,
    ) -> tuple[VolumeInfo, ScanSnapshot]:
        """Run the volume query and the scans concurrently.

        Returns:
            The volume snapshot and the scan snapshot a Selection works on.
        """
        with ThreadPoolExecutor(max_workers=3) as pool:
            volume = pool.submit(self.get_disk_info)
            categories = pool.submit(self.scan_cleanup_items, cancel)
            large = pool.submit(self.scan_large_items, cancel) if include_large else None
            snapshot = ScanSnapshot(
                categories=tuple(categories.result()),
                large_items=tuple(large.result()) if large else (),
            )
            return volume.result(), snapshot

    # -- Cleaning --

    def clean_categories(
        self,
        ids: Iterable[str],
        excluded_paths: Mapping[str, Sequence[str]] | None = None,
        included_paths: Mapping[str, Sequence[str]] | None = None,
    ) -> CleanupResult:
        return self.executor.delete_category_selection(ids, excluded_paths, included_paths)

    def clean_large_items(self, paths: Iterable[str]) -> CleanupResult:
        return self.executor.delete_standalone_paths(paths)

    def clean(self, selection: Selection) -> CleanupResult:
        """Delete everything a selection resolves to.

        Raises:
            SelectionError: Nothing is selected.
        """
        if selection.entry_count() == 0:
            raise SelectionError("Nothing is selected")
        request = selection.clean_request()
        results = [
            self.clean_categories(request.category_ids, request.excluded_paths, request.included_paths)
        ]
        if request.standalone_paths:
            results.append(self.clean_large_items(request.standalone_paths))
        return CleanupResult.merge(results)

    # -- Pass-throughs --

    def reveal_path(self, path: str) -> None:
        reveal.reveal_path(path)

    def get_hibernation_info(self) -> HibernationInfo:
        return hibernation.get_hibernation_info()

    def set_hibernation_enabled(self, enabled: bool) -> HibernationInfo:
        return hibernation.set_hibernation_enabled(enabled)
