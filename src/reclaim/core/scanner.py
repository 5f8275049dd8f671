"""Category scanning: aggregate totals and per-category item listings."""

from __future__ import annotations

import heapq
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterator

from reclaim.core.registry import CategoryRegistry
from reclaim.errors import ScanError
from reclaim.models.category import Category, CategoryItem, CategoryItems
from reclaim.models.rule import CategoryRule
from reclaim.utils import mtime_ms

log = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str], None]  # (category_id, status_message)

DEFAULT_ITEM_LIMIT = 200
MAX_ITEM_LIMIT = 2000


def _item_order(item: CategoryItem) -> tuple[int, str]:
    return -item.size_bytes, item.path


class CategoryScanner:
    """Walks the fixed category rules against the live filesystem.

    Every call walks again; nothing is cached between calls.
    """

    def __init__(self, registry: CategoryRegistry, max_workers: int = 4) -> None:
        self.registry = registry
        self.max_workers = max_workers

    def scan(
        self,
        cancel: threading.Event | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> list[Category]:
        """Compute size and file count for every category.

        Rules are walked on a small thread pool.  Unreadable entries are
        skipped; any other failure aborts the whole scan.

        Returns:
            One Category per registered rule, in registry order, including
            empty ones.

        Raises:
            ScanError: A rule failed unexpectedly (or the scan was cancelled).
        """
        rules = self.registry.get_all()
        if not rules:
            return []

        if (os.cpu_count() or 1) > 1 and len(rules) > 1 and self.max_workers > 1:
            totals = self._scan_parallel(rules, cancel, on_progress)
        else:
            totals = [self._scan_rule(rule, cancel, on_progress) for rule in rules]

        log.info("Scanned %d categories", len(totals))
        return totals

    def _scan_parallel(
        self,
        rules: list[CategoryRule],
        cancel: threading.Event | None,
        on_progress: ProgressCallback | None,
    ) -> list[Category]:
        """Scan rules concurrently and return results in rule order."""
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(rules))) as executor:
            futures = [executor.submit(self._scan_rule, rule, cancel, on_progress) for rule in rules]
            return [future.result() for future in futures]

    def _scan_rule(
        self,
        rule: CategoryRule,
        cancel: threading.Event | None,
        on_progress: ProgressCallback | None,
    ) -> Category:
        if on_progress:
            on_progress(rule.id, "scanning")
        size = 0
        count = 0
        try:
            for _path, st in rule.iter_matches(cancel):
                size += st.st_size
                count += 1
        except ScanError:
            if on_progress:
                on_progress(rule.id, "error")
            raise
        except Exception as exc:
            log.exception("Category '%s' failed during scan", rule.id)
            if on_progress:
                on_progress(rule.id, "error")
            raise ScanError(f"Scanning '{rule.id}' failed: {exc}") from exc
        if on_progress:
            on_progress(rule.id, "done")
        log.debug("Category '%s': %d files, %d bytes", rule.id, count, size)
        return rule.describe(size, count)

    def list_items(
        self,
        category_id: str,
        limit: int = DEFAULT_ITEM_LIMIT,
        cancel: threading.Event | None = None,
    ) -> CategoryItems:
        """List the largest matching files of one category.

        Items are ordered by size (descending), ties broken by path.
        ``has_more`` is true iff strictly more than *limit* files match.

        Raises:
            UnknownCategory: *category_id* is not one of the fixed set.
            ValueError: *limit* is negative.
            ScanError: The walk failed unexpectedly.
        """
        rule = self.registry.require(category_id)
        if limit < 0:
            raise ValueError(f"limit must not be negative, got {limit}")
        limit = min(limit, MAX_ITEM_LIMIT)

        matched = 0

        def _items() -> Iterator[CategoryItem]:
            nonlocal matched
            for path, st in rule.iter_matches(cancel):
                matched += 1
                yield CategoryItem(path=path, size_bytes=st.st_size, modified_ms=mtime_ms(st))

        items = _items()
        try:
            top = heapq.nsmallest(limit, items, key=_item_order)
            # nsmallest stops early for limit=0; the count needs the full walk
            for _ in items:
                pass
        except ScanError:
            raise
        except Exception as exc:
            log.exception("Listing category '%s' failed", category_id)
            raise ScanError(f"Listing '{category_id}' failed: {exc}") from exc

        return CategoryItems(items=top, has_more=matched > limit)
