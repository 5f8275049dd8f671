"""Permanent deletion of selected paths with per-path failure isolation."""

from __future__ import annotations

import logging
import os
import shutil
import stat
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Sequence

from reclaim.core.protected import protection_reason
from reclaim.core.registry import CategoryRegistry
from reclaim.models.clean_result import CleanupFailure, CleanupResult
from reclaim.models.rule import CategoryRule
from reclaim.utils import dir_info, is_nested, normalize_path, system_drive_root, under_any, walk_dirs

log = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


@dataclass(frozen=True, slots=True)
class _Target:
    path: str
    size_bytes: int
    is_dir: bool = False


def _remove_file(path: str) -> None:
    os.unlink(path)


def _remove_tree(path: str) -> None:
    shutil.rmtree(path)


def _reason(exc: OSError) -> str:
    return exc.strerror or str(exc)


class DeletionExecutor:
    """Deletes paths permanently; one failure never stops the rest.

    Each path is removed independently on a bounded thread pool.  Scan
    results are never touched; rescanning afterwards is up to the caller.
    """

    def __init__(
        self,
        registry: CategoryRegistry,
        root: Path | str | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        self.registry = registry
        self.root = Path(root) if root is not None else system_drive_root()
        self.max_workers = max(1, max_workers)

    # -- Categories --

    def delete_category_selection(
        self,
        category_ids: Iterable[str],
        excluded_paths: Mapping[str, Sequence[str]] | None = None,
        included_paths: Mapping[str, Sequence[str]] | None = None,
    ) -> CleanupResult:
        """Delete what a category-level selection resolves to right now.

        A category with included paths deletes only those; otherwise a
        selected category deletes every current match except its excluded
        paths (and anything below an excluded folder).  Included paths
        nested under another included folder go with that folder.
        """
        excluded_paths = excluded_paths or {}
        included_paths = included_paths or {}
        selected = set(category_ids)
        for unknown in sorted((selected | set(included_paths)) - set(self.registry.ids())):
            log.warning("Category '%s' not found, skipping", unknown)

        results: list[CleanupResult] = []
        for rule in self.registry:
            included = included_paths.get(rule.id) or ()
            if included:
                results.append(self._delete_included(rule, included))
            elif rule.id in selected:
                results.append(self._delete_category(rule, excluded_paths.get(rule.id) or ()))

        result = CleanupResult.merge(results)
        log.info(
            "Category cleanup removed %d items (%d bytes), %d failures",
            result.deleted_count,
            result.deleted_bytes,
            len(result.failed),
        )
        return result

    def _delete_category(self, rule: CategoryRule, excluded: Sequence[str]) -> CleanupResult:
        skip = {normalize_path(p) for p in excluded}
        targets = [
            _Target(path, st.st_size)
            for path, st in rule.iter_matches()
            if not under_any(path, skip)
        ]
        result = self._run(targets)
        if rule.cleanup_dirs:
            self._prune_empty_dirs(rule, skip)
        return result

    def _delete_included(self, rule: CategoryRule, included: Sequence[str]) -> CleanupResult:
        cutoff = rule.cutoff()
        targets: list[_Target] = []
        failed: list[CleanupFailure] = []

        requested = {normalize_path(p) for p in included}
        for path in _unique(included):
            if is_nested(path, requested):
                log.debug("%s is removed together with its parent folder", path)
                continue
            if not rule.contains(path):
                failed.append(CleanupFailure(path, "Path is outside cleanup scope."))
                continue
            try:
                st = os.lstat(path)
            except OSError as exc:
                failed.append(CleanupFailure(path, _reason(exc)))
                continue

            if stat.S_ISDIR(st.st_mode):
                if rule.whole_tree:
                    targets.append(_Target(path, dir_info(path)[0], is_dir=True))
                else:
                    targets.extend(_Target(p, s.st_size) for p, s in rule.iter_matches(under=path))
            elif stat.S_ISREG(st.st_mode):
                if rule.matches(path, st, cutoff):
                    targets.append(_Target(path, st.st_size))
                else:
                    log.debug("Skipping %s: no longer matches '%s'", path, rule.id)
            else:
                failed.append(CleanupFailure(path, "Not a regular file or directory."))

        return CleanupResult.merge([CleanupResult(failed=tuple(failed)), self._run(targets)])

    def _prune_empty_dirs(self, rule: CategoryRule, keep: set[str]) -> None:
        """Remove empty subdirectories deepest-first; roots stay."""
        for root in rule.roots():
            dirs = walk_dirs(root)
            dirs.sort(key=lambda d: d.count(os.sep), reverse=True)
            for directory in dirs:
                if under_any(directory, keep):
                    continue
                try:
                    os.rmdir(directory)
                except OSError:
                    log.debug("Keeping non-empty directory: %s", directory)

    # -- Standalone items --

    def delete_standalone_paths(self, paths: Iterable[str]) -> CleanupResult:
        """Delete individually selected files and folders.

        Paths nested under another requested folder go with that folder.
        Protected paths, the volume root and paths outside it are refused.
        """
        targets: list[_Target] = []
        failed: list[CleanupFailure] = []

        for path in _unique(paths):
            reason = protection_reason(path, self.root)
            if reason:
                log.warning("Refusing to delete %s: %s", path, reason)
                failed.append(CleanupFailure(path, reason))
                continue
            try:
                st = os.lstat(path)
            except OSError as exc:
                failed.append(CleanupFailure(path, _reason(exc)))
                continue
            if stat.S_ISDIR(st.st_mode):
                targets.append(_Target(path, dir_info(path)[0], is_dir=True))
            else:
                targets.append(_Target(path, st.st_size))

        folders = {normalize_path(t.path) for t in targets if t.is_dir}
        kept: list[_Target] = []
        for target in targets:
            if is_nested(target.path, folders):
                log.debug("%s is removed together with its parent folder", target.path)
                continue
            kept.append(target)

        result = CleanupResult.merge([CleanupResult(failed=tuple(failed)), self._run(kept)])
        log.info(
            "Standalone cleanup removed %d items (%d bytes), %d failures",
            result.deleted_count,
            result.deleted_bytes,
            len(result.failed),
        )
        return result

    # -- Execution --

    def _run(self, targets: list[_Target]) -> CleanupResult:
        """Delete targets concurrently and aggregate in input order."""
        if not targets:
            return CleanupResult()

        if len(targets) == 1 or self.max_workers == 1:
            outcomes = [_delete(t) for t in targets]
        else:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(targets))) as pool:
                outcomes = list(pool.map(_delete, targets))

        deleted_bytes = 0
        deleted_count = 0
        failed: list[CleanupFailure] = []
        for target, failure in zip(targets, outcomes):
            if failure is None:
                deleted_bytes += target.size_bytes
                deleted_count += 1
            else:
                failed.append(failure)
        return CleanupResult(deleted_bytes=deleted_bytes, deleted_count=deleted_count, failed=tuple(failed))


def _delete(target: _Target) -> CleanupFailure | None:
    try:
        if target.is_dir:
            _remove_tree(target.path)
        else:
            _remove_file(target.path)
    except OSError as exc:
        log.debug("Failed to delete %s: %s", target.path, exc)
        return CleanupFailure(target.path, _reason(exc))
    return None


def _unique(paths: Iterable[str]) -> list[str]:
    """Drop duplicates (after normalization), keeping first occurrences."""
    seen: set[str] = set()
    unique: list[str] = []
    for path in paths:
        key = normalize_path(path)
        if key in seen:
            continue
        seen.add(key)
        unique.append(path)
    return unique

