"""Selection reconciliation between categories and individual paths.

Each category is either *selected* ("everything except the excluded
paths") or not ("nothing except the included paths").  Toggling the
category itself always starts from a clean slate.  Large items outside
every category live in a flat set of their own.

Pure in-memory logic: nothing here touches the filesystem.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from reclaim.errors import SelectionError, UnknownCategory
from reclaim.models.category import Category
from reclaim.models.large_item import LargeItem
from reclaim.utils import is_nested, normalize_path


def _require_size(path: str, size_bytes: int | None) -> int:
    if size_bytes is None:
        raise SelectionError(f"Size of {path} is unknown")
    if size_bytes < 0:
        raise SelectionError(f"Size of {path} is negative ({size_bytes})")
    return size_bytes


def _outermost_bytes(sizes: dict[str, int]) -> int:
    """Sum recorded sizes, skipping paths that lie below another recorded path.

    A folder's recorded size already covers everything inside it.
    """
    keys = {normalize_path(p) for p in sizes}
    return sum(size for path, size in sizes.items() if not is_nested(path, keys))


@dataclass(frozen=True, slots=True)
class ScanSnapshot:
    """Scan results a selection session works against."""

    categories: tuple[Category, ...] = ()
    large_items: tuple[LargeItem, ...] = ()


@dataclass(frozen=True, slots=True)
class CleanRequest:
    """Concrete input for the deletion executor."""

    category_ids: tuple[str, ...] = ()
    excluded_paths: dict[str, list[str]] = field(default_factory=dict)
    included_paths: dict[str, list[str]] = field(default_factory=dict)
    standalone_paths: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.category_ids or self.included_paths or self.standalone_paths)

    def to_dict(self) -> dict:
        return {
            "ids": list(self.category_ids),
            "excludedPaths": self.excluded_paths,
            "includedPaths": self.included_paths,
            "standalonePaths": list(self.standalone_paths),
        }


class Selection:
    """Tracks what the user has checked against one scan snapshot."""

    def __init__(self, snapshot: ScanSnapshot) -> None:
        self.snapshot = snapshot
        self._sizes: dict[str, int] = {c.id: c.size_bytes for c in snapshot.categories}
        self._order: list[str] = [c.id for c in snapshot.categories]
        self._owned: dict[str, str] = {}
        self._large_sizes: dict[str, int] = {}
        for item in snapshot.large_items:
            self._large_sizes[item.path] = item.size_bytes
            if item.category_id is not None:
                self._owned[item.path] = item.category_id

        self._selected: set[str] = set()
        # path -> size as it was when the override was recorded
        self._excluded: dict[str, dict[str, int]] = {}
        self._included: dict[str, dict[str, int]] = {}
        self._excluded_bytes: dict[str, int] = {}
        self._included_bytes: dict[str, int] = {}
        self._standalone: dict[str, int] = {}

    # -- Queries --

    def is_category_selected(self, category_id: str) -> bool:
        self._check(category_id)
        return category_id in self._selected

    def is_selected(self, path: str, category_id: str | None = None) -> bool:
        """Effective checked state of one path."""
        if category_id is None:
            return path in self._standalone
        self._check(category_id)
        if category_id in self._selected:
            return path not in self._excluded.get(category_id, {})
        return path in self._included.get(category_id, {})

    def is_large_item_selected(self, item: LargeItem) -> bool:
        return self.is_selected(item.path, item.category_id)

    def excluded_paths(self, category_id: str) -> set[str]:
        self._check(category_id)
        return set(self._excluded.get(category_id, {}))

    def included_paths(self, category_id: str) -> set[str]:
        self._check(category_id)
        return set(self._included.get(category_id, {}))

    def excluded_bytes(self, category_id: str) -> int:
        return self._excluded_bytes.get(category_id, 0)

    def included_bytes(self, category_id: str) -> int:
        return self._included_bytes.get(category_id, 0)

    @property
    def standalone_paths(self) -> set[str]:
        return set(self._standalone)

    def total_reclaimable_bytes(self) -> int:
        """Bytes the current selection would free."""
        total = 0
        for category_id, size in self._sizes.items():
            if category_id in self._selected:
                total += max(0, size - self.excluded_bytes(category_id))
            else:
                total += self.included_bytes(category_id)
        return total + _outermost_bytes(self._standalone)

    def entry_count(self) -> int:
        """Categories with any effective selection plus standalone items.

        Cleaning is only allowed when this is non-zero.
        """
        active = set(self._selected)
        active.update(cid for cid, paths in self._included.items() if paths)
        return len(active) + len(self._standalone)

    # -- Mutators --

    def toggle_category(self, category_id: str) -> bool:
        """Flip a category and drop its per-path overrides.

        Returns:
            The new selected state.
        """
        self._check(category_id)
        if category_id in self._selected:
            self._selected.discard(category_id)
        else:
            self._selected.add(category_id)
        self._reset_overrides(category_id)
        return category_id in self._selected

    def toggle_item(
        self,
        category_id: str | None,
        path: str,
        next_checked: bool,
        size_bytes: int | None = None,
    ) -> None:
        """Check or uncheck one path.

        Inside a selected category this records an exclusion, otherwise an
        inclusion.  Without a category the path goes to the standalone set.

        Raises:
            SelectionError: A category-owned large item was toggled as
                standalone, or no size is known for the path.
        """
        if size_bytes is None:
            size_bytes = self._large_sizes.get(path)

        if category_id is None:
            owner = self._owned.get(path)
            if owner is not None:
                raise SelectionError(f"{path} belongs to category '{owner}' and cannot be selected on its own")
            if next_checked:
                self._standalone[path] = _require_size(path, size_bytes)
            else:
                self._standalone.pop(path, None)
            return

        self._check(category_id)
        if category_id in self._selected:
            # Checked means "not excluded"
            self._override(self._excluded, self._excluded_bytes, category_id, path, size_bytes, add=not next_checked)
        else:
            self._override(self._included, self._included_bytes, category_id, path, size_bytes, add=next_checked)

    def toggle_large_item(self, item: LargeItem, next_checked: bool) -> None:
        """Check or uncheck a large item through its owning category, if any."""
        self.toggle_item(item.category_id, item.path, next_checked, item.size_bytes)

    def select_all(self) -> None:
        """Select every category with no overrides."""
        self._selected = set(self._sizes)
        for category_id in self._sizes:
            self._reset_overrides(category_id)

    def clear(self) -> None:
        """Drop every category, override and standalone selection."""
        self._selected.clear()
        self._excluded.clear()
        self._included.clear()
        self._excluded_bytes.clear()
        self._included_bytes.clear()
        self._standalone.clear()

    def clean_request(self) -> CleanRequest:
        """Build the executor input for the current selection."""
        selected = tuple(cid for cid in self._order if cid in self._selected)
        excluded = {cid: sorted(self._excluded[cid]) for cid in selected if self._excluded.get(cid)}
        included = {
            cid: sorted(paths)
            for cid in self._order
            if cid not in self._selected and (paths := self._included.get(cid))
        }
        return CleanRequest(
            category_ids=selected,
            excluded_paths=excluded,
            included_paths=included,
            standalone_paths=tuple(sorted(self._standalone)),
        )

    # -- Internals --

    def _check(self, category_id: str) -> None:
        if category_id not in self._sizes:
            raise UnknownCategory(category_id)

    def _reset_overrides(self, category_id: str) -> None:
        self._excluded.pop(category_id, None)
        self._included.pop(category_id, None)
        self._excluded_bytes.pop(category_id, None)
        self._included_bytes.pop(category_id, None)

    @staticmethod
    def _override(
        paths: dict[str, dict[str, int]],
        totals: dict[str, int],
        category_id: str,
        path: str,
        size_bytes: int | None,
        *,
        add: bool,
    ) -> None:
        """Add or remove one override; repeated toggles to the same state are no-ops."""
        bucket = paths.setdefault(category_id, {})
        if add:
            if path in bucket:
                return
            bucket[path] = _require_size(path, size_bytes)
        else:
            if path not in bucket:
                return
            bucket.pop(path)
        totals[category_id] = _outermost_bytes(bucket)
