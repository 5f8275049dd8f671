"""Base category rule interface."""

from __future__ import annotations

import fnmatch
import logging
import os
import threading
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterator

from reclaim.models.category import Category
from reclaim.utils import dedup_roots, is_within, walk_files

if TYPE_CHECKING:
    from reclaim.settings import Settings

log = logging.getLogger(__name__)


class CategoryRule(ABC):
    """Base class for the fixed cleanup categories.

    A rule names the locations of one class of removable content and the
    filters a file must pass to belong to it.  Rules never delete anything;
    the deletion executor works from what they enumerate.
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """Stable identifier, e.g. 'temp_files'."""

    @property
    @abstractmethod
    def title(self) -> str:
        """Human-readable title, e.g. 'Temporary Files'."""

    @property
    @abstractmethod
    def description(self) -> str:
        """What this category contains and why it is removable."""

    max_age: float | None = None
    """Only files last modified more than this many seconds ago match."""

    name_patterns: tuple[str, ...] = ()
    """fnmatch patterns a file name must match (any). Empty matches all."""

    cleanup_dirs: bool = True
    """Whether empty subdirectories are pruned after cleaning."""

    @abstractmethod
    def _roots(self) -> list[Path]:
        """Locations this category covers on the current platform."""

    def configure(self, settings: Settings) -> None:
        """Apply user settings. Rules without tunables ignore this."""

    def roots(self) -> list[Path]:
        """Deduplicated roots; nested roots are folded into their parent."""
        return dedup_roots(self._roots())

    def accepts(self, path: str, st: os.stat_result) -> bool:
        """Extra per-file filter for subclasses."""
        return True

    @property
    def whole_tree(self) -> bool:
        """True when every file under the roots belongs to this category."""
        return (
            self.max_age is None
            and not self.name_patterns
            and type(self).accepts is CategoryRule.accepts
        )

    def cutoff(self, now: float | None = None) -> float | None:
        if self.max_age is None:
            return None
        return (time.time() if now is None else now) - self.max_age

    def matches(self, path: str, st: os.stat_result, cutoff: float | None) -> bool:
        """Check whether a regular file belongs to this category."""
        if cutoff is not None and not st.st_mtime < cutoff:
            return False
        if self.name_patterns:
            name = os.path.basename(path).lower()
            if not any(fnmatch.fnmatch(name, p) for p in self.name_patterns):
                return False
        return self.accepts(path, st)

    def contains(self, path: Path | str) -> bool:
        """Check whether *path* lies inside one of this rule's roots."""
        return any(is_within(path, root) for root in self.roots())

    def iter_matches(
        self,
        cancel: threading.Event | None = None,
        *,
        under: Path | str | None = None,
    ) -> Iterator[tuple[str, os.stat_result]]:
        """Yield ``(path, stat)`` of every matching file right now.

        With *under* the walk is restricted to that subtree, which must lie
        inside one of the roots.
        """
        cutoff = self.cutoff()
        starts = [Path(under)] if under is not None else self.roots()
        for start in starts:
            for path, st in walk_files(start, cancel=cancel):
                if self.matches(path, st, cutoff):
                    yield path, st

    def describe(self, size_bytes: int = 0, file_count: int = 0) -> Category:
        return Category(
            id=self.id,
            title=self.title,
            description=self.description,
            size_bytes=size_bytes,
            file_count=file_count,
        )

    def info(self) -> dict[str, Any]:
        """Static description of the rule for listings."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "roots": [str(r) for r in self.roots()],
            "maxAgeSeconds": self.max_age,
            "namePatterns": list(self.name_patterns),
        }
