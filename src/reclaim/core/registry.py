"""Central category rule registry."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

from reclaim.errors import UnknownCategory
from reclaim.models.rule import CategoryRule

log = logging.getLogger(__name__)


class CategoryRegistry:
    """Stores the category rules in display order."""

    def __init__(self) -> None:
        self._rules: dict[str, CategoryRule] = {}

    def register(self, rule: CategoryRule) -> None:
        """Register a rule instance."""
        if rule.id in self._rules:
            log.warning("Category '%s' already registered, skipping duplicate", rule.id)
            return
        self._rules[rule.id] = rule
        log.debug("Registered category: %s (%s)", rule.id, rule.title)

    def get(self, category_id: str) -> CategoryRule | None:
        """Get a rule by its category ID."""
        return self._rules.get(category_id)

    def require(self, category_id: str) -> CategoryRule:
        """Get a rule by its category ID or raise ``UnknownCategory``."""
        rule = self._rules.get(category_id)
        if rule is None:
            raise UnknownCategory(category_id)
        return rule

    def get_all(self) -> list[CategoryRule]:
        """Get all registered rules."""
        return list(self._rules.values())

    def ids(self) -> list[str]:
        return list(self._rules)

    def owner_of(self, path: Path | str, st: os.stat_result | None = None) -> str | None:
        """Return the ID of the first category whose domain contains *path*.

        With *st* (a file's stat) the rule's filters must accept the file too.
        Without it only whole-tree rules can claim the path.
        """
        path_str = os.fspath(path)
        for rule in self._rules.values():
            if not rule.contains(path_str):
                continue
            if st is None:
                if rule.whole_tree:
                    return rule.id
                continue
            if rule.matches(path_str, st, rule.cutoff()):
                return rule.id
        return None

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[CategoryRule]:
        return iter(self._rules.values())

    def __contains__(self, category_id: str) -> bool:
        return category_id in self._rules
