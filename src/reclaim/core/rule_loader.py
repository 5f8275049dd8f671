"""Category rule discovery and loading."""

from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType

from reclaim.core.registry import CategoryRegistry
from reclaim.models.rule import CategoryRule
from reclaim.settings import Settings

log = logging.getLogger(__name__)

CATEGORY_IDS: tuple[str, ...] = (
    "temp_files",
    "recycle_bin",
    "downloads_old",
    "system_cache",
    "browser_cache",
    "system_logs",
    "windows_old",
)


def _find_rules_in_module(module: ModuleType) -> list[type[CategoryRule]]:
    """Find all concrete CategoryRule subclasses defined in a module."""
    rules: list[type[CategoryRule]] = []
    for _, obj in inspect.getmembers(module, inspect.isclass):
        if (
            issubclass(obj, CategoryRule)
            and obj is not CategoryRule
            and not inspect.isabstract(obj)
            and obj.__module__ == module.__name__
        ):
            rules.append(obj)
    return rules


def _load_builtin_rules() -> list[type[CategoryRule]]:
    """Load rules from the reclaim.categories package."""
    import reclaim.categories as categories_pkg

    found: list[type[CategoryRule]] = []
    for _importer, modname, _ispkg in pkgutil.iter_modules(categories_pkg.__path__):
        module = importlib.import_module(f"reclaim.categories.{modname}")
        found.extend(_find_rules_in_module(module))
    return found


def load_rules(registry: CategoryRegistry, settings: Settings | None = None) -> None:
    """Discover, configure and register the built-in category rules.

    The category set is fixed: a missing or unexpected rule is a packaging
    error and raises ``RuntimeError`` instead of being skipped.
    """
    by_id: dict[str, CategoryRule] = {}
    for cls in _load_builtin_rules():
        rule = cls()
        if settings is not None:
            rule.configure(settings)
        by_id[rule.id] = rule

    unexpected = set(by_id) - set(CATEGORY_IDS)
    missing = set(CATEGORY_IDS) - set(by_id)
    if unexpected or missing:
        raise RuntimeError(
            f"Category rules do not match the fixed set (missing: {sorted(missing)}, "
            f"unexpected: {sorted(unexpected)})"
        )

    for category_id in CATEGORY_IDS:
        registry.register(by_id[category_id])

    log.info("Loaded %d category rules", len(registry))
