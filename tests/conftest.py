"""Shared test fixtures."""

from __future__ import annotations

import os
import time
from pathlib import Path

import pytest

from reclaim.core.registry import CategoryRegistry
from reclaim.models.rule import CategoryRule

DAY = 86400


class FakeRule(CategoryRule):
    """Category rule rooted at temp directories."""

    def __init__(
        self,
        rule_id: str,
        roots: list[Path],
        *,
        max_age: float | None = None,
        patterns: tuple[str, ...] = (),
        cleanup_dirs: bool = True,
    ):
        self._id = rule_id
        self._root_list = list(roots)
        self.max_age = max_age
        self.name_patterns = patterns
        self.cleanup_dirs = cleanup_dirs

    @property
    def id(self) -> str:
        return self._id

    @property
    def title(self) -> str:
        return f"Fake ({self._id})"

    @property
    def description(self) -> str:
        return "A fake category for testing"

    def _roots(self) -> list[Path]:
        return self._root_list


class BrokenRule(FakeRule):
    """Rule whose walk blows up halfway."""

    def iter_matches(self, cancel=None, *, under=None):
        yield from ()
        raise RuntimeError("disk on fire")


def make_file(path: Path, size: int, age_days: float = 0) -> Path:
    """Create a file of *size* bytes last modified *age_days* ago."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    if age_days:
        stamp = time.time() - age_days * DAY
        os.utime(path, (stamp, stamp))
    return path


@pytest.fixture
def volume(tmp_path):
    """An empty directory standing in for the system drive."""
    root = tmp_path / "vol"
    root.mkdir()
    return root


@pytest.fixture
def registry(volume):
    """Two categories: aged temp files and a whole-tree trash."""
    reg = CategoryRegistry()
    reg.register(FakeRule("temp_files", [volume / "Temp"], max_age=DAY))
    reg.register(FakeRule("recycle_bin", [volume / "Trash"]))
    return reg


@pytest.fixture
def isolate_settings(tmp_path, monkeypatch):
    """Point XDG_CONFIG_HOME at a temp directory."""
    config = tmp_path / "config"
    config.mkdir()
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config))
    return config / "reclaim" / "settings.json"
