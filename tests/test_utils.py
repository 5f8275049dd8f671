"""Tests for shared helpers."""

from __future__ import annotations

import os
import threading

import pytest

from conftest import make_file
from reclaim.errors import ScanCancelled
from reclaim.models.clean_result import CleanupFailure, CleanupResult
from reclaim.utils import bytes_to_human, dir_info, format_timestamp_ms, is_nested, is_within, normalize_path, walk_files


class TestBytesToHuman:
    @pytest.mark.parametrize(
        ("size", "expected"),
        [(0, "0 B"), (512, "512 B"), (1536, "1.5 KB"), (5 * 1024**3, "5.0 GB"), (-2048, "-2.0 KB")],
    )
    def test_formatting(self, size, expected):
        assert bytes_to_human(size) == expected


class TestIsWithin:
    def test_prefix_is_not_containment(self, tmp_path):
        assert is_within(tmp_path / "a" / "b", tmp_path / "a")
        assert is_within(tmp_path / "a", tmp_path / "a")
        assert not is_within(tmp_path / "ab", tmp_path / "a")
        assert not is_within(tmp_path, tmp_path / "a")

    def test_is_nested_needs_strict_ancestor(self, tmp_path):
        listed = {normalize_path(tmp_path / "a")}
        assert is_nested(tmp_path / "a" / "b", listed)
        assert not is_nested(tmp_path / "a", listed)
        assert not is_nested(tmp_path / "ab", listed)


class TestWalkFiles:
    def test_symlinks_not_followed(self, tmp_path):
        outside = make_file(tmp_path / "outside" / "big", 100)
        root = tmp_path / "root"
        make_file(root / "a", 1)
        os.symlink(outside.parent, root / "dir-link")
        os.symlink(outside, root / "file-link")

        assert [p for p, _ in walk_files(root)] == [str(root / "a")]

    def test_single_file_root(self, tmp_path):
        f = make_file(tmp_path / "f", 3)
        assert [(p, st.st_size) for p, st in walk_files(f)] == [(str(f), 3)]

    def test_missing_root(self, tmp_path):
        assert list(walk_files(tmp_path / "nope")) == []

    def test_pruned_directories(self, tmp_path):
        make_file(tmp_path / "keep" / "a", 1)
        make_file(tmp_path / "skip" / "b", 1)
        found = [p for p, _ in walk_files(tmp_path, prune={os.path.normcase(str(tmp_path / "skip"))})]
        assert found == [str(tmp_path / "keep" / "a")]

    def test_cancel(self, tmp_path):
        make_file(tmp_path / "a", 1)
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(ScanCancelled):
            list(walk_files(tmp_path, cancel=cancel))

    def test_dir_info(self, tmp_path):
        make_file(tmp_path / "a", 10)
        make_file(tmp_path / "sub" / "b", 5)
        assert dir_info(tmp_path) == (15, 2)


class TestResults:
    def test_merge_keeps_failure_order(self):
        merged = CleanupResult.merge(
            [
                CleanupResult(10, 1, (CleanupFailure("/a", "busy"),)),
                CleanupResult(5, 2),
                CleanupResult(0, 0, (CleanupFailure("/b", "denied"),)),
            ]
        )
        assert (merged.deleted_bytes, merged.deleted_count) == (15, 3)
        assert [f.path for f in merged.failed] == ["/a", "/b"]
        assert merged.to_dict()["failed"][1] == {"path": "/b", "message": "denied"}

    def test_timestamp(self):
        assert format_timestamp_ms(None) == "-"
        assert len(format_timestamp_ms(0)) == len("1970-01-01 00:00")
