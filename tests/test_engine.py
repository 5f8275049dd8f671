"""Tests for the engine boundary operations."""

from __future__ import annotations

import pytest

from conftest import make_file
from reclaim.core.engine import ReclaimEngine
from reclaim.core.large_items import MIB, KeywordPolicy
from reclaim.core.rule_loader import CATEGORY_IDS
from reclaim.core.selection import Selection
from reclaim.errors import SelectionError, UnknownCategory
from reclaim.settings import Settings


@pytest.fixture
def engine(volume, registry):
    return ReclaimEngine(registry, volume, min_size_bytes=100)


class TestReclaimEngine:
    def test_disk_info(self, engine, volume):
        info = engine.get_disk_info()
        assert info.mount_point == str(volume)
        assert info.total_bytes >= info.used_bytes >= 0

    def test_scan_snapshot(self, engine, volume):
        make_file(volume / "Trash" / "a", 150)
        make_file(volume / "games" / "b.iso", 400)

        info, snapshot = engine.scan(include_large=True)

        assert info.total_bytes > 0
        assert [c.id for c in snapshot.categories] == ["temp_files", "recycle_bin"]
        assert snapshot.categories[1].size_bytes == 150
        assert {i.path: i.category_id for i in snapshot.large_items} == {
            str(volume / "games" / "b.iso"): None,
            str(volume / "Trash" / "a"): "recycle_bin",
        }

    def test_scan_without_large_items(self, engine):
        _, snapshot = engine.scan()
        assert snapshot.large_items == ()

    def test_list_category_items_unknown(self, engine):
        with pytest.raises(UnknownCategory):
            engine.list_category_items("nope")

    def test_clean_selection(self, engine, volume):
        keep = make_file(volume / "Trash" / "keep", 10)
        drop = make_file(volume / "Trash" / "drop", 20)
        iso = make_file(volume / "games" / "b.iso", 400)

        _, snapshot = engine.scan(include_large=True)
        selection = Selection(snapshot)
        selection.toggle_category("recycle_bin")
        selection.toggle_item("recycle_bin", str(keep), False, 10)
        selection.toggle_item(None, str(iso), True)
        assert selection.total_reclaimable_bytes() == 420

        result = engine.clean(selection)

        assert result.deleted_count == 2
        assert result.deleted_bytes == 420
        assert keep.exists()
        assert not drop.exists()
        assert not iso.exists()

    def test_excluded_folder_and_file_inside_match_freed_bytes(self, engine, volume):
        folder = volume / "Trash" / "cachedir"
        a = make_file(folder / "a", 60)
        make_file(folder / "b", 40)
        make_file(volume / "Trash" / "other", 5)

        _, snapshot = engine.scan(include_large=True)
        owned = {i.path: i for i in snapshot.large_items}[str(folder)]
        assert owned.category_id == "recycle_bin"

        selection = Selection(snapshot)
        selection.toggle_category("recycle_bin")
        selection.toggle_large_item(owned, False)
        selection.toggle_item("recycle_bin", str(a), False, 60)

        expected = selection.total_reclaimable_bytes()
        result = engine.clean(selection)

        assert expected == result.deleted_bytes == 5
        assert a.exists()

    def test_large_file_inside_selected_large_folder(self, engine, volume):
        big = make_file(volume / "app" / "cache" / "big.bin", 300)
        make_file(volume / "app" / "cache" / "small", 10)

        _, snapshot = engine.scan(include_large=True)
        items = {i.path: i for i in snapshot.large_items}
        selection = Selection(snapshot)
        selection.toggle_large_item(items[str(big)], True)
        selection.toggle_large_item(items[str(big.parent)], True)

        expected = selection.total_reclaimable_bytes()
        result = engine.clean(selection)

        assert expected == result.deleted_bytes == 310
        assert result.failed == ()
        assert not big.parent.exists()

    def test_clean_refuses_empty_selection(self, engine):
        _, snapshot = engine.scan()
        with pytest.raises(SelectionError):
            engine.clean(Selection(snapshot))

    def test_rescan_reflects_deletion(self, engine, volume):
        make_file(volume / "Trash" / "a", 10)
        assert engine.scan_cleanup_items()[1].size_bytes == 10
        engine.clean_categories(["recycle_bin"])
        assert engine.scan_cleanup_items()[1].size_bytes == 0


class TestFromSettings:
    def test_builtin_categories_and_settings(self, tmp_path, volume):
        settings = Settings(tmp_path / "settings.json")
        settings.set("volume.root", str(volume))
        settings.set("large_items.min_size_mb", 5)
        settings.set("large_items.limit", 10)
        settings.set("large_items.keywords", ["junk"])
        settings.set("cleanup.max_workers", 2)

        engine = ReclaimEngine.from_settings(settings)

        assert engine.registry.ids() == list(CATEGORY_IDS)
        assert engine.root == volume
        assert engine.large_scanner.min_size_bytes == 5 * MIB
        assert engine.large_scanner.limit == 10
        assert isinstance(engine.large_scanner.policy, KeywordPolicy)
        assert engine.large_scanner.policy.keywords == ("junk",)
        assert engine.executor.max_workers == 2

    def test_defaults(self, tmp_path):
        engine = ReclaimEngine.from_settings(Settings(tmp_path / "none.json"))
        assert engine.large_scanner.min_size_bytes == 1024 * MIB
        assert engine.large_scanner.limit == 200
        assert engine.large_scanner.policy.keywords == ("log", "cache", "temp", "tmp")

    def test_overrides(self, tmp_path, volume):
        engine = ReclaimEngine.from_settings(Settings(tmp_path / "none.json"), root=volume, large_limit=3)
        assert engine.root == volume
        assert engine.large_scanner.limit == 3
