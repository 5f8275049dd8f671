"""Tests for the command line interface."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

import reclaim.cli as cli
from conftest import make_file
from reclaim.core.engine import ReclaimEngine
from reclaim.errors import ScanError


@pytest.fixture
def engine(volume, registry, monkeypatch):
    eng = ReclaimEngine(registry, volume, min_size_bytes=100)
    monkeypatch.setattr(cli, "_build_engine", lambda root: eng)
    return eng


@pytest.fixture
def runner():
    return CliRunner()


class TestInfo:
    def test_json(self, runner, engine, volume):
        result = runner.invoke(cli.main, ["info", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["mountPoint"] == str(volume)
        assert data["totalBytes"] > 0


class TestScan:
    def test_human_output(self, runner, engine, volume):
        make_file(volume / "Trash" / "a", 2048)
        result = runner.invoke(cli.main, ["scan"])
        assert result.exit_code == 0
        assert "recycle_bin" in result.output
        assert "2.0 KB" in result.output
        assert "nothing to clean" in result.output

    def test_json(self, runner, engine, volume):
        make_file(volume / "Trash" / "a", 10)
        result = runner.invoke(cli.main, ["scan", "--json"])
        data = json.loads(result.output)
        assert [c["id"] for c in data] == ["temp_files", "recycle_bin"]
        assert data[1]["sizeBytes"] == 10
        assert data[1]["fileCount"] == 1

    def test_failure_says_try_again(self, runner, engine, monkeypatch):
        def boom(*args, **kwargs):
            raise ScanError("boom")

        monkeypatch.setattr(engine, "scan_cleanup_items", boom)
        result = runner.invoke(cli.main, ["scan"])
        assert result.exit_code == 1
        assert "Scan failed, try again" in result.output


class TestItems:
    def test_limit(self, runner, engine, volume):
        for i in range(3):
            make_file(volume / "Trash" / f"f{i}", 10 + i)
        result = runner.invoke(cli.main, ["items", "recycle_bin", "--limit", "2", "--json"])
        data = json.loads(result.output)
        assert [i["sizeBytes"] for i in data["items"]] == [12, 11]
        assert data["hasMore"] is True

    def test_unknown_category(self, runner, engine):
        result = runner.invoke(cli.main, ["items", "nope"])
        assert result.exit_code == 1
        assert "Unknown cleanup category" in result.output


class TestLarge:
    def test_json(self, runner, engine, volume):
        make_file(volume / "games" / "big.iso", 300)
        result = runner.invoke(cli.main, ["large", "--json"])
        data = json.loads(result.output)
        assert data == [
            {
                "path": str(volume / "games" / "big.iso"),
                "name": "big.iso",
                "sizeBytes": 300,
                "isDir": False,
                "suspicious": False,
                "categoryId": None,
            }
        ]


class TestClean:
    def test_dry_run_deletes_nothing(self, runner, engine, volume):
        a = make_file(volume / "Trash" / "a", 10)
        result = runner.invoke(cli.main, ["clean", "recycle_bin", "--dry-run", "--json"])
        data = json.loads(result.output)
        assert data["status"] == "dry_run"
        assert data["reclaimableBytes"] == 10
        assert data["request"]["ids"] == ["recycle_bin"]
        assert a.exists()

    def test_clean_with_exclude(self, runner, engine, volume):
        keep = make_file(volume / "Trash" / "keep", 10)
        drop = make_file(volume / "Trash" / "drop", 20)
        result = runner.invoke(
            cli.main,
            ["clean", "recycle_bin", "--exclude", f"recycle_bin={keep}", "--yes"],
        )
        assert result.exit_code == 0
        assert "Removed 1 items" in result.output
        assert "0 failed" in result.output
        assert keep.exists()
        assert not drop.exists()

    def test_excluded_folder_counts_only_matching_files(self, runner, engine, volume):
        session = volume / "Temp" / "session"
        make_file(session / "old", 10, age_days=2)
        make_file(session / "fresh", 15)
        make_file(volume / "Temp" / "other", 7, age_days=2)

        result = runner.invoke(
            cli.main,
            ["clean", "temp_files", "--exclude", f"temp_files={session}", "--dry-run", "--json"],
        )

        assert json.loads(result.output)["reclaimableBytes"] == 7

    def test_include_only(self, runner, engine, volume):
        a = make_file(volume / "Trash" / "a", 10)
        b = make_file(volume / "Trash" / "b", 20)
        result = runner.invoke(cli.main, ["clean", "--include", f"recycle_bin={a}", "--json"])
        data = json.loads(result.output)
        assert data["result"]["deletedCount"] == 1
        assert data["result"]["deletedBytes"] == 10
        assert not a.exists()
        assert b.exists()

    def test_include_on_selected_category_rejected(self, runner, engine, volume):
        a = make_file(volume / "Trash" / "a", 10)
        result = runner.invoke(cli.main, ["clean", "recycle_bin", "--include", f"recycle_bin={a}", "--yes"])
        assert result.exit_code == 2
        assert a.exists()

    def test_malformed_override(self, runner, engine):
        result = runner.invoke(cli.main, ["clean", "recycle_bin", "--exclude", "no-equals-sign"])
        assert result.exit_code == 2

    def test_nothing_selected(self, runner, engine):
        result = runner.invoke(cli.main, ["clean"])
        assert result.exit_code == 0
        assert "Nothing selected" in result.output

    def test_confirmation_declined(self, runner, engine, volume):
        a = make_file(volume / "Trash" / "a", 10)
        result = runner.invoke(cli.main, ["clean", "recycle_bin"], input="n\n")
        assert "Aborted" in result.output
        assert a.exists()


class TestCleanLarge:
    def test_reports_failures(self, runner, engine, volume):
        big = make_file(volume / "games" / "big.iso", 300)
        gone = volume / "games" / "gone.iso"
        result = runner.invoke(cli.main, ["clean-large", str(big), str(gone), "--json"])
        data = json.loads(result.output)
        assert data["deletedCount"] == 1
        assert data["deletedBytes"] == 300
        assert [f["path"] for f in data["failed"]] == [str(gone)]
        assert not big.exists()


class TestCategories:
    def test_lists_rules(self, runner, engine, volume):
        result = runner.invoke(cli.main, ["categories", "--json"])
        data = json.loads(result.output)
        assert [r["id"] for r in data] == ["temp_files", "recycle_bin"]
        assert data[1]["roots"] == [str(volume / "Trash")]
