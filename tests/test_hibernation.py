"""Tests for hibernation file handling."""

from __future__ import annotations

import subprocess
from unittest.mock import MagicMock, patch

import pytest

import reclaim.core.hibernation as hibernation
from reclaim.errors import HibernationError


@pytest.fixture
def drive(tmp_path, monkeypatch):
    monkeypatch.setattr(hibernation, "system_drive_root", lambda: tmp_path)
    return tmp_path


class TestHibernationInfo:
    def test_disabled_when_file_missing(self, drive):
        info = hibernation.get_hibernation_info()
        assert info.enabled is False
        assert info.size_bytes == 0
        assert info.path == str(drive / "hiberfil.sys")

    def test_enabled_with_size(self, drive):
        (drive / "hiberfil.sys").write_bytes(b"h" * 4096)
        info = hibernation.get_hibernation_info()
        assert info.enabled is True
        assert info.size_bytes == 4096

    def test_wire_form(self, drive):
        assert hibernation.get_hibernation_info().to_dict() == {
            "enabled": False,
            "sizeBytes": 0,
            "path": str(drive / "hiberfil.sys"),
        }


class TestSetHibernation:
    def test_only_on_windows(self, monkeypatch):
        monkeypatch.setattr(hibernation, "IS_WINDOWS", False)
        with pytest.raises(HibernationError, match="only supported on Windows"):
            hibernation.set_hibernation_enabled(False)

    @pytest.fixture
    def windows(self, drive, monkeypatch):
        monkeypatch.setattr(hibernation, "IS_WINDOWS", True)
        monkeypatch.setattr(hibernation.shutil, "which", lambda name: "C:\\Windows\\System32\\powercfg.exe")
        return drive

    def test_turn_off(self, windows):
        with patch("reclaim.core.hibernation.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stderr="")
            info = hibernation.set_hibernation_enabled(False)

        args = mock_run.call_args[0][0]
        assert args[1:] == ["/hibernate", "off"]
        assert info.enabled is False

    def test_turn_on(self, windows):
        def fake_run(cmd, **kwargs):
            (windows / "hiberfil.sys").write_bytes(b"h" * 10)
            return MagicMock(returncode=0, stderr="")

        with patch("reclaim.core.hibernation.subprocess.run", side_effect=fake_run):
            info = hibernation.set_hibernation_enabled(True)

        assert info.enabled is True
        assert info.size_bytes == 10

    def test_failure_asks_for_elevation(self, windows):
        with patch("reclaim.core.hibernation.subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1, stderr="Access denied")
            with pytest.raises(HibernationError, match="administrator"):
                hibernation.set_hibernation_enabled(False)

    def test_timeout(self, windows):
        with patch(
            "reclaim.core.hibernation.subprocess.run",
            side_effect=subprocess.TimeoutExpired("powercfg", 60),
        ):
            with pytest.raises(HibernationError, match="timed out"):
                hibernation.set_hibernation_enabled(True)

    def test_powercfg_missing(self, windows, monkeypatch):
        monkeypatch.setattr(hibernation.shutil, "which", lambda name: None)
        with pytest.raises(HibernationError, match="powercfg"):
            hibernation.set_hibernation_enabled(True)
