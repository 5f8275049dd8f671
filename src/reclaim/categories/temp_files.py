"""Temporary files left behind by the OS and applications."""

from __future__ import annotations

import os
from pathlib import Path

from reclaim.models.rule import CategoryRule
from reclaim.utils import IS_WINDOWS, system_root

_HOUR = 3600  # seconds

_POSIX_EXTRA_DIRS: tuple[Path, ...] = (Path("/var/tmp"),)


class TempFilesRule(CategoryRule):
    """Files in the known temp directories older than a grace period."""

    id = "temp_files"
    title = "Temporary Files"
    description = (
        "Temporary files created by the system and applications. "
        "Files touched within the grace period are kept because running programs may still use them."
    )
    max_age = 24 * _HOUR

    def configure(self, settings) -> None:
        self.max_age = float(settings.get("temp_files.grace_hours", 24)) * _HOUR

    def _roots(self) -> list[Path]:
        if IS_WINDOWS:
            roots = [system_root() / "Temp"]
            if "TEMP" in os.environ:
                roots.append(Path(os.environ["TEMP"]))
            if "LOCALAPPDATA" in os.environ:
                roots.append(Path(os.environ["LOCALAPPDATA"]) / "Temp")
            return roots
        return [Path(os.environ.get("TMPDIR", "/tmp")), *_POSIX_EXTRA_DIRS]

    def accepts(self, path: str, st: os.stat_result) -> bool:
        # Other users' files in a shared /tmp are not ours to remove
        if IS_WINDOWS:
            return True
        return st.st_uid == os.getuid()
