"""Previous Windows installation left by an upgrade."""

from __future__ import annotations

from pathlib import Path

from reclaim.models.rule import CategoryRule
from reclaim.utils import IS_WINDOWS, system_drive_root


class WindowsOldRule(CategoryRule):
    """The Windows.old folder. Always empty on other systems."""

    id = "windows_old"
    title = "Previous Windows Installation"
    description = "Files kept from the previous Windows version after an upgrade."

    def _roots(self) -> list[Path]:
        if IS_WINDOWS:
            return [system_drive_root() / "Windows.old"]
        return []
