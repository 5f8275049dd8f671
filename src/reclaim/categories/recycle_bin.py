"""Recycle bin / trash contents."""

from __future__ import annotations

from pathlib import Path

from reclaim.models.rule import CategoryRule
from reclaim.utils import IS_WINDOWS, system_drive_root, xdg_data_home


class RecycleBinRule(CategoryRule):
    """Everything in the system drive's recycle bin."""

    id = "recycle_bin"
    title = "Recycle Bin"
    description = "Permanently empties the recycle bin. These files were already deleted by the user."

    def _roots(self) -> list[Path]:
        if IS_WINDOWS:
            return [system_drive_root() / "$Recycle.Bin"]
        return [xdg_data_home() / "Trash"]
