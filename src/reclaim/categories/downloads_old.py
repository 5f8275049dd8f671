"""Old files in the Downloads folder."""

from __future__ import annotations

import os
from pathlib import Path

from reclaim.models.rule import CategoryRule
from reclaim.utils import IS_WINDOWS

_DAY = 86400  # seconds


class DownloadsOldRule(CategoryRule):
    """Downloads that have not been modified for a while."""

    id = "downloads_old"
    title = "Old Downloads"
    description = "Files in the Downloads folder that have not changed for more than 30 days."
    max_age = 30 * _DAY
    cleanup_dirs = False

    def configure(self, settings) -> None:
        days = int(settings.get("downloads_old.max_age_days", 30))
        self.max_age = days * _DAY
        self.description = f"Files in the Downloads folder that have not changed for more than {days} days."

    def _roots(self) -> list[Path]:
        if IS_WINDOWS and "USERPROFILE" in os.environ:
            return [Path(os.environ["USERPROFILE"]) / "Downloads"]
        return [Path.home() / "Downloads"]
