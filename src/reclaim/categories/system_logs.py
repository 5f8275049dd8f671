"""System log files."""

from __future__ import annotations

from pathlib import Path

from reclaim.models.rule import CategoryRule
from reclaim.utils import IS_WINDOWS, system_root

_LOG_DIR = Path("/var/log")

# Only rotated logs; the live files stay with the logging daemon
_ROTATED_PATTERNS = ("*.gz", "*.xz", "*.old", "*.[0-9]")


class SystemLogsRule(CategoryRule):
    """Windows event/setup logs, or rotated logs in /var/log."""

    id = "system_logs"
    title = "System Logs"
    description = "Log files written by the system and its services."

    @property
    def name_patterns(self) -> tuple[str, ...]:  # type: ignore[override]
        return () if IS_WINDOWS else _ROTATED_PATTERNS

    def _roots(self) -> list[Path]:
        if IS_WINDOWS:
            root = system_root()
            return [root / "Logs", root / "System32" / "LogFiles", root / "Panther"]
        return [_LOG_DIR]
