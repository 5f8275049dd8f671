"""Show a path in the platform file manager."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from pathlib import Path

from reclaim.errors import RevealError
from reclaim.utils import IS_WINDOWS

log = logging.getLogger(__name__)


def _reveal_command(path: Path) -> list[str]:
    if IS_WINDOWS:
        return ["explorer", f"/select,{path}"]
    if sys.platform == "darwin":
        return ["open", "-R", str(path)]
    opener = shutil.which("xdg-open")
    if opener is None:
        raise RevealError("Could not find 'xdg-open' on PATH")
    target = path if path.is_dir() else path.parent
    return [opener, str(target)]


def reveal_path(path: str | os.PathLike[str]) -> None:
    """Open the file manager at *path* without waiting for it.

    Raises:
        RevealError: The path does not exist or no opener is available.
    """
    target = Path(path)
    if not target.exists():
        raise RevealError(f"{target} does not exist")
    command = _reveal_command(target)
    try:
        subprocess.Popen(command, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except OSError as exc:
        raise RevealError(f"Could not open file manager: {exc}") from exc
    log.debug("Revealed %s with %s", target, command[0])
