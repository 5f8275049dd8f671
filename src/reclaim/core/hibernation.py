"""Hibernation file inspection and toggling (Windows only)."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from reclaim.errors import HibernationError
from reclaim.models.volume import HibernationInfo
from reclaim.utils import IS_WINDOWS, system_drive_root

log = logging.getLogger(__name__)

# Timeout for powercfg (seconds).
_POWERCFG_TIMEOUT = 60


def hibernation_file() -> Path:
    return system_drive_root() / "hiberfil.sys"


def get_hibernation_info() -> HibernationInfo:
    """Report whether hiberfil.sys exists and how large it is.

    Raises:
        HibernationError: The file exists but cannot be inspected.
    """
    path = hibernation_file()
    try:
        size = path.stat().st_size
    except FileNotFoundError:
        return HibernationInfo(enabled=False, size_bytes=0, path=str(path))
    except OSError as exc:
        raise HibernationError(f"Cannot inspect {path}: {exc}") from exc
    return HibernationInfo(enabled=True, size_bytes=size, path=str(path))


def set_hibernation_enabled(enabled: bool) -> HibernationInfo:
    """Turn hibernation on or off with ``powercfg`` and report the new state.

    Raises:
        HibernationError: Not on Windows, powercfg missing, or it failed
            (usually because the process is not elevated).
    """
    if not IS_WINDOWS:
        raise HibernationError("Hibernation control is only supported on Windows")
    powercfg = shutil.which("powercfg")
    if powercfg is None:
        raise HibernationError("Could not find 'powercfg' on PATH")

    try:
        proc = subprocess.run(
            [powercfg, "/hibernate", "on" if enabled else "off"],
            capture_output=True,
            text=True,
            timeout=_POWERCFG_TIMEOUT,
        )
    except subprocess.TimeoutExpired as exc:
        raise HibernationError("powercfg timed out") from exc
    except OSError as exc:
        raise HibernationError(f"Could not run powercfg: {exc}") from exc

    if proc.returncode != 0:
        log.warning("powercfg exited with %d: %s", proc.returncode, proc.stderr.strip())
        raise HibernationError("Failed to update hibernation state. Try running as administrator.")

    return get_hibernation_info()
