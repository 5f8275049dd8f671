"""Capacity counters of the target volume."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from reclaim.errors import VolumeUnavailable
from reclaim.models.volume import VolumeInfo
from reclaim.utils import system_drive_root

log = logging.getLogger(__name__)


def get_volume_info(root: Path | str | None = None) -> VolumeInfo:
    """Read the live capacity of the volume holding *root*.

    Defaults to the system drive.  ``free_bytes`` is the space available
    to the current user, so ``used_bytes`` includes any reserved blocks.

    Raises:
        VolumeUnavailable: The volume cannot be queried.
    """
    mount = os.fspath(root) if root is not None else str(system_drive_root())
    try:
        usage = shutil.disk_usage(mount)
    except OSError as exc:
        log.warning("Cannot query volume %s: %s", mount, exc)
        raise VolumeUnavailable(f"Cannot read capacity of {mount}: {exc}") from exc

    total = usage.total
    free = usage.free
    return VolumeInfo(
        mount_point=mount,
        total_bytes=total,
        free_bytes=free,
        used_bytes=max(0, total - free),
    )
