"""Shared utility functions."""

from __future__ import annotations

import logging
import os
import stat
import threading
from pathlib import Path
from typing import Iterable, Iterator

from reclaim.errors import ScanCancelled

log = logging.getLogger(__name__)

IS_WINDOWS = os.name == "nt"


def xdg_cache_home() -> Path:
    """Return XDG_CACHE_HOME, defaulting to ~/.cache."""
    return Path(os.environ.get("XDG_CACHE_HOME", Path.home() / ".cache"))


def xdg_config_home() -> Path:
    """Return XDG_CONFIG_HOME, defaulting to ~/.config."""
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


def xdg_data_home() -> Path:
    """Return XDG_DATA_HOME, defaulting to ~/.local/share."""
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def system_drive_root() -> Path:
    """Root of the volume the OS boots from (``C:\\`` or ``/``)."""
    if IS_WINDOWS:
        return Path(os.environ.get("SystemDrive", "C:") + "\\")
    return Path("/")


def system_root() -> Path:
    """The Windows installation directory (``%SystemRoot%``)."""
    if "SystemRoot" in os.environ:
        return Path(os.environ["SystemRoot"])
    return system_drive_root() / "Windows"


def normalize_path(path: Path | str) -> str:
    """Normalize a path for comparisons (case-folded on Windows)."""
    return os.path.normcase(os.path.normpath(os.fspath(path)))


def is_within(path: Path | str, root: Path | str) -> bool:
    """Return True if *path* equals *root* or lies below it."""
    target = normalize_path(path)
    base = normalize_path(root)
    if target == base:
        return True
    prefix = base if base.endswith(os.sep) else base + os.sep
    return target.startswith(prefix)


def under_any(path: Path | str, prefixes: set[str]) -> bool:
    """Check whether *path* or one of its ancestors is in *prefixes* (normalized)."""
    if not prefixes:
        return False
    current = normalize_path(path)
    while True:
        if current in prefixes:
            return True
        parent = os.path.dirname(current)
        if parent == current:
            return False
        current = parent


def is_nested(path: Path | str, prefixes: set[str]) -> bool:
    """Check whether a strict ancestor of *path* is in *prefixes* (normalized)."""
    key = normalize_path(path)
    parent = os.path.dirname(key)
    return parent != key and under_any(parent, prefixes)


def dedup_roots(roots: Iterable[Path]) -> list[Path]:
    """Drop duplicate roots and roots nested inside another root."""
    unique: dict[str, Path] = {}
    for root in roots:
        unique.setdefault(normalize_path(root), root)
    keys = sorted(unique, key=len)
    kept: list[str] = []
    for key in keys:
        if not any(is_within(key, other) for other in kept):
            kept.append(key)
    return [unique[k] for k in unique if k in kept]


def walk_files(
    root: Path | str,
    *,
    cancel: threading.Event | None = None,
    prune: Iterable[str] = (),
    same_device: bool = False,
) -> Iterator[tuple[str, os.stat_result]]:
    """Yield ``(path, stat)`` for every regular file under *root*.

    Symlinks are never followed.  Entries that cannot be read are skipped.
    *prune* holds normalized directory paths that are not descended into.
    With *same_device* the walk stays on the filesystem *root* lives on.
    """
    root_str = os.fspath(root)
    try:
        root_stat = os.lstat(root_str)
    except OSError:
        return
    if stat.S_ISREG(root_stat.st_mode):
        yield root_str, root_stat
        return
    if not stat.S_ISDIR(root_stat.st_mode):
        return

    pruned = set(prune)
    device = root_stat.st_dev
    stack: list[str] = [root_str]
    while stack:
        if cancel is not None and cancel.is_set():
            raise ScanCancelled(f"Scan of {root_str} was cancelled")
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    try:
                        if entry.is_file(follow_symlinks=False):
                            yield entry.path, entry.stat(follow_symlinks=False)
                        elif entry.is_dir(follow_symlinks=False):
                            if pruned and normalize_path(entry.path) in pruned:
                                continue
                            if same_device and entry.stat(follow_symlinks=False).st_dev != device:
                                continue
                            stack.append(entry.path)
                    except OSError:
                        log.debug("Cannot access: %s", entry.path)
        except OSError:
            log.debug("Cannot read directory: %s", current)


def walk_dirs(root: Path | str) -> list[str]:
    """Return every subdirectory below *root* (not following symlinks)."""
    found: list[str] = []
    stack = [os.fspath(root)]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                for entry in it:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            found.append(entry.path)
                            stack.append(entry.path)
                    except OSError:
                        log.debug("Cannot access: %s", entry.path)
        except OSError:
            log.debug("Cannot read directory: %s", current)
    return found


def dir_info(path: Path | str) -> tuple[int, int]:
    """Calculate total size and file count of a directory tree.

    Returns:
        (total_bytes, file_count) tuple.
    """
    total = 0
    count = 0
    for _, st in walk_files(path):
        total += st.st_size
        count += 1
    return total, count


def mtime_ms(st: os.stat_result) -> int | None:
    """Modification time of a stat result in milliseconds since the epoch."""
    try:
        return int(st.st_mtime * 1000)
    except (OverflowError, ValueError):
        return None


def bytes_to_human(size_bytes: int) -> str:
    """Convert byte count to a human-readable string."""
    if size_bytes < 0:
        return f"-{bytes_to_human(-size_bytes)}"
    if size_bytes == 0:
        return "0 B"

    units = ("B", "KB", "MB", "GB", "TB")
    value = float(size_bytes)
    for unit in units[:-1]:
        if abs(value) < 1024:
            return f"{value:.1f} {unit}" if unit != "B" else f"{int(value)} B"
        value /= 1024
    return f"{value:.1f} {units[-1]}"


def format_timestamp_ms(ms: int | None) -> str:
    """Format a millisecond timestamp as a local date ('2024-03-01 12:30')."""
    if ms is None:
        return "-"
    from datetime import datetime

    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")
