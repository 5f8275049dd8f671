"""Protected system paths that are never reported or deleted.

Trees listed here are skipped by the large-item walk, and standalone
deletion refuses any path inside one of them, the volume root itself, or
any ancestor of the user's home directory.
"""

from __future__ import annotations

from pathlib import Path

from reclaim.utils import IS_WINDOWS, is_within, normalize_path, system_drive_root, system_root

# Pseudo filesystems and OS trees on POSIX systems.
_POSIX_PROTECTED_TREES: tuple[str, ...] = (
    "/proc",
    "/sys",
    "/dev",
    "/run",
    "/boot",
    "/etc",
    "/usr",
    "/bin",
    "/sbin",
    "/lib",
    "/lib32",
    "/lib64",
    "/libx32",
    "/snap",
    "/var/lib",
)

_WINDOWS_PROTECTED_NAMES: tuple[str, ...] = (
    "Program Files",
    "Program Files (x86)",
    "ProgramData",
    "Recovery",
    "System Volume Information",
)


def protected_trees(root: Path | str | None = None) -> list[Path]:
    """Directory trees that must never be walked or deleted."""
    if IS_WINDOWS:
        drive = Path(root) if root is not None else system_drive_root()
        return [system_root(), *(drive / name for name in _WINDOWS_PROTECTED_NAMES)]
    return [Path(p) for p in _POSIX_PROTECTED_TREES]


def pruned_dirs(root: Path | str | None = None) -> set[str]:
    """Normalized protected trees, ready for ``walk_files(prune=...)``."""
    return {normalize_path(p) for p in protected_trees(root)}


def protection_reason(path: Path | str, root: Path | str) -> str | None:
    """Explain why *path* may not be deleted, or None if it may be.

    Args:
        path: Absolute path the user asked to delete.
        root: Root of the scanned volume.
    """
    if not is_within(path, root):
        return "Path is outside scan scope."
    if normalize_path(path) == normalize_path(root):
        return "Refusing to delete drive root."
    for tree in protected_trees(root):
        if is_within(path, tree) or is_within(tree, path):
            return f"Path is protected ({tree})."
    if is_within(Path.home(), path):
        return "Refusing to delete a directory containing the home directory."
    return None
