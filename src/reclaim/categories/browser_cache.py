"""Web browser disk caches."""

from __future__ import annotations

import os
from pathlib import Path

from reclaim.models.rule import CategoryRule
from reclaim.utils import IS_WINDOWS, xdg_cache_home

# Chromium-based browsers keep their caches under <profile>/Default
_CHROMIUM_WINDOWS = (
    ("Google", "Chrome", "User Data"),
    ("Microsoft", "Edge", "User Data"),
)
_CHROMIUM_POSIX = ("google-chrome", "chromium", "microsoft-edge")
_CACHE_NAMES = ("Cache", "Code Cache")


class BrowserCacheRule(CategoryRule):
    """HTTP and code caches of the common browsers."""

    id = "browser_cache"
    title = "Browser Cache"
    description = "Cached web pages, scripts and media. Browsers download them again when needed."

    def _roots(self) -> list[Path]:
        roots: list[Path] = []
        if IS_WINDOWS:
            if "LOCALAPPDATA" not in os.environ:
                return roots
            local = Path(os.environ["LOCALAPPDATA"])
            roots.append(local / "Microsoft" / "Windows" / "INetCache")
            for parts in _CHROMIUM_WINDOWS:
                profile = local.joinpath(*parts) / "Default"
                roots.extend(profile / name for name in _CACHE_NAMES)
            return roots

        cache = xdg_cache_home()
        for browser in _CHROMIUM_POSIX:
            profile = cache / browser / "Default"
            roots.extend(profile / name for name in _CACHE_NAMES)
        firefox = cache / "mozilla" / "firefox"
        try:
            roots.extend(sorted(p / "cache2" for p in firefox.iterdir() if p.is_dir()))
        except OSError:
            pass
        return roots
