"""D-Bus service for front-end communication.

D-Bus methods use PascalCase per D-Bus convention, and type signatures
like "as" and "(ss)" are D-Bus protocol types, not Python syntax.
"""

from __future__ import annotations

import asyncio
import json
import logging

from dbus_next.aio import MessageBus
from dbus_next.service import ServiceInterface, method, signal
from dbus_next import BusType

from reclaim.core.engine import ReclaimEngine
from reclaim.errors import ReclaimError, ScanError

log = logging.getLogger(__name__)

_BUS_NAME = "io.github.reclaim"
_OBJECT_PATH = "/io/github/reclaim"
_INTERFACE = "io.github.reclaim.Manager"


def _error(message: str) -> str:
    return json.dumps({"error": message})


def _parse_request(payload: str) -> tuple[list[str], dict[str, list[str]], dict[str, list[str]]]:
    """Decode a CleanCategories request: ``{"ids", "excludedPaths", "includedPaths"}``."""
    data = json.loads(payload or "{}")
    if not isinstance(data, dict):
        raise ValueError("request must be a JSON object")
    ids = data.get("ids") or []
    excluded = data.get("excludedPaths") or {}
    included = data.get("includedPaths") or {}
    if not isinstance(ids, list) or not isinstance(excluded, dict) or not isinstance(included, dict):
        raise ValueError("malformed cleanup request")
    for key, overrides in (("excludedPaths", excluded), ("includedPaths", included)):
        for category_id, paths in overrides.items():
            if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
                raise ValueError(f"{key}.{category_id} must be a list of paths")
    return [str(i) for i in ids], excluded, included


# noinspection PyPep8Naming
class ReclaimDBusService(ServiceInterface):
    """D-Bus service interface for Reclaim."""

    def __init__(self, engine: ReclaimEngine | None = None) -> None:
        super().__init__(_INTERFACE)
        self._engine = engine or ReclaimEngine.from_settings()

    @method()
    def GetDiskInfo(self) -> "s":  # type: ignore[override]
        """Capacity of the system volume as JSON."""
        try:
            return json.dumps(self._engine.get_disk_info().to_dict())
        except ReclaimError as e:
            return _error(str(e))

    @method()
    def ScanCleanupItems(self) -> "s":  # type: ignore[override]
        """Scan every category, returning totals as JSON."""

        def progress(category_id: str, status: str) -> None:
            self.ScanProgress(category_id, status)

        try:
            categories = self._engine.scan_cleanup_items(on_progress=progress)
        except ScanError as e:
            log.warning("Category scan failed: %s", e)
            return _error("Scan failed, try again")
        return json.dumps([c.to_dict() for c in categories])

    @method()
    def ListCategoryItems(self, category_id: "s", limit: "u") -> "s":  # type: ignore[override]
        """List the largest matching files of one category."""
        try:
            listing = self._engine.list_category_items(category_id, int(limit))
        except ReclaimError as e:
            return _error(str(e))
        return json.dumps(listing.to_dict())

    @method()
    def ScanLargeItems(self) -> "s":  # type: ignore[override]
        """Find large files and suspicious folders on the volume."""
        try:
            found = self._engine.scan_large_items()
        except ScanError as e:
            log.warning("Large-item scan failed: %s", e)
            return _error("Scan failed, try again")
        return json.dumps([item.to_dict() for item in found])

    @method()
    def CleanCategories(self, request: "s") -> "s":  # type: ignore[override]
        """Clean categories from a JSON request with per-path overrides."""
        try:
            ids, excluded, included = _parse_request(request)
        except ValueError as e:
            return _error(f"Invalid request: {e}")

        result = self._engine.clean_categories(ids, excluded, included)
        self.CleanProgress(result.deleted_bytes, result.deleted_count, len(result.failed))
        return json.dumps(result.to_dict())

    @method()
    def CleanLargeItems(self, paths: "as") -> "s":  # type: ignore[override]
        """Delete individually selected files and folders."""
        result = self._engine.clean_large_items(list(paths))
        self.CleanProgress(result.deleted_bytes, result.deleted_count, len(result.failed))
        return json.dumps(result.to_dict())

    @method()
    def RevealPath(self, path: "s") -> "b":  # type: ignore[override]
        """Open the file manager at a path."""
        try:
            self._engine.reveal_path(path)
        except ReclaimError as e:
            log.warning("Could not reveal %s: %s", path, e)
            return False
        return True

    @method()
    def GetHibernationInfo(self) -> "s":  # type: ignore[override]
        try:
            return json.dumps(self._engine.get_hibernation_info().to_dict())
        except ReclaimError as e:
            return _error(str(e))

    @method()
    def SetHibernationEnabled(self, enabled: "b") -> "s":  # type: ignore[override]
        try:
            return json.dumps(self._engine.set_hibernation_enabled(bool(enabled)).to_dict())
        except ReclaimError as e:
            return _error(str(e))

    @signal()
    def ScanProgress(self, category_id: str, status: str) -> "(ss)":  # type: ignore[override]
        return [category_id, status]

    @signal()
    def CleanProgress(self, bytes_freed: int, files_done: int, failures: int) -> "(tuu)":  # type: ignore[override]
        return [bytes_freed, files_done, failures]


async def run_service() -> None:
    """Start the D-Bus service."""
    bus = await MessageBus(bus_type=BusType.SESSION).connect()
    service = ReclaimDBusService()
    bus.export(_OBJECT_PATH, service)
    await bus.request_name(_BUS_NAME)
    log.info("D-Bus service started on %s", _BUS_NAME)
    await bus.wait_for_disconnect()


def start_service() -> None:
    """Entry point to start the D-Bus service."""
    asyncio.run(run_service())
