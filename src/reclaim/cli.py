"""CLI interface for Reclaim."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

import click

from reclaim.core.engine import ReclaimEngine
from reclaim.core.selection import Selection
from reclaim.errors import (
    HibernationError,
    ReclaimError,
    RevealError,
    ScanError,
    SelectionError,
    UnknownCategory,
    VolumeUnavailable,
)
from reclaim.models.clean_result import CleanupResult
from reclaim.utils import bytes_to_human, dir_info, format_timestamp_ms

log = logging.getLogger(__name__)


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _build_engine(root: str | None) -> ReclaimEngine:
    if root:
        return ReclaimEngine.from_settings(root=root)
    return ReclaimEngine.from_settings()


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _fail(message: str) -> None:
    click.echo(f"{click.style('✗', fg='red')} {message}", err=True)
    sys.exit(1)


def _path_size(path: str) -> int:
    """Current size of a file or folder, 0 when it is gone."""
    try:
        if os.path.isdir(path) and not os.path.islink(path):
            return dir_info(path)[0]
        return os.lstat(path).st_size
    except OSError:
        return 0


def _override_size(engine: ReclaimEngine, category_id: str, path: str) -> int:
    """Bytes of *path* the category would delete right now."""
    rule = engine.registry.require(category_id)
    if rule.whole_tree:
        return _path_size(path)
    return sum(st.st_size for _, st in rule.iter_matches(under=path))


def _parse_overrides(values: tuple[str, ...], option: str) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for value in values:
        category_id, sep, path = value.partition("=")
        if not sep or not category_id or not path:
            raise click.BadParameter(f"expected CATEGORY=PATH, got {value!r}", param_hint=option)
        pairs.append((category_id, path))
    return pairs


def _print_cleanup(result: CleanupResult) -> None:
    summary = (
        f"Removed {result.deleted_count:,} items, freed "
        f"{click.style(bytes_to_human(result.deleted_bytes), fg='green', bold=True)}, "
        f"{len(result.failed)} failed"
    )
    mark = click.style("!", fg="yellow") if result.failed else click.style("✓", fg="green")
    click.echo(f"\n  {mark} {summary}")
    for failure in result.failed:
        click.echo(f"      {failure.path} — {failure.reason}")
    click.echo()


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.option("--root", default=None, help="Volume root to work on (default: system drive)")
@click.pass_context
def main(ctx: click.Context, verbose: int, root: str | None) -> None:
    """Reclaim — find and remove what is wasting space on your system drive."""
    _setup_logging(verbose)
    ctx.obj = {"root": root}


# ── info ─────────────────────────────────────────────────────────────────

@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def info(ctx: click.Context, as_json: bool) -> None:
    """Show capacity of the system volume."""
    engine = _build_engine(ctx.obj["root"])
    try:
        volume = engine.get_disk_info()
    except VolumeUnavailable as exc:
        _fail(f"{exc}. Try again.")
        return

    if as_json:
        _echo_json(volume.to_dict())
        return

    click.echo(f"\n  {click.style('Volume:', bold=True)} {volume.mount_point}")
    click.echo(f"  Total:  {bytes_to_human(volume.total_bytes)}")
    click.echo(f"  Used:   {bytes_to_human(volume.used_bytes)} ({volume.used_percent:.1f}%)")
    click.echo(f"  Free:   {click.style(bytes_to_human(volume.free_bytes), fg='green', bold=True)}\n")


# ── categories ───────────────────────────────────────────────────────────

@main.command("categories")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def categories_cmd(ctx: click.Context, as_json: bool) -> None:
    """List the cleanup categories and where they look."""
    engine = _build_engine(ctx.obj["root"])
    rules = engine.registry.get_all()
    if as_json:
        _echo_json([rule.info() for rule in rules])
        return
    for rule in rules:
        click.echo(f"  {click.style(rule.id, fg='cyan', bold=True):30s}  {rule.title}")
        click.echo(f"    {rule.description}")
        for root in rule.roots():
            click.echo(f"    {click.style('·', fg='bright_black')} {root}")


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def scan(ctx: click.Context, as_json: bool) -> None:
    """Scan the cleanup categories (preview only, never deletes)."""
    engine = _build_engine(ctx.obj["root"])

    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning {len(engine.registry)} categories...\n")

    try:
        categories = engine.scan_cleanup_items()
    except ScanError as exc:
        log.debug("Scan failed: %s", exc)
        _fail("Scan failed, try again.")
        return

    if as_json:
        _echo_json([c.to_dict() for c in categories])
        return

    for category in sorted(categories, key=lambda c: c.size_bytes, reverse=True):
        if category.size_bytes > 0:
            click.echo(
                f"  {click.style('✓', fg='green')} {category.id:20s} {category.title:32s} — "
                f"{click.style(bytes_to_human(category.size_bytes), fg='green', bold=True)} "
                f"({category.file_count:,} files)"
            )
        else:
            click.echo(f"  {click.style('·', fg='bright_black')} {category.id:20s} {category.title:32s} — nothing to clean")

    total = sum(c.size_bytes for c in categories)
    click.echo(f"\nTotal reclaimable: {click.style(bytes_to_human(total), fg='green', bold=True)}\n")


# ── items ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("category_id")
@click.option("--limit", "-n", default=200, show_default=True, type=click.IntRange(min=0), help="Maximum items")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def items(ctx: click.Context, category_id: str, limit: int, as_json: bool) -> None:
    """List the largest files of one category."""
    engine = _build_engine(ctx.obj["root"])
    try:
        listing = engine.list_category_items(category_id, limit)
    except UnknownCategory as exc:
        _fail(str(exc))
        return
    except ScanError:
        _fail("Scan failed, try again.")
        return

    if as_json:
        _echo_json(listing.to_dict())
        return

    if not listing.items:
        click.echo("No matching files.")
        return
    for item in listing.items:
        click.echo(f"  {bytes_to_human(item.size_bytes):>10s}  {format_timestamp_ms(item.modified_ms):16s}  {item.path}")
    if listing.has_more:
        click.echo(click.style(f"\n  ... more files exist beyond the first {limit}", fg="bright_black"))


# ── large ────────────────────────────────────────────────────────────────

@main.command()
@click.option("--min-size", "min_size_mb", type=click.IntRange(min=0), default=None, help="Threshold in MiB")
@click.option("--limit", "-n", type=click.IntRange(min=0), default=None, help="Maximum items")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def large(ctx: click.Context, min_size_mb: int | None, limit: int | None, as_json: bool) -> None:
    """Find large files and folders on the volume."""
    engine = _build_engine(ctx.obj["root"])
    if min_size_mb is not None:
        engine.large_scanner.min_size_bytes = min_size_mb * 1024 * 1024
    if limit is not None:
        engine.large_scanner.limit = limit

    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning {engine.root} for large items...\n")

    try:
        found = engine.scan_large_items()
    except ScanError:
        _fail("Scan failed, try again.")
        return

    if as_json:
        _echo_json([item.to_dict() for item in found])
        return

    if not found:
        click.echo("No large items found.")
        return
    for item in found:
        kind = "dir " if item.is_dir else "file"
        flag = click.style(" [suspicious]", fg="yellow") if item.suspicious else ""
        owner = click.style(f" [{item.category_id}]", fg="blue") if item.category_id else ""
        click.echo(f"  {bytes_to_human(item.size_bytes):>10s}  {kind}  {item.path}{flag}{owner}")
    click.echo()


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("category_ids", nargs=-1)
@click.option("--exclude", "excludes", multiple=True, metavar="CATEGORY=PATH", help="Keep this path of a selected category")
@click.option("--include", "includes", multiple=True, metavar="CATEGORY=PATH", help="Delete only this path of an unselected category")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be cleaned without doing it")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def clean(
    ctx: click.Context,
    category_ids: tuple[str, ...],
    excludes: tuple[str, ...],
    includes: tuple[str, ...],
    yes: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Scan and clean categories, honouring per-path overrides."""
    engine = _build_engine(ctx.obj["root"])
    excluded = _parse_overrides(excludes, "--exclude")
    included = _parse_overrides(includes, "--include")

    try:
        volume, snapshot = engine.scan()
    except (ScanError, VolumeUnavailable):
        _fail("Scan failed, try again.")
        return

    selection = Selection(snapshot)
    try:
        for category_id in dict.fromkeys(category_ids):
            selection.toggle_category(category_id)
        for category_id, path in excluded:
            if not selection.is_category_selected(category_id):
                raise click.BadParameter(f"'{category_id}' is not selected", param_hint="--exclude")
            selection.toggle_item(category_id, path, False, _override_size(engine, category_id, path))
        for category_id, path in included:
            if selection.is_category_selected(category_id):
                raise click.BadParameter(f"'{category_id}' is already selected as a whole", param_hint="--include")
            selection.toggle_item(category_id, path, True, _override_size(engine, category_id, path))
    except UnknownCategory as exc:
        _fail(str(exc))
        return

    if selection.entry_count() == 0:
        if as_json:
            _echo_json({"status": "nothing_selected"})
        else:
            click.echo("Nothing selected.")
        return

    reclaimable = selection.total_reclaimable_bytes()
    if not as_json:
        click.echo(
            f"\nSelected {selection.entry_count()} entries, about "
            f"{click.style(bytes_to_human(reclaimable), fg='green', bold=True)} "
            f"of {bytes_to_human(volume.used_bytes)} used on {volume.mount_point}\n"
        )

    if dry_run:
        if as_json:
            _echo_json({"status": "dry_run", "reclaimableBytes": reclaimable, "request": selection.clean_request().to_dict()})
        else:
            click.echo("(dry run — no files were deleted)")
        return

    if not yes and not as_json:
        if not click.confirm("Delete permanently? This cannot be undone", default=False):
            click.echo("Aborted.")
            return

    try:
        result = engine.clean(selection)
    except SelectionError as exc:
        _fail(str(exc))
        return

    if as_json:
        _echo_json({"status": "cleaned", "result": result.to_dict()})
        return
    _print_cleanup(result)


@main.command("clean-large")
@click.argument("paths", nargs=-1, required=True)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def clean_large(ctx: click.Context, paths: tuple[str, ...], yes: bool, as_json: bool) -> None:
    """Permanently delete individual files or folders."""
    engine = _build_engine(ctx.obj["root"])
    resolved = [str(Path(p).absolute()) for p in paths]

    if not yes and not as_json:
        for path in resolved:
            click.echo(f"  {path}")
        if not click.confirm(f"\nDelete {len(resolved)} item(s) permanently?", default=False):
            click.echo("Aborted.")
            return

    result = engine.clean_large_items(resolved)
    if as_json:
        _echo_json(result.to_dict())
        return
    _print_cleanup(result)


# ── reveal ───────────────────────────────────────────────────────────────

@main.command()
@click.argument("path")
@click.pass_context
def reveal(ctx: click.Context, path: str) -> None:
    """Open the file manager at PATH."""
    engine = _build_engine(ctx.obj["root"])
    try:
        engine.reveal_path(path)
    except RevealError as exc:
        _fail(str(exc))


# ── hibernation ──────────────────────────────────────────────────────────

@main.command()
@click.option("--on/--off", "enable", default=None, help="Turn hibernation on or off")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def hibernation(ctx: click.Context, enable: bool | None, as_json: bool) -> None:
    """Show or change the hibernation file state (Windows)."""
    engine = _build_engine(ctx.obj["root"])
    try:
        state = engine.get_hibernation_info() if enable is None else engine.set_hibernation_enabled(enable)
    except HibernationError as exc:
        _fail(str(exc))
        return

    if as_json:
        _echo_json(state.to_dict())
        return
    status = click.style("enabled", fg="yellow") if state.enabled else click.style("disabled", fg="green")
    click.echo(f"  Hibernation {status} — {state.path} ({bytes_to_human(state.size_bytes)})")


# ── service ──────────────────────────────────────────────────────────────

@main.group()
def service() -> None:
    """D-Bus service management."""


@service.command("start")
def service_start() -> None:
    """Start the D-Bus service in foreground."""
    from reclaim.dbus_service import start_service

    click.echo("Starting Reclaim D-Bus service...")
    try:
        start_service()
    except ReclaimError as exc:
        _fail(str(exc))
