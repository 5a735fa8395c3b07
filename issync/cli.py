"""Click-based CLI for issync - incremental issue mirror."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from issync import __version__
from issync.config import (
    IssyncConfig,
    ensure_config_exists,
    get_config_path,
    load_config,
    validate_config_file,
)
from issync.config.schema import CollectionConfig
from issync.logger import setup_logging
from issync.output.console import Console
from issync.sync.engine import SyncEngine
from issync.sync.item import Item, load_items
from issync.sync.state import LedgerStorageError

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to config file (default: ~/.config/issync/config.yaml)",
)
collection_option = click.option("--project", "-p", "project", help="Collection name (owner-repo or owner/repo)")
items_option = click.option(
    "--items",
    "items_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="JSON file with the fetched issues",
)
verbose_option = click.option("--verbose", "-v", is_flag=True, help="Show detailed output")


def _load(config_path: Optional[Path], console: Console, *, verbose: bool = False) -> IssyncConfig:
    """Load config, apply its output settings and set up logging, exiting with a message on failure."""
    try:
        config = load_config(config_path)
    except FileNotFoundError as e:
        console.print_error(str(e))
        sys.exit(1)
    except ValidationError as e:
        console.print_error(f"Invalid configuration: {e}")
        sys.exit(1)

    console.apply_settings(verbose=verbose or config.output.verbose, colored=config.output.colored)
    setup_logging("DEBUG" if verbose else config.output.log_level)
    return config


def _select(config: IssyncConfig, project: Optional[str], console: Console) -> list[CollectionConfig]:
    """Resolve the collections a command applies to."""
    if project is None:
        return config.get_enabled_collections()

    collection = config.get_collection(project)
    if collection is None:
        console.print_error(f"Collection '{project}' not found")
        sys.exit(1)
    return [collection]


def _require_one(config: IssyncConfig, project: Optional[str], console: Console) -> CollectionConfig:
    collections = _select(config, project, console)
    if len(collections) != 1:
        console.print_error("Select a collection with --project")
        sys.exit(1)
    return collections[0]


def _read_items(path: Path, console: Console) -> list[Item]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(payload, list):
            raise ValueError("expected a JSON list of issues")
        return load_items(payload)
    except (OSError, ValueError, TypeError) as e:
        console.print_error(f"Cannot read items from {path}: {e}")
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="issync")
def cli() -> None:
    """issync - mirror remote issue collections into local category directories.

    \b
    Artifacts are filed under <output_dir>/<category>/ where category is
    one of active, todo, done, blocked.
    """


@cli.command()
@config_option
@collection_option
@verbose_option
def status(config_path: Optional[Path], project: Optional[str], verbose: bool) -> None:
    """Show ledger statistics and artifact counts per collection."""
    console = Console(verbose=verbose)
    config = _load(config_path, console, verbose=verbose)

    statuses = {}
    directories = {}
    cache_stats = {}
    try:
        for collection in _select(config, project, console):
            engine = SyncEngine.from_config(config, collection.name)
            statuses[collection.name] = engine.status()
            directories[collection.name] = engine.directory_stats()
            if engine.cache is not None:
                cache_stats[collection.name] = engine.cache.stats()
    except LedgerStorageError as e:
        console.print_error(str(e))
        sys.exit(1)

    console.print_ledger_status(statuses, directories if config.output.group_by_state else None)
    if cache_stats and console.verbose:
        console.print_cache_stats(cache_stats)


@cli.command()
@config_option
@collection_option
@items_option
@verbose_option
def diff(config_path: Optional[Path], project: Optional[str], items_path: Path, verbose: bool) -> None:
    """Show which fetched issues are new, updated, unchanged or deleted."""
    console = Console(verbose=verbose)
    config = _load(config_path, console, verbose=verbose)
    collection = _require_one(config, project, console)
    items = _read_items(items_path, console)

    try:
        changes = SyncEngine.from_config(config, collection.name).diff(items)
    except LedgerStorageError as e:
        console.print_error(str(e))
        sys.exit(1)

    console.print_changes(collection.label, changes)


@cli.command()
@config_option
@collection_option
@items_option
@click.option("--dry-run", "-n", is_flag=True, help="Show what would be moved without moving files")
@verbose_option
def reorganize(
    config_path: Optional[Path],
    project: Optional[str],
    items_path: Path,
    dry_run: bool,
    verbose: bool,
) -> None:
    """Move existing artifacts to the directory of their current category."""
    console = Console(verbose=verbose)
    config = _load(config_path, console, verbose=verbose)
    collection = _require_one(config, project, console)
    items = _read_items(items_path, console)

    try:
        result = SyncEngine.from_config(config, collection.name).reorganize(items, dry_run=dry_run)
    except LedgerStorageError as e:
        console.print_error(str(e))
        sys.exit(1)

    console.print_reorganize_result(collection.label, result)


@cli.command()
@config_option
@collection_option
@click.option("--yes", "-y", is_flag=True, help="Don't ask for confirmation")
def reset(config_path: Optional[Path], project: Optional[str], yes: bool) -> None:
    """Forget sync history; the next sync rewrites every artifact."""
    console = Console()
    config = _load(config_path, console)
    collections = _select(config, project, console)

    if not yes and not click.confirm(f"Reset sync history for {len(collections)} collection(s)?"):
        console.print_info("Aborted")
        return

    try:
        for collection in collections:
            SyncEngine.from_config(config, collection.name).reset()
            console.print_success(f"Reset {collection.label}")
    except LedgerStorageError as e:
        console.print_error(str(e))
        sys.exit(1)


@cli.group()
def cache() -> None:
    """Manage the upstream response cache."""


def _caches(config_path: Optional[Path], project: Optional[str], console: Console):
    config = _load(config_path, console)
    if not config.cache.enabled:
        console.print_warning("Cache is disabled in the configuration")
        return []
    return [
        (collection.name, SyncEngine.from_config(config, collection.name).cache)
        for collection in _select(config, project, console)
    ]


@cache.command("stats")
@config_option
@collection_option
def cache_stats(config_path: Optional[Path], project: Optional[str]) -> None:
    """Show cache entry counts and sizes."""
    console = Console()
    stats = {name: store.stats() for name, store in _caches(config_path, project, console)}
    if stats:
        console.print_cache_stats(stats)


@cache.command("clear")
@config_option
@collection_option
def cache_clear(config_path: Optional[Path], project: Optional[str]) -> None:
    """Remove all cache entries."""
    console = Console()
    for name, store in _caches(config_path, project, console):
        console.print_success(f"{name}: removed {store.clear()} entries")


@cache.command("sweep")
@config_option
@collection_option
def cache_sweep(config_path: Optional[Path], project: Optional[str]) -> None:
    """Remove expired and corrupt cache entries."""
    console = Console()
    for name, store in _caches(config_path, project, console):
        # Opening the store sweeps once already
        store.sweep_expired()
        console.print_success(f"{name}: {store.stats().entries} entries kept")


@cli.group("config")
def config_group() -> None:
    """Manage the configuration file."""


@config_group.command("init")
@config_option
def config_init(config_path: Optional[Path]) -> None:
    """Create a default configuration file."""
    console = Console()
    path, created = ensure_config_exists(config_path)
    if created:
        console.print_success(f"Created {path}")
    else:
        console.print_info(f"Configuration already exists: {path}")


@config_group.command("validate")
@config_option
def config_validate(config_path: Optional[Path]) -> None:
    """Validate the configuration file."""
    console = Console()
    path = config_path or get_config_path()
    valid, errors = validate_config_file(path)
    if valid:
        console.print_success(f"Configuration is valid: {path}")
        return

    for error in errors:
        console.print_error(error)
    sys.exit(1)


if __name__ == "__main__":
    cli()
