"""Nesting Indexer CLI entry point."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

import click

from nesting_indexer import __version__

if TYPE_CHECKING:
    import sqlite3

    from nesting_indexer.adapters.memory import InMemoryPreservationStore
    from nesting_indexer.config import IndexerConfig

_PACKAGE_LOGGER = "nesting_indexer"


@click.group()
@click.version_option(version=__version__, prog_name="nesting-indexer")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """Nesting Indexer - materialized paths for parent/child membership."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


def _setup_logging(ctx: click.Context, config: IndexerConfig) -> None:
    """Attach a Rich stderr handler to the package logger."""
    from rich.console import Console
    from rich.logging import RichHandler

    if ctx.obj.get("verbose"):
        level = logging.DEBUG
    elif ctx.obj.get("quiet"):
        level = logging.ERROR
    else:
        level = logging.getLevelName(config.log_level)

    pkg_logger = logging.getLogger(_PACKAGE_LOGGER)
    for handler in pkg_logger.handlers[:]:
        if isinstance(handler, RichHandler):
            pkg_logger.removeHandler(handler)
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setLevel(level)
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(level)


def _load_project_config(ctx: click.Context, project_root: Path) -> IndexerConfig:
    from nesting_indexer.config import load_config

    try:
        config = load_config(project_root)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    _setup_logging(ctx, config)
    return config


def _load_preservation(
    ctx: click.Context, project_root: Path, config: IndexerConfig
) -> InMemoryPreservationStore:
    from nesting_indexer.config import resolve_graph_dir
    from nesting_indexer.graph_loader import load_graph

    graph_dir = resolve_graph_dir(project_root, config)
    if not graph_dir.is_dir():
        click.echo(f"Error: graph directory not found: {graph_dir}", err=True)
        sys.exit(1)

    result = load_graph(graph_dir)
    for err in result.errors:
        click.echo(f"  [ERR] {err}", err=True)
    if not ctx.obj.get("quiet"):
        for warn in result.warnings:
            click.echo(f"  [warn] {warn}", err=True)
    return result.to_store()


def _open_index(project_root: Path, config: IndexerConfig, *, create: bool) -> sqlite3.Connection:
    from nesting_indexer.config import resolve_db_path
    from nesting_indexer.db import SCHEMA_VERSION, create_schema, get_meta, open_db

    db_path = resolve_db_path(project_root, config)
    if not create and not db_path.exists():
        click.echo("Error: index not found. Run `nesting-indexer reindex-all` first.", err=True)
        sys.exit(1)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = open_db(db_path)
    create_schema(conn)
    stored_version = get_meta(conn, "schema_version")
    if stored_version is not None and stored_version != SCHEMA_VERSION:
        click.echo(
            f"  [warn] index schema version {stored_version} != {SCHEMA_VERSION}, "
            "run `nesting-indexer reindex-all` to rebuild",
            err=True,
        )
    return conn


def _record_run(conn: sqlite3.Connection) -> None:
    from nesting_indexer.db import SCHEMA_VERSION, set_meta

    set_meta(conn, "last_reindex_at", datetime.now(tz=timezone.utc).isoformat())
    set_meta(conn, "nesting_indexer_version", __version__)
    set_meta(conn, "schema_version", SCHEMA_VERSION)


@main.command()
@click.argument("doc_id", metavar="ID")
@click.option(
    "--descendants-only",
    is_flag=True,
    default=False,
    help="Leave ID untouched and refresh only its descendants.",
)
@click.option(
    "--hops",
    type=click.IntRange(min=1),
    default=None,
    help="Hop ceiling (default: from config.yml or 15).",
)
@click.option(
    "--strict/--no-strict",
    default=None,
    help="Fail as soon as an id reappears along its own trail.",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)
@click.pass_context
def reindex(
    ctx: click.Context,
    doc_id: str,
    *,
    descendants_only: bool,
    hops: int | None,
    strict: bool | None,
    as_json: bool,
    project: Path | None,
) -> None:
    """Reindex ID and everything nested beneath it."""
    from nesting_indexer.adapters.sqlite import SqliteIndexStore
    from nesting_indexer.exceptions import NestingIndexerError
    from nesting_indexer.reindexer import Reindexer, ReindexMode

    project_root = project or Path.cwd()
    config = _load_project_config(ctx, project_root)
    preservation = _load_preservation(ctx, project_root, config)
    conn = _open_index(project_root, config, create=True)

    mode = ReindexMode.DESCENDANTS_ONLY if descendants_only else ReindexMode.FULL
    reindexer = Reindexer(
        preservation,
        SqliteIndexStore(conn),
        hop_ceiling=hops if hops is not None else config.hop_ceiling,
        strict=strict if strict is not None else config.strict,
    )
    try:
        result = reindexer.reindex(doc_id, mode)
        _record_run(conn)
    except NestingIndexerError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    finally:
        conn.close()

    if as_json:
        click.echo(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    elif not ctx.obj.get("quiet"):
        click.echo(f"Mode:      {result.mode.value}")
        click.echo(f"Processed: {result.processed_count}")


@main.command("reindex-all")
@click.option(
    "--hops",
    type=click.IntRange(min=1),
    default=None,
    help="Hop ceiling (default: from config.yml or 15).",
)
@click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)
@click.pass_context
def reindex_all_cmd(ctx: click.Context, *, hops: int | None, project: Path | None) -> None:
    """Drop the index and rebuild it for every preservation object."""
    from nesting_indexer.adapters.sqlite import SqliteIndexStore
    from nesting_indexer.exceptions import NestingIndexerError
    from nesting_indexer.reindexer import Reindexer

    project_root = project or Path.cwd()
    config = _load_project_config(ctx, project_root)
    preservation = _load_preservation(ctx, project_root, config)
    conn = _open_index(project_root, config, create=True)

    reindexer = Reindexer(
        preservation,
        SqliteIndexStore(conn),
        hop_ceiling=hops if hops is not None else config.hop_ceiling,
    )
    try:
        written = reindexer.reindex_all(preservation.ids())
        _record_run(conn)
    except NestingIndexerError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    finally:
        conn.close()

    if not ctx.obj.get("quiet"):
        click.echo(f"Documents: {len(written)}")


@main.command()
@click.argument("doc_id", metavar="ID")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)
@click.pass_context
def show(ctx: click.Context, doc_id: str, *, as_json: bool, project: Path | None) -> None:
    """Show the index document for ID."""
    from nesting_indexer.adapters.sqlite import SqliteIndexStore
    from nesting_indexer.exceptions import NotFoundError

    project_root = project or Path.cwd()
    config = _load_project_config(ctx, project_root)
    conn = _open_index(project_root, config, create=False)
    try:
        document = SqliteIndexStore(conn).find_index_document(doc_id)
    except NotFoundError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    finally:
        conn.close()

    if as_json:
        click.echo(json.dumps(document.to_dict(), ensure_ascii=False, indent=2))
    else:
        from rich.console import Console

        from nesting_indexer.documents import render_index_document

        render_index_document(document, Console())


@main.command()
@click.argument("doc_id", metavar="ID")
@click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)
@click.pass_context
def children(ctx: click.Context, doc_id: str, *, project: Path | None) -> None:
    """List indexed children of ID."""
    from nesting_indexer.adapters.sqlite import SqliteIndexStore

    project_root = project or Path.cwd()
    config = _load_project_config(ctx, project_root)
    conn = _open_index(project_root, config, create=False)
    try:
        found = SqliteIndexStore(conn).find_children(doc_id)
    finally:
        conn.close()

    if not found:
        click.echo("No children.")
        return
    for child in found:
        click.echo(child.id)


@main.command()
@click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)
@click.pass_context
def clear(ctx: click.Context, *, project: Path | None) -> None:
    """Drop all index state."""
    from nesting_indexer.adapters.sqlite import SqliteIndexStore

    project_root = project or Path.cwd()
    config = _load_project_config(ctx, project_root)
    conn = _open_index(project_root, config, create=True)
    try:
        SqliteIndexStore(conn).clear_all()
    finally:
        conn.close()
    click.echo("Index cleared.")
