"""Main CLI entry point and application setup."""

import json
import logging
import sys
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Any

import click
import msgspec
from click.exceptions import Exit
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from spacetime_index import __version__
from spacetime_index.config import EngineSettings, load_config
from spacetime_index.core.dates import FuzzyDateResolver
from spacetime_index.core.exceptions import InvalidMessageError
from spacetime_index.core.models import Message
from spacetime_index.engine.base import SearchEngineClient
from spacetime_index.indexing import IndexLifecycleManager, PipelineExecutor
from spacetime_index.search import QueryBuilder, SearchService

RESULT_COLUMNS = ("dataset", "id", "type", "name", "validSince", "validUntil")


@dataclass
class Context:
    """CLI context that holds shared resources."""

    console: Console
    config: dict[str, Any] = field(default_factory=dict)
    debug: bool = False
    _engine: SearchEngineClient | None = None

    @property
    def engine(self) -> SearchEngineClient:
        """Search engine client, connected on first use."""
        if self._engine is None:
            self._engine = create_engine(self.config)
        return self._engine

    def close(self) -> None:
        """Close the engine client if one was created."""
        if self._engine is not None:
            self._engine.close()
            self._engine = None


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.WARNING
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_console(no_color: bool = False, width: int | None = None) -> Console:
    """Create Rich console with appropriate settings."""
    return Console(
        no_color=no_color,
        width=width or 120,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


def create_engine(config: dict[str, Any]) -> SearchEngineClient:
    """Create the Elasticsearch engine described by the configuration."""
    from spacetime_index.engine.elasticsearch import ElasticsearchEngine

    return ElasticsearchEngine.from_settings(EngineSettings.from_config(config))


def read_messages(stream: IO[str]) -> Iterator[Message]:
    """Decode newline-delimited JSON messages lazily.

    Raises:
        InvalidMessageError: On the first line that is not a valid message
    """
    for lineno, line in enumerate(stream, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            data = msgspec.json.decode(line)
        except msgspec.DecodeError as e:
            raise InvalidMessageError(f"line {lineno}: {e}") from e
        try:
            yield Message.from_dict(data)
        except InvalidMessageError as e:
            raise InvalidMessageError(f"line {lineno}: {e.details}") from e


def parse_bbox(
    ctx: click.Context, param: click.Parameter, value: str | None
) -> tuple[tuple[float, float], tuple[float, float]] | None:
    """Parse a ``W,S,E,N`` option into north-west and south-east corners."""
    if value is None:
        return None
    try:
        west, south, east, north = (float(part) for part in value.split(","))
    except ValueError:
        raise click.BadParameter("expected four numbers: WEST,SOUTH,EAST,NORTH")
    return ((west, north), (east, south))


class SpacetimeIndexGroup(click.Group):
    """Custom group that handles KeyboardInterrupt and application errors."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print("[yellow]Interrupted[/yellow]")
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except Exception as e:
            debug = getattr(ctx.obj, "debug", False) if ctx.obj else False
            if debug:
                raise
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
            else:
                click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


@click.group(cls=SpacetimeIndexGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Enable debug mode with full tracebacks")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.version_option(
    version=__version__,
    prog_name="spacetime-index",
    message="spacetime-index version %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config: Path | None,
) -> None:
    """Keep a spatio-temporal search index in sync and query it."""
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)

    console = create_console(no_color=no_color)

    try:
        config_data = load_config(config)
    except Exception as e:
        if debug:
            raise
        console.print(f"[red]Error loading config file:[/red] {escape(str(e))}")
        ctx.exit(1)

    ctx.obj = Context(console=console, config=config_data, debug=debug)
    ctx.call_on_close(ctx.obj.close)


@cli.command()
@click.argument("source", type=click.File("r"), default="-")
@click.option(
    "--batch-size",
    type=click.IntRange(min=1),
    help="Maximum number of documents per bulk write",
)
@click.pass_context
def bulk(ctx: click.Context, source: IO[str], batch_size: int | None) -> None:
    """Apply newline-delimited JSON messages from SOURCE (default: stdin)."""
    console = ctx.obj.console
    executor = PipelineExecutor(ctx.obj.engine, max_batch_size=batch_size)

    result = executor.run(read_messages(source))

    console.print(
        f"Processed {result.units} units: {result.indexed} documents written, "
        f"{result.skipped} skipped, {result.failed_items} rejected"
    )
    for reason in result.record_errors:
        console.print(f"  [yellow]•[/yellow] {escape(reason)}")

    if not result.success:
        console.print(f"[red]Error:[/red] {escape(str(result.error))}")
        ctx.exit(1)

    console.print("[green]✓[/green] Done")


@cli.command()
@click.option("--name", help="Free-text match on the object name")
@click.option("--exact", is_flag=True, help="Match the whole name exactly")
@click.option("--type", "types", multiple=True, help="Object type (repeatable)")
@click.option(
    "--bbox",
    callback=parse_bbox,
    metavar="W,S,E,N",
    help="Objects with a corner inside this box",
)
@click.option(
    "--contains",
    callback=parse_bbox,
    metavar="W,S,E,N",
    help="Objects with a corner inside this box",
)
@click.option("--before", help="Valid since no later than this date")
@click.option("--after", help="Valid until no earlier than this date")
@click.option("--dataset", "datasets", multiple=True, help="Dataset (repeatable)")
@click.option("--limit", "-n", type=click.IntRange(min=0), help="Maximum results")
@click.option("--offset", type=click.IntRange(min=0), default=0, help="Skip results")
@click.option("--json", "as_json", is_flag=True, help="Print results as JSON")
@click.pass_context
def search(
    ctx: click.Context,
    name: str | None,
    exact: bool,
    types: tuple[str, ...],
    bbox,
    contains,
    before: str | None,
    after: str | None,
    datasets: tuple[str, ...],
    limit: int | None,
    offset: int,
    as_json: bool,
) -> None:
    """Search indexed objects by name, type, location and validity."""
    console = ctx.obj.console
    builder = QueryBuilder(date_resolver=FuzzyDateResolver())
    service = SearchService(ctx.obj.engine, builder=builder)

    params = {
        "name": name,
        "exact": exact,
        "type": list(types) or None,
        "geometry": bbox,
        "contains": contains,
        "before": before,
        "after": after,
        "dataset": list(datasets) or None,
        "size": limit,
        "offset": offset,
    }
    results = service.search(params)

    if as_json:
        click.echo(json.dumps(results, indent=2, default=str))
        return

    if not results:
        console.print("[yellow]No results found[/yellow]")
        return

    table = Table(title=f"{len(results)} results")
    for column in RESULT_COLUMNS:
        table.add_column(column)
    for document in results:
        table.add_row(*(str(document.get(column, "")) for column in RESULT_COLUMNS))
    console.print(table)


@cli.group()
def alias() -> None:
    """Manage index aliases."""


@alias.command("point")
@click.argument("index")
@click.argument("alias_name", metavar="ALIAS")
@click.pass_context
def alias_point(ctx: click.Context, index: str, alias_name: str) -> None:
    """Point ALIAS at INDEX."""
    IndexLifecycleManager(ctx.obj.engine).put_alias(index, alias_name)
    ctx.obj.console.print(f"[green]✓[/green] {alias_name} → {index}")


@alias.command("swap")
@click.argument("old_index")
@click.argument("new_index")
@click.argument("alias_name", metavar="ALIAS")
@click.pass_context
def alias_swap(
    ctx: click.Context, old_index: str, new_index: str, alias_name: str
) -> None:
    """Atomically move ALIAS from OLD_INDEX to NEW_INDEX."""
    IndexLifecycleManager(ctx.obj.engine).swap_alias(old_index, new_index, alias_name)
    ctx.obj.console.print(f"[green]✓[/green] {alias_name} → {new_index}")


@alias.command("show")
@click.argument("alias_name", metavar="ALIAS")
@click.pass_context
def alias_show(ctx: click.Context, alias_name: str) -> None:
    """Show the index behind ALIAS."""
    index = IndexLifecycleManager(ctx.obj.engine).get_aliased_index(alias_name)
    if index is None:
        ctx.obj.console.print(f"[yellow]{alias_name} points at no index[/yellow]")
        ctx.exit(1)
    ctx.obj.console.print(index)


@cli.command("delete-index")
@click.argument("dataset_ids", nargs=-1)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_index(ctx: click.Context, dataset_ids: tuple[str, ...], yes: bool) -> None:
    """Delete the indices of DATASET_IDS, or every index when none are given."""
    target = ", ".join(dataset_ids) if dataset_ids else "ALL indices"
    if not yes:
        click.confirm(f"Delete {target}?", abort=True)

    IndexLifecycleManager(ctx.obj.engine).delete_indices(list(dataset_ids) or None)
    ctx.obj.console.print(f"[green]✓[/green] Deleted {target}")


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
