"""CLI commands for dbfixtures."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Mapping, Sequence
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from dbfixtures.config import FixturesConfig, load_config
from dbfixtures.coordinator import DbFixtures
from dbfixtures.errors import DbFixturesError
from dbfixtures.factory import DriverFactory
from dbfixtures.loaders import load_fixture_file

logger = logging.getLogger(__name__)
console = Console()


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--config", "-c", type=click.Path(exists=True), help="Path to config file")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config: str | None) -> None:
    """dbfixtures - seed and reset test data in Kafka, MongoDB and Redis."""
    ctx.ensure_object(dict)

    config_obj = load_config(config)
    if verbose:
        config_obj.verbose = True

    ctx.obj["config"] = config_obj
    ctx.obj["verbose"] = verbose

    setup_logging(config_obj.verbose)


@cli.command()
@click.argument("fixture_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--target",
    "-t",
    "targets",
    multiple=True,
    help="Target to load (repeatable). Defaults to every target in the file.",
)
@click.pass_context
def load(ctx: click.Context, fixture_file: str, targets: tuple[str, ...]) -> None:
    """Truncate targets and insert the fixtures from FIXTURE_FILE."""
    config: FixturesConfig = ctx.obj["config"]

    try:
        fixtures = load_fixture_file(fixture_file)
    except DbFixturesError as e:
        click.echo(f"✗ {e}", err=True)
        sys.exit(1)

    names = list(targets) if targets else list(fixtures.keys())
    click.echo(f"Loading {len(names)} target(s) from {fixture_file}...")
    _exit_with(_run(config, names, fixtures))


@cli.command()
@click.argument("names", nargs=-1, required=True)
@click.pass_context
def truncate(ctx: click.Context, names: tuple[str, ...]) -> None:
    """Wipe the named targets in every configured backend."""
    config: FixturesConfig = ctx.obj["config"]
    click.echo(f"Truncating {len(names)} target(s)...")
    _exit_with(_run(config, list(names), {}))


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Show which backends are configured.

    Exit codes:
        0 - At least one backend is configured
        1 - No backend is configured
    """
    config: FixturesConfig = ctx.obj["config"]
    backends = config.configured_backends()

    settings = {
        "kafka": config.kafka_bootstrap_servers,
        "mongodb": f"{config.mongodb_url} ({config.mongodb_database})",
        "redis": config.redis_url,
    }

    table = Table(show_header=False, box=None)
    table.add_column("Status", width=3)
    table.add_column("Backend", width=10)
    table.add_column("Setting")

    for backend, setting in settings.items():
        if backend in backends:
            table.add_row("[green]OK[/green]", backend, f"[green]{setting}[/green]")
        else:
            table.add_row("[yellow]--[/yellow]", backend, "[yellow]not configured[/yellow]")

    console.print(table)

    if "redis" in backends:
        for key, key_type in sorted(config.redis_key_types.items()):
            console.print(f"    {key}: {key_type}")

    if not backends:
        console.print(
            "[red]No backends configured.[/red] Set DBFIXTURES_* variables or use --config."
        )
        raise SystemExit(1)


def _run(
    config: FixturesConfig,
    names: Sequence[str],
    fixtures: Mapping[str, Sequence[Any]],
) -> BaseException | None:
    try:
        drivers = DriverFactory.from_config(config)
    except DbFixturesError as e:
        return e
    if not drivers:
        return DbFixturesError("No backends configured")
    return asyncio.run(_load_and_close(DbFixtures(drivers), names, fixtures))


async def _load_and_close(
    coordinator: DbFixtures,
    names: Sequence[str],
    fixtures: Mapping[str, Sequence[Any]],
) -> BaseException | None:
    failure: BaseException | None = None
    try:
        await coordinator.load_fixtures(names, fixtures)
    except Exception as e:
        failure = e
    try:
        await coordinator.close_drivers()
    except Exception as e:
        failure = failure or e
    return failure


def _exit_with(failure: BaseException | None) -> None:
    if failure is None:
        click.echo("✓ Done")
        return
    if isinstance(failure, DbFixturesError):
        click.echo(failure.format_verbose(), err=True)
    else:
        click.echo(f"✗ {failure!r}", err=True)
    sys.exit(1)
