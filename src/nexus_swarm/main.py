"""CLI entrypoint for nexus-swarm."""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import rich_click as click

from nexus_swarm import __version__
from nexus_swarm.config import EVENT_STORE_KINDS, Settings
from nexus_swarm.orchestrator.controllers import (
    StoreOptions,
    SwarmClearCommand,
    SwarmCliController,
    SwarmEventsCommand,
    SwarmPlanCommand,
    SwarmRunCommand,
)
from nexus_swarm.storage import EventStoreError

click.rich_click.USE_MARKDOWN = True
SWARM_CONTROLLER = SwarmCliController()

_T = TypeVar("_T")


def _store_options(command: Callable[..., _T]) -> Callable[..., _T]:
    command = click.option(
        "--db-path",
        type=click.Path(path_type=Path),
        default=None,
        help="SQLite DB path for the sqlite event store.",
    )(command)
    command = click.option(
        "--events-path",
        type=click.Path(path_type=Path),
        default=None,
        help="JSON event log path for the json event store.",
    )(command)
    return click.option(
        "--store",
        "event_store",
        type=click.Choice(EVENT_STORE_KINDS, case_sensitive=False),
        default=None,
        help="Event store backend. Defaults to NEXUS_SWARM_EVENT_STORE or json.",
    )(command)


def _input_options(command: Callable[..., _T]) -> Callable[..., _T]:
    command = click.option(
        "--from-file",
        "input_file",
        type=click.Path(path_type=Path, exists=True, dir_okay=False),
        default=None,
        help="Read task lines from a file instead of the INPUT argument.",
    )(command)
    return click.argument("input_text", required=False)(command)


@click.group()
@click.version_option(version=__version__, prog_name="nexus-swarm")
def nexus_swarm() -> None:
    """Nexus swarm orchestration CLI."""

    try:
        settings = Settings.from_env()
    except ValueError as error:
        raise click.ClickException(str(error)) from error
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@nexus_swarm.group()
def swarm() -> None:
    """Plan or run swarm tasks."""


@swarm.command("plan")
@_input_options
@_store_options
def swarm_plan(
    input_text: str | None,
    input_file: Path | None,
    event_store: str | None,
    events_path: Path | None,
    db_path: Path | None,
) -> None:
    """Split INPUT into tasks (one per line) and record `planned` events."""

    raw_text = _read_input(input_text, input_file)
    _emit_lines(
        _invoke(
            lambda: SWARM_CONTROLLER.plan(
                SwarmPlanCommand(
                    raw_text=raw_text,
                    store=_store(event_store, events_path, db_path),
                ),
            ),
        ),
    )


@swarm.command("run")
@_input_options
@click.option(
    "--max-concurrency",
    type=click.IntRange(min=1),
    default=None,
    help="Cap on tasks executed at once per wave. Unbounded by default.",
)
@_store_options
def swarm_run(  # noqa: PLR0913
    input_text: str | None,
    input_file: Path | None,
    max_concurrency: int | None,
    event_store: str | None,
    events_path: Path | None,
    db_path: Path | None,
) -> None:
    """Plan INPUT, execute tasks in dependency waves and record `completed` events."""

    raw_text = _read_input(input_text, input_file)
    _emit_lines(
        _invoke(
            lambda: SWARM_CONTROLLER.run(
                SwarmRunCommand(
                    raw_text=raw_text,
                    store=_store(event_store, events_path, db_path),
                    max_concurrency=max_concurrency,
                ),
            ),
        ),
    )


@swarm.command("events")
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Only show the most recent events.",
)
@_store_options
def swarm_events(
    limit: int | None,
    event_store: str | None,
    events_path: Path | None,
    db_path: Path | None,
) -> None:
    """Show the swarm audit log."""

    _emit_lines(
        _invoke(
            lambda: SWARM_CONTROLLER.events(
                SwarmEventsCommand(
                    store=_store(event_store, events_path, db_path),
                    limit=limit,
                ),
            ),
        ),
    )


@swarm.command("clear")
@_store_options
def swarm_clear(
    event_store: str | None,
    events_path: Path | None,
    db_path: Path | None,
) -> None:
    """Delete every recorded swarm event."""

    _emit_lines(
        _invoke(
            lambda: SWARM_CONTROLLER.clear(
                SwarmClearCommand(store=_store(event_store, events_path, db_path)),
            ),
        ),
    )


def _store(event_store: str | None, events_path: Path | None, db_path: Path | None) -> StoreOptions:
    return StoreOptions(
        event_store=event_store.lower() if event_store is not None else None,
        events_path=events_path,
        db_path=db_path,
    )


def _read_input(input_text: str | None, input_file: Path | None) -> str:
    if input_file is not None:
        if input_text is not None:
            raise click.UsageError("Pass either INPUT or --from-file, not both.")
        return input_file.read_text(encoding="utf-8")
    if input_text is None:
        raise click.UsageError("Missing INPUT. Pass task text, '-' for stdin, or --from-file.")
    if input_text == "-":
        return click.get_text_stream("stdin").read()
    return input_text


def _invoke(action: Callable[[], list[str]]) -> list[str]:
    try:
        return action()
    except (ValueError, EventStoreError) as error:
        raise click.ClickException(str(error)) from error


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    nexus_swarm()
