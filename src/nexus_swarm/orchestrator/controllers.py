"""Controllers for swarm CLI commands."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from nexus_swarm.config import Settings
from nexus_swarm.orchestrator.planner import build_dependency_resolver
from nexus_swarm.orchestrator.services import SwarmService
from nexus_swarm.orchestrator.worker import SwarmWorker
from nexus_swarm.storage import EventStore, JsonFileEventStore, SqliteEventStore


@dataclass(slots=True)
class StoreOptions:
    """CLI overrides for event store selection."""

    event_store: str | None = None
    events_path: Path | None = None
    db_path: Path | None = None


@dataclass(slots=True)
class SwarmPlanCommand:
    """CLI input for plan-only invocation."""

    raw_text: str
    store: StoreOptions


@dataclass(slots=True)
class SwarmRunCommand:
    """CLI input for a full swarm run."""

    raw_text: str
    store: StoreOptions
    max_concurrency: int | None = None


@dataclass(slots=True)
class SwarmEventsCommand:
    """CLI input for audit log listing."""

    store: StoreOptions
    limit: int | None = None


@dataclass(slots=True)
class SwarmClearCommand:
    """CLI input for audit log reset."""

    store: StoreOptions


class SwarmCliController:
    """Coordinates plan, run and audit log CLI operations."""

    def plan(self, command: SwarmPlanCommand) -> list[str]:
        settings = _settings(command.store)
        with _service(settings) as service:
            tasks = service.plan(command.raw_text)
        return [
            f"Planned {len(tasks)} task(s).",
            *(f"[{task.id}] {task.description}" for task in tasks),
        ]

    def run(self, command: SwarmRunCommand) -> list[str]:
        settings = _settings(command.store, max_concurrency=command.max_concurrency)
        with _service(settings) as service:
            report = service.run(command.raw_text)
        lines = [
            f"[{result.id}] {result.summary} ({result.worker.value})" for result in report.results
        ]
        if not report.events_recorded:
            lines.append("Warning: swarm events were not recorded.")
        return lines

    def events(self, command: SwarmEventsCommand) -> list[str]:
        settings = _settings(command.store)
        with _service(settings) as service:
            events = service.list_events(limit=command.limit)
        if not events:
            return ["No swarm events recorded."]
        return [
            f"{_format_timestamp(event.timestamp)} [{event.event}] {event.detail}"
            for event in events
        ]

    def clear(self, command: SwarmClearCommand) -> list[str]:
        settings = _settings(command.store)
        with _service(settings) as service:
            cleared = service.clear_events()
        return [f"Cleared {cleared} swarm event(s)."]


def _settings(store: StoreOptions, *, max_concurrency: int | None = None) -> Settings:
    return Settings.from_env(
        event_store=store.event_store,
        events_path=store.events_path,
        db_path=store.db_path,
        max_concurrency=max_concurrency,
    )


def _format_timestamp(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=UTC).strftime("%Y-%m-%d %H:%M:%S")


@contextmanager
def _event_store(settings: Settings) -> Iterator[EventStore]:
    if settings.storage.event_store == "json":
        yield JsonFileEventStore(settings.storage.events_path)
        return
    store = SqliteEventStore(
        settings.storage.db_path,
        busy_timeout_ms=settings.storage.sqlite_busy_timeout_ms,
    )
    store.init_schema()
    try:
        yield store
    finally:
        store.close()


@contextmanager
def _service(settings: Settings) -> Iterator[SwarmService]:
    with _event_store(settings) as store:
        yield SwarmService(
            store=store,
            resolver=build_dependency_resolver(settings.swarm.dependency_mode),
            self_dependency=settings.swarm.self_dependency,
            worker=SwarmWorker(delay_seconds=settings.swarm.worker_delay_seconds),
            max_concurrency=settings.swarm.max_concurrency,
        )
