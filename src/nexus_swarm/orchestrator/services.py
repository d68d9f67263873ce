"""Use-case services for swarm planning, runs and the audit log."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from nexus_swarm.orchestrator.events import Clock, plan_events, result_events
from nexus_swarm.orchestrator.models import SwarmEvent, Task, TaskResult
from nexus_swarm.orchestrator.planner import DependencyResolver, plan_tasks
from nexus_swarm.orchestrator.scheduler import TaskExecutor, WaveScheduler
from nexus_swarm.orchestrator.self_corrector import self_correct
from nexus_swarm.storage.base import EventStore, EventStoreError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SwarmRunReport:
    """Final results of one run together with the plan they came from."""

    tasks: list[Task]
    results: list[TaskResult]
    events_recorded: bool


class SwarmService:
    """Coordinates planner, scheduler, corrector and event store."""

    def __init__(  # noqa: PLR0913
        self,
        *,
        store: EventStore,
        resolver: DependencyResolver | None = None,
        self_dependency: str = "allow",
        worker: TaskExecutor | None = None,
        max_concurrency: int | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.store = store
        self.resolver = resolver
        self.self_dependency = self_dependency
        self.scheduler = WaveScheduler(worker=worker, max_concurrency=max_concurrency)
        self.clock = clock

    def plan(self, raw_text: str) -> list[Task]:
        """Plan tasks and record one ``planned`` event per task."""

        tasks = self._plan(raw_text)
        self._record(plan_events(tasks, clock=self.clock))
        return tasks

    def run(self, raw_text: str) -> SwarmRunReport:
        """Plan, execute and correct tasks, then record ``completed`` events."""

        tasks = self._plan(raw_text)
        results = self_correct(self.scheduler.run(tasks))
        recorded = self._record(result_events(results, clock=self.clock))
        return SwarmRunReport(tasks=tasks, results=results, events_recorded=recorded)

    def list_events(self, *, limit: int | None = None) -> list[SwarmEvent]:
        """Return persisted events, newest last, optionally only the last ``limit``."""

        events = self.store.load()
        if limit is not None:
            return events[-limit:] if limit > 0 else []
        return events

    def clear_events(self) -> int:
        """Drop the persisted log and return how many events it held."""

        count = len(self.store.load())
        self.store.clear()
        return count

    def _plan(self, raw_text: str) -> list[Task]:
        return plan_tasks(raw_text, resolver=self.resolver, self_dependency=self.self_dependency)

    def _record(self, events: Sequence[SwarmEvent]) -> bool:
        if not events:
            return True
        try:
            self.store.append(events)
        except EventStoreError as error:
            logger.warning("Failed to record %d swarm event(s): %s", len(events), error)
            return False
        return True
