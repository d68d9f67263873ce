"""Audit event synthesis for plans and run results."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable

from nexus_swarm.orchestrator.models import (
    COMPLETED_EVENT,
    PLANNED_EVENT,
    SwarmEvent,
    Task,
    TaskResult,
)

Clock = Callable[[], float]


def now_ts(clock: Clock | None = None) -> int:
    """Whole seconds since the epoch."""

    return max(0, int((clock or time.time)()))


def plan_events(tasks: Iterable[Task], *, clock: Clock | None = None) -> list[SwarmEvent]:
    """One ``planned`` event per task, all sharing one timestamp."""

    timestamp = now_ts(clock)
    return [
        SwarmEvent(
            timestamp=timestamp,
            event=PLANNED_EVENT,
            detail=f"[{task.id}] {task.description}",
        )
        for task in tasks
    ]


def result_events(
    results: Iterable[TaskResult],
    *,
    clock: Clock | None = None,
) -> list[SwarmEvent]:
    """One ``completed`` event per result, all sharing one timestamp."""

    timestamp = now_ts(clock)
    return [
        SwarmEvent(
            timestamp=timestamp,
            event=COMPLETED_EVENT,
            detail=f"[{result.id}] {result.summary} ({result.worker.value})",
        )
        for result in results
    ]
