"""Wave-based scheduler that dispatches dependency-ready tasks concurrently."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Protocol

from nexus_swarm.orchestrator.models import Task, TaskResult, WorkerRole
from nexus_swarm.orchestrator.self_corrector import self_correct
from nexus_swarm.orchestrator.worker import SwarmWorker

logger = logging.getLogger(__name__)

BLOCKED_PREFIX = "Blocked by dependencies: "
EXECUTOR_ERROR_PREFIX = "scheduler failed: "


class TaskExecutor(Protocol):
    """Protocol implemented by per-task workers.

    An exception raised by ``execute`` is reported as a failed ``scheduler``
    result for that task; the rest of the run continues.
    """

    def execute(self, task: Task) -> TaskResult:
        """Run one task and return its result."""


@dataclass(slots=True)
class SchedulerRunSummary:
    """Aggregate scheduler counters for logging and CLI reporting."""

    waves: int = 0
    executed: int = 0
    blocked: int = 0


class WaveScheduler:
    """Runs tasks in dependency waves with a fork-join barrier per wave."""

    def __init__(
        self,
        *,
        worker: TaskExecutor | None = None,
        max_concurrency: int | None = None,
    ) -> None:
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1 when set.")
        self.worker = worker or SwarmWorker()
        self.max_concurrency = max_concurrency
        self.last_summary = SchedulerRunSummary()

    def run(self, tasks: Iterable[Task]) -> list[TaskResult]:
        """Execute all tasks and return raw results, one per task.

        Results of one wave are appended in completion order and always precede
        the results of the next wave. Tasks whose dependencies can never be
        satisfied get a ``scheduler`` result instead of running.
        """

        remaining: dict[int, Task] = {task.id: task for task in tasks}
        completed: set[int] = set()
        results: list[TaskResult] = []
        summary = SchedulerRunSummary()

        while remaining:
            ready = [task for task in remaining.values() if task.dependencies <= completed]
            if not ready:
                results.extend(self._blocked_results(remaining.values()))
                summary.blocked = len(remaining)
                logger.warning(
                    "Swarm blocked with %d task(s) pending: %s",
                    len(remaining),
                    sorted(remaining),
                )
                break

            for task in ready:
                del remaining[task.id]
            summary.waves += 1
            logger.debug(
                "Dispatching wave %d with %d task(s): %s",
                summary.waves,
                len(ready),
                [task.id for task in ready],
            )
            for result in self._run_wave(ready):
                completed.add(result.id)
                results.append(result)
                summary.executed += 1

        self.last_summary = summary
        logger.info(
            "Swarm run finished: waves=%d executed=%d blocked=%d",
            summary.waves,
            summary.executed,
            summary.blocked,
        )
        return results

    def _run_wave(self, ready: list[Task]) -> list[TaskResult]:
        workers = len(ready)
        if self.max_concurrency is not None:
            workers = min(workers, self.max_concurrency)
        wave_results: list[TaskResult] = []
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="swarm-worker") as executor:
            futures = {executor.submit(self.worker.execute, task): task for task in ready}
            for future in as_completed(futures):
                wave_results.append(_collect(future, futures[future]))
        return wave_results

    def _blocked_results(self, tasks: Iterable[Task]) -> list[TaskResult]:
        return [
            TaskResult(
                id=task.id,
                summary=f"{BLOCKED_PREFIX}{task.description}",
                worker=WorkerRole.SCHEDULER,
            )
            for task in tasks
        ]


def _collect(future: Future[TaskResult], task: Task) -> TaskResult:
    try:
        return future.result()
    except Exception as error:  # noqa: BLE001
        logger.exception("Worker raised while executing task %d", task.id)
        return TaskResult(
            id=task.id,
            summary=f"{EXECUTOR_ERROR_PREFIX}{task.description} ({error})",
            worker=WorkerRole.SCHEDULER,
        )

def run_swarm(
    tasks: Iterable[Task],
    *,
    worker: TaskExecutor | None = None,
    max_concurrency: int | None = None,
) -> list[TaskResult]:
    """Schedule all tasks and apply the self-correction pass to the results."""

    scheduler = WaveScheduler(worker=worker, max_concurrency=max_concurrency)
    return self_correct(scheduler.run(tasks))
