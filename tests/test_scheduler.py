from __future__ import annotations

import threading
from collections import Counter

import allure
import pytest

from nexus_swarm.orchestrator.models import Task, TaskResult, WorkerRole
from nexus_swarm.orchestrator.planner import plan_tasks
from nexus_swarm.orchestrator.scheduler import EXECUTOR_ERROR_PREFIX, WaveScheduler, run_swarm
from nexus_swarm.orchestrator.worker import SwarmWorker

pytestmark = [
    allure.epic("Swarm Engine"),
    allure.feature("Wave Scheduling"),
]


def _by_id(results: list[TaskResult]) -> dict[int, TaskResult]:
    return {result.id: result for result in results}


def test_dependent_task_runs_after_its_dependency(instant_worker: SwarmWorker) -> None:
    tasks = plan_tasks("Build backend api\nBuild frontend ui after Build backend api")

    results = run_swarm(tasks, worker=instant_worker)

    assert [result.id for result in results] == [1, 2]
    by_id = _by_id(results)
    assert by_id[1].worker == WorkerRole.BACKEND
    assert by_id[2].worker == WorkerRole.FRONTEND
    assert "completed" in by_id[1].summary
    assert "completed" in by_id[2].summary


def test_unresolvable_dependency_blocks_task(instant_worker: SwarmWorker) -> None:
    tasks = [Task(id=1, description="X after Y", dependencies=frozenset({7}))]

    results = run_swarm(tasks, worker=instant_worker)

    assert results == [
        TaskResult(id=1, summary="Blocked by dependencies: X after Y", worker=WorkerRole.SCHEDULER),
    ]


def test_cycle_blocks_both_tasks_after_ready_wave(instant_worker: SwarmWorker) -> None:
    tasks = [
        Task(id=1, description="root"),
        Task(id=2, description="ping", dependencies=frozenset({3})),
        Task(id=3, description="pong", dependencies=frozenset({2})),
    ]

    results = WaveScheduler(worker=instant_worker).run(tasks)

    assert results[0] == TaskResult(
        id=1,
        summary="general completed: root",
        worker=WorkerRole.GENERAL,
    )
    assert {result.id for result in results[1:]} == {2, 3}
    assert all(result.worker == WorkerRole.SCHEDULER for result in results[1:])


def test_failed_task_is_self_corrected() -> None:
    tasks = plan_tasks("Implement fail case")

    raw = WaveScheduler(worker=SwarmWorker(delay_seconds=0)).run(tasks)
    final = run_swarm(tasks, worker=SwarmWorker(delay_seconds=0))

    assert raw[0].summary == "general failed: Implement fail case"
    assert final == [
        TaskResult(
            id=1,
            summary="Retry succeeded after adjustment: general failed: Implement fail case",
            worker=WorkerRole.SELF_CORRECTOR,
        ),
    ]


def test_empty_plan_yields_no_results(instant_worker: SwarmWorker) -> None:
    assert run_swarm(plan_tasks(""), worker=instant_worker) == []


@pytest.mark.parametrize("max_concurrency", [None, 1, 2])
def test_every_task_gets_exactly_one_result(
    instant_worker: SwarmWorker,
    max_concurrency: int | None,
) -> None:
    raw_text = "\n".join(
        [
            "Design schema",
            "Build backend api after design schema",
            "",
            "Build frontend ui after build backend api",
            "Write tests after build frontend ui",
            "Docs",
            "Publish after missing step",
            "Implement fail case after docs",
        ],
    )
    tasks = plan_tasks(raw_text)

    results = run_swarm(tasks, worker=instant_worker, max_concurrency=max_concurrency)

    assert len(results) == len(tasks)
    assert Counter(result.id for result in results) == Counter(task.id for task in tasks)


@pytest.mark.parametrize("max_concurrency", [None, 1])
def test_dependencies_complete_in_earlier_waves(
    recording_worker,
    max_concurrency: int | None,
) -> None:
    tasks = [
        Task(id=1, description="a"),
        Task(id=2, description="b"),
        Task(id=3, description="c", dependencies=frozenset({1})),
        Task(id=4, description="d", dependencies=frozenset({2, 3})),
        Task(id=5, description="e", dependencies=frozenset({4})),
        Task(id=6, description="f"),
    ]

    results = WaveScheduler(worker=recording_worker, max_concurrency=max_concurrency).run(tasks)

    assert len(results) == len(tasks)
    position = {result.id: index for index, result in enumerate(results)}
    started = {task_id: index for index, task_id in enumerate(recording_worker.started)}
    for task in tasks:
        for dependency in task.dependencies:
            assert position[dependency] < position[task.id]
            assert started[dependency] < started[task.id]


def test_wave_results_precede_next_wave(instant_worker: SwarmWorker) -> None:
    tasks = plan_tasks("a\nb\nc\nd after a\ne after b")

    scheduler = WaveScheduler(worker=instant_worker)
    results = scheduler.run(tasks)

    assert {result.id for result in results[:3]} == {1, 2, 3}
    assert {result.id for result in results[3:]} == {4, 5}
    assert scheduler.last_summary.waves == 2
    assert scheduler.last_summary.executed == 5
    assert scheduler.last_summary.blocked == 0


def test_wave_tasks_run_concurrently_without_cap() -> None:
    barrier = threading.Barrier(3, timeout=5)

    class BarrierWorker:
        def execute(self, task: Task) -> TaskResult:
            barrier.wait()
            return TaskResult(id=task.id, summary="general completed", worker=WorkerRole.GENERAL)

    results = WaveScheduler(worker=BarrierWorker()).run(plan_tasks("a\nb\nc"))

    assert {result.id for result in results} == {1, 2, 3}


def test_concurrency_cap_limits_parallel_workers() -> None:
    lock = threading.Lock()
    active = 0
    peak = 0

    class GaugeWorker:
        def execute(self, task: Task) -> TaskResult:
            nonlocal active, peak
            with lock:
                active += 1
                peak = max(peak, active)
            threading.Event().wait(0.01)
            with lock:
                active -= 1
            return TaskResult(id=task.id, summary="general completed", worker=WorkerRole.GENERAL)

    results = WaveScheduler(worker=GaugeWorker(), max_concurrency=2).run(
        plan_tasks("\n".join(f"task {index}" for index in range(6))),
    )

    assert len(results) == 6
    assert peak <= 2


def test_invalid_concurrency_cap_is_rejected() -> None:
    with pytest.raises(ValueError, match="max_concurrency"):
        WaveScheduler(max_concurrency=0)


def test_planned_reference_to_missing_task_is_blocked(instant_worker: SwarmWorker) -> None:
    results = run_swarm(plan_tasks("X after Y"), worker=instant_worker)

    assert results == [
        TaskResult(id=1, summary="Blocked by dependencies: X after Y", worker=WorkerRole.SCHEDULER),
    ]


def test_raising_executor_still_yields_one_result_per_task(caplog) -> None:
    class FlakyWorker:
        def execute(self, task: Task) -> TaskResult:
            if task.id == 1:
                raise RuntimeError("worker crashed")
            return TaskResult(id=task.id, summary="general completed", worker=WorkerRole.GENERAL)

    tasks = plan_tasks("Build api\nShip after build api\nDocs")

    raw = WaveScheduler(worker=FlakyWorker()).run(tasks)
    final = run_swarm(tasks, worker=FlakyWorker())

    by_id = _by_id(raw)
    assert sorted(by_id) == [1, 2, 3]
    assert by_id[1] == TaskResult(
        id=1,
        summary=f"{EXECUTOR_ERROR_PREFIX}Build api (worker crashed)",
        worker=WorkerRole.SCHEDULER,
    )
    assert by_id[2].summary == "general completed"
    assert _by_id(final)[1].worker == WorkerRole.SELF_CORRECTOR
    assert "Worker raised while executing task 1" in caplog.text
