"""Swarm orchestration engine.

Raw text becomes a plan (one task per non-blank line, dependency edges
inferred from ``after ...`` / ``depends on ...`` phrases), the plan runs in
dependency waves on a thread pool, simulated failures are masked by one
self-correction pass, and plan/result sets become audit events for an
external append-only log.

Everything runs inside one process. A wave is a fork-join barrier: the next
ready set is computed only after every task of the current wave returned.
"""

from nexus_swarm.orchestrator.events import plan_events, result_events
from nexus_swarm.orchestrator.models import SwarmEvent, Task, TaskResult, WorkerRole
from nexus_swarm.orchestrator.planner import (
    DependencyResolver,
    ExplicitReferenceDependencyResolver,
    PlanValidationError,
    SubstringDependencyResolver,
    plan_tasks,
)
from nexus_swarm.orchestrator.scheduler import WaveScheduler, run_swarm
from nexus_swarm.orchestrator.self_corrector import self_correct
from nexus_swarm.orchestrator.worker import SwarmWorker, classify_worker

__all__ = [
    "DependencyResolver",
    "ExplicitReferenceDependencyResolver",
    "PlanValidationError",
    "SubstringDependencyResolver",
    "SwarmEvent",
    "SwarmWorker",
    "Task",
    "TaskResult",
    "WaveScheduler",
    "WorkerRole",
    "classify_worker",
    "plan_events",
    "plan_tasks",
    "result_events",
    "run_swarm",
    "self_correct",
]
