"""Deterministic text-to-plan conversion with pluggable dependency inference."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import replace
from typing import Protocol

from nexus_swarm.orchestrator.models import Task

logger = logging.getLogger(__name__)

SELF_DEPENDENCY_POLICIES = ("allow", "reject")
DEPENDENCY_MODES = ("substring", "explicit")

# Task ids start at 1.
UNRESOLVED_DEPENDENCY_ID = 0

_DEPENDENCY_MARKERS: tuple[str, ...] = ("after ", "depends on ")
_DEPENDENCY_PHRASE_RE = re.compile(r"\b(?:after|depends on) (?=(\S.*))")
_EXPLICIT_REFERENCE_RE = re.compile(
    r"(?:after|depends\s+on)\s+(#\d+(?:\s*(?:,|\band\b)\s*#\d+)*)",
    re.IGNORECASE,
)
_TASK_ID_RE = re.compile(r"#(\d+)")


class PlanValidationError(ValueError):
    """Raised when a plan violates the configured validation policy."""


class DependencyResolver(Protocol):
    """Protocol implemented by dependency inference strategies."""

    def resolve(self, tasks: Sequence[Task]) -> dict[int, frozenset[int]]:
        """Return dependency id sets keyed by task id."""


class SubstringDependencyResolver:
    """Infer edges from ``after <description>`` / ``depends on <description>`` text.

    Matching is plain lowercase substring search against every planned
    description, including the task's own. It is fragile by nature (one
    description may contain another by accident) but keeps plans written
    for the original tool compatible.

    A dependency phrase whose target matches no planned description becomes
    an edge to ``UNRESOLVED_DEPENDENCY_ID``, which never completes, so the
    task ends up blocked instead of running out of order.
    """

    def resolve(self, tasks: Sequence[Task]) -> dict[int, frozenset[int]]:
        by_description: dict[str, int] = {}
        for task in tasks:
            by_description[task.description.lower()] = task.id

        resolved: dict[int, frozenset[int]] = {}
        for task in tasks:
            haystack = task.description.lower()
            dependencies = {
                other_id
                for description, other_id in by_description.items()
                if any(f"{marker}{description}" in haystack for marker in _DEPENDENCY_MARKERS)
            }
            unresolved = [
                target
                for target in (match.group(1) for match in _DEPENDENCY_PHRASE_RE.finditer(haystack))
                if not any(target.startswith(description) for description in by_description)
            ]
            if unresolved:
                logger.warning("Task %d references unknown tasks: %s", task.id, unresolved)
                dependencies.add(UNRESOLVED_DEPENDENCY_ID)
            resolved[task.id] = frozenset(dependencies)
        return resolved


class ExplicitReferenceDependencyResolver:
    """Infer edges only from explicit id references such as ``after #2, #3``."""

    def resolve(self, tasks: Sequence[Task]) -> dict[int, frozenset[int]]:
        resolved: dict[int, frozenset[int]] = {}
        for task in tasks:
            dependencies: set[int] = set()
            for match in _EXPLICIT_REFERENCE_RE.finditer(task.description):
                dependencies.update(int(value) for value in _TASK_ID_RE.findall(match.group(1)))
            resolved[task.id] = frozenset(dependencies)
        return resolved


def build_dependency_resolver(mode: str) -> DependencyResolver:
    """Map a configured dependency mode to a resolver instance."""

    normalized = mode.strip().lower()
    if normalized == "substring":
        return SubstringDependencyResolver()
    if normalized == "explicit":
        return ExplicitReferenceDependencyResolver()
    raise ValueError(
        f"Unsupported dependency mode: {mode!r}. Expected one of: {', '.join(DEPENDENCY_MODES)}",
    )


def plan_tasks(
    raw_text: str,
    *,
    resolver: DependencyResolver | None = None,
    self_dependency: str = "allow",
) -> list[Task]:
    """Split raw text into tasks, one per non-blank line, with dependency edges."""

    if self_dependency not in SELF_DEPENDENCY_POLICIES:
        raise ValueError(
            f"Unsupported self-dependency policy: {self_dependency!r}. "
            f"Expected one of: {', '.join(SELF_DEPENDENCY_POLICIES)}",
        )

    # Only "\n" ends a line; strip() drops a trailing "\r".
    drafts = [
        Task(id=index + 1, description=line.strip())
        for index, line in enumerate(raw_text.split("\n"))
        if line.strip()
    ]
    if not drafts:
        return []

    edges = (resolver or SubstringDependencyResolver()).resolve(drafts)
    tasks = [replace(draft, dependencies=edges.get(draft.id, frozenset())) for draft in drafts]

    self_dependent = [task.id for task in tasks if task.id in task.dependencies]
    if self_dependent:
        if self_dependency == "reject":
            ids = ", ".join(str(task_id) for task_id in self_dependent)
            raise PlanValidationError(f"Tasks depend on themselves: {ids}")
        logger.warning("Self-dependent tasks will stay blocked: %s", self_dependent)

    logger.debug(
        "Planned %d task(s) with %d dependency edge(s)",
        len(tasks),
        sum(len(task.dependencies) for task in tasks),
    )
    return tasks
