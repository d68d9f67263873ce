"""Post-run correction pass for simulated worker failures."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from nexus_swarm.orchestrator.models import TaskResult, WorkerRole

logger = logging.getLogger(__name__)

FAILURE_MARKER = "failed"
RETRY_PREFIX = "Retry succeeded after adjustment: "


@dataclass(slots=True)
class CorrectionDecision:
    """Decision returned by correction policy."""

    should_correct: bool
    reason: str


def decide_correction(result: TaskResult) -> CorrectionDecision:
    """Correct results whose summary carries the exact-case failure marker."""

    if result.worker == WorkerRole.SELF_CORRECTOR:
        return CorrectionDecision(should_correct=False, reason="Result already corrected.")
    if FAILURE_MARKER not in result.summary:
        return CorrectionDecision(
            should_correct=False,
            reason="Summary does not report a failure.",
        )
    return CorrectionDecision(should_correct=True, reason="One adjusted retry is recorded.")


def self_correct(results: Iterable[TaskResult]) -> list[TaskResult]:
    """Replace failed results with retry markers; other results pass through.

    Corrected summaries still embed the original text, so corrected results
    are recognized by their worker tag and running the pass on its own output
    changes nothing.
    """

    corrected: list[TaskResult] = []
    for result in results:
        decision = decide_correction(result)
        if not decision.should_correct:
            corrected.append(result)
            continue
        logger.info("Self-correcting task %d: %s", result.id, decision.reason)
        corrected.append(
            TaskResult(
                id=result.id,
                summary=f"{RETRY_PREFIX}{result.summary}",
                worker=WorkerRole.SELF_CORRECTOR,
            ),
        )
    return corrected
