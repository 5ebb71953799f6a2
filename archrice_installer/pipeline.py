from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from .cleanup import CleanupGuard
from .context import InstallationContext, InstallPhase

logger = logging.getLogger(__name__)


class Step(Protocol):
    """One phase of the install. Reaching ``reaches`` means it completed."""

    step_id: str
    reaches: InstallPhase

    def run(self, ctx: InstallationContext) -> InstallationContext:
        ...


@dataclass(frozen=True)
class PipelineResult:
    phase: InstallPhase
    ran_steps: List[str]
    failed_step: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.phase is InstallPhase.SUCCESS


def run_pipeline(
    *,
    ctx: InstallationContext,
    steps: Sequence[Step],
    guard: Optional[CleanupGuard] = None,
) -> PipelineResult:
    """Run steps in order, stopping at the first failure.

    Cleanup runs once on the way out whatever happened, including
    interruption by a signal.
    """

    exe = ctx.execution
    ran: List[str] = []
    guard = guard if guard is not None else CleanupGuard(ctx)

    with guard:
        try:
            for step in steps:
                exe.current_step = step.step_id
                logger.info("Running step %s", step.step_id)
                ctx = step.run(ctx)
                exe.advance(step.reaches)
                exe.completed_steps.append(step.step_id)
                ran.append(step.step_id)
        except Exception as e:
            failed = exe.current_step
            logger.error("Step %s failed: %s", failed, e)
            logger.debug("Failure detail", exc_info=True)
            exe.errors.append({"step": failed, "error": str(e), "kind": type(e).__name__})
            exe.advance(InstallPhase.FAILED)
            result = PipelineResult(phase=exe.phase, ran_steps=ran, failed_step=failed, error=e)
        else:
            exe.current_step = None
            exe.advance(InstallPhase.SUCCESS)
            result = PipelineResult(phase=exe.phase, ran_steps=ran)
    return result
