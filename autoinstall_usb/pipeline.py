from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from .context import RunContext
from .errors import InstallerError

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single stage of the run."""

    step_id: str
    title: str

    def run(self, ctx: RunContext) -> RunContext:
        ...


@dataclass(frozen=True)
class PipelineResult:
    ctx: RunContext
    ran_steps: List[str]


def run_pipeline(
    *,
    ctx: RunContext,
    steps: Sequence[Step],
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps in order; the first failure aborts the run.

    Errors leaving a step are tagged with its title so the operator sees which
    stage failed.
    """

    ran: List[str] = []

    for step in steps:
        logger.info("Running step %s", step.step_id)
        try:
            ctx = step.run(ctx)
        except InstallerError as e:
            if e.step is None:
                e.step = step.title
            raise
        except OSError as e:
            raise InstallerError(str(e), step=step.title) from e
        ran.append(step.step_id)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    return PipelineResult(ctx=ctx, ran_steps=ran)
