from __future__ import annotations

import logging
from dataclasses import dataclass
from string import Template
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from .errors import InstallerError
from .install_config import InstallConfig
from .lib.command import CommandRunner
from .state_store import mark_step_completed, record_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstallCtx:
    """Everything a step may read. Steps hand results forward through state.

    Template and host id are loaded before the first step so that bad input
    fails before the disk is touched.
    """

    config: InstallConfig
    device_name: Optional[str]
    runner: CommandRunner
    template: Template
    host_id: str
    ask: Callable[[str], str] = input
    script_path: str = ""
    dry_run: bool = False


class Step(Protocol):
    """A single install step. Raises InstallerError to abort the run."""

    step_id: str

    def run(self, ctx: InstallCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]
    failed_step: Optional[str] = None
    error: Optional[InstallerError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def run_pipeline(
    *,
    ctx: InstallCtx,
    state: Dict[str, Any],
    steps: Sequence[Step],
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps in order, stopping at the first failure.

    Nothing is retried or rolled back; whatever the failed step left behind
    stays on disk.
    """

    ran: List[str] = []

    for step in steps:
        state.setdefault("execution", {})["current_step"] = step.step_id
        logger.debug("Running step %s", step.step_id)

        try:
            state = step.run(ctx, state)
        except InstallerError as e:
            record_error(state, step.step_id, e)
            return PipelineResult(state=state, ran_steps=ran, failed_step=step.step_id, error=e)

        mark_step_completed(state, step.step_id)
        ran.append(step.step_id)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran)
