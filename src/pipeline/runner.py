# src/pipeline/runner.py — v2
"""Pipeline runner — drive stages in order with timing and failure handling.

Each stage is a coroutine ``(state) -> state``. The runner times every
enabled stage, records a StageResult, and stops at the first exception:
the failing stage is marked failed, the rest are reported as skipped, and
the error is kept on the RunResult for the caller to surface.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from jekyllbuild.ci.actions import end_group, start_group
from jekyllbuild.core.errors import InstallFailure
from jekyllbuild.core.models import StageResult
from jekyllbuild.logging.context import set_run_context, set_stage_context
from jekyllbuild.pipeline.state import PipelineState

logger = logging.getLogger(__name__)

StageFn = Callable[[PipelineState], Awaitable[PipelineState]]


def _always(state: PipelineState) -> bool:
    return True


@dataclass(frozen=True)
class Stage:
    """A named pipeline step with an optional enabling predicate."""

    name: str
    run: StageFn
    enabled: Callable[[PipelineState], bool] = _always


@dataclass
class RunResult:
    """Result of a full pipeline run."""

    state: PipelineState
    success: bool = True
    error: BaseException | None = None
    stage_results: list[StageResult] = field(default_factory=list)
    skipped_stages: list[str] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def executed_stages(self) -> list[str]:
        return [r.name for r in self.stage_results]


class PipelineRunner:
    """Execute stages strictly in sequence."""

    def __init__(self, stages: list[Stage]) -> None:
        self._stages = stages

    async def run(self, state: PipelineState) -> RunResult:
        """Run every enabled stage against ``state``.

        Returns:
            RunResult with the final state and per-stage timings.
        """
        start_ns = time.monotonic_ns()
        result = RunResult(state=state)
        set_run_context(state.run_id)

        for idx, stage in enumerate(self._stages):
            if not stage.enabled(state):
                logger.debug("Stage '%s' disabled, skipping", stage.name)
                continue

            set_stage_context(stage.name)
            start_group(stage.name)
            stage_start = time.monotonic_ns()
            try:
                state = await stage.run(state)
            except Exception as exc:
                elapsed = (time.monotonic_ns() - stage_start) // 1_000_000
                result.stage_results.append(
                    StageResult(name=stage.name, duration_ms=elapsed, failed=True)
                )
                if isinstance(exc, InstallFailure):
                    state = state.model_copy(update={"install_failed": True})
                logger.error("Stage '%s' failed after %dms: %s", stage.name, elapsed, exc)
                result.success = False
                result.error = exc
                result.skipped_stages = [
                    s.name for s in self._stages[idx + 1 :] if s.enabled(state)
                ]
                break
            else:
                elapsed = (time.monotonic_ns() - stage_start) // 1_000_000
                result.stage_results.append(
                    StageResult(name=stage.name, duration_ms=elapsed)
                )
                logger.info("%s took %dms", stage.name, elapsed)
            finally:
                end_group()
                set_stage_context(None)

        result.state = state
        result.duration_ms = (time.monotonic_ns() - start_ns) // 1_000_000
        logger.info(
            "Pipeline %s: %d stage(s) run, %d skipped, %dms",
            "complete" if result.success else "failed",
            len(result.stage_results),
            len(result.skipped_stages),
            result.duration_ms,
        )
        return result
