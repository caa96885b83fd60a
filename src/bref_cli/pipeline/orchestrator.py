"""Sequential execution of external-command stages."""

from __future__ import annotations

import time
from typing import Callable, Optional, Sequence

from ..errors import CommandFailed, ExtractionError, PipelineCancelled, ToolNotFound
from ..facts import FactSet, extract
from ..process import ProcessHandle, ProcessRunner, ProgressTicker, RunState
from ..utils.logging import get_logger
from .models import PipelineResult, Stage, StageRecord, StageStatus

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL = 0.1


class PipelineOrchestrator:
    """
    Runs stages one after another and threads extracted facts between them.

    Each stage goes Pending -> ToolCheck -> Running -> Succeeded/Failed. The
    first failure aborts the pipeline; later stages never start. The polling
    loop here is the only place that sleeps.
    """

    def __init__(
        self,
        runner: Optional[ProcessRunner] = None,
        ticker: Optional[ProgressTicker] = None,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.runner = runner or ProcessRunner()
        self.ticker = ticker or ProgressTicker()
        self.poll_interval = poll_interval
        self._sleep = sleep
        self.last_result: Optional[PipelineResult] = None

    def run(self, stages: Sequence[Stage], facts: Optional[FactSet] = None) -> PipelineResult:
        result = PipelineResult(
            facts=facts if facts is not None else FactSet(),
            records=[StageRecord(name=stage.name) for stage in stages],
        )
        self.last_result = result
        for stage, record in zip(stages, result.records):
            if result.active is not None:
                # A still-running ready stage must be the last one.
                raise ValueError(
                    f"Stage '{stage.name}' follows a long-running stage"
                )
            handle = self._run_stage(stage, record, result.facts)
            if handle.running:
                result.active = handle
            else:
                self.runner.release(handle)
            if stage.rules:
                stdout, stderr = self.runner.captured_output(handle)
                try:
                    extracted = extract(stdout + "\n" + stderr, stage.rules)
                except ExtractionError as exc:
                    record.status = StageStatus.FAILED
                    record.error = str(exc)
                    self._abandon(result)
                    raise
                result.facts = result.facts.merged(extracted)
                logger.debug("Stage %s facts: %s", stage.name, dict(extracted))
            logger.info("✓ %s", stage.name)
        return result

    def wait(self, handle: ProcessHandle, label: str = "") -> int:
        """Keep polling a running process until it exits or the user interrupts.

        Output produced while waiting is dropped as it arrives.
        """

        def exited(state: RunState) -> bool:
            handle.discard_output()
            return not state.is_running

        handle.discard_output()
        try:
            state = self._poll_until(handle, exited, label)
        except KeyboardInterrupt:
            self.runner.terminate(handle)
            self.runner.release(handle)
            return handle.exit_code if handle.exit_code is not None else -1
        self.runner.release(handle)
        return state.exit_code if state.exit_code is not None else -1

    def _run_stage(self, stage: Stage, record: StageRecord, facts: FactSet) -> ProcessHandle:
        record.status = StageStatus.TOOL_CHECK
        if stage.tool and not self.runner.is_available(stage.tool):
            record.status = StageStatus.FAILED
            record.error = f"tool '{stage.tool}' not found"
            raise ToolNotFound(stage.tool)

        spec = stage.build(facts)
        record.command = spec.display()
        logger.debug("Stage %s: %s", stage.name, record.command)
        try:
            handle = self.runner.start(spec)
        except ToolNotFound as exc:
            record.status = StageStatus.FAILED
            record.error = str(exc)
            raise
        record.status = StageStatus.RUNNING

        def completed(state: RunState) -> bool:
            stdout, stderr = self.runner.captured_output(handle)
            return stage.completion(state, stdout, stderr) or not state.is_running

        try:
            state = self._poll_until(handle, completed, stage.display_label)
        except KeyboardInterrupt:
            self.runner.terminate(handle)
            self.runner.release(handle)
            record.status = StageStatus.FAILED
            record.error = "cancelled"
            raise PipelineCancelled(stage.name) from None

        stdout, stderr = self.runner.captured_output(handle)
        if not stage.completion(state, stdout, stderr):
            # Exited before the stage's completion condition held.
            exit_code = state.exit_code if state.exit_code is not None else -1
            record.status = StageStatus.FAILED
            record.exit_code = exit_code
            self.runner.release(handle)
            raise CommandFailed(stage.name, exit_code, stderr)

        record.status = StageStatus.SUCCEEDED
        record.exit_code = state.exit_code
        return handle

    def _poll_until(
        self,
        handle: ProcessHandle,
        done: Callable[[RunState], bool],
        label: str,
    ) -> RunState:
        try:
            while True:
                state = self.runner.poll(handle)
                if done(state):
                    return state
                self.ticker.tick(label)
                self._sleep(self.poll_interval)
        finally:
            self.ticker.clear()

    def _abandon(self, result: PipelineResult) -> None:
        if result.active is not None:
            self.runner.terminate(result.active)
            self.runner.release(result.active)
            result.active = None

