"""Data models for the stage pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Sequence

from ..facts import ExtractionRule, FactSet
from ..process import CommandSpec, ProcessHandle, RunState

# (state, stdout, stderr) -> stage has completed successfully
CompletionPredicate = Callable[[RunState, str, str], bool]


class StageStatus(Enum):
    PENDING = "pending"
    TOOL_CHECK = "tool_check"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def exited_ok() -> CompletionPredicate:
    """Short-lived stage: done once the process exits with code 0."""

    def predicate(state: RunState, stdout: str, stderr: str) -> bool:
        return state.ok

    return predicate


def marker_seen(marker: str) -> CompletionPredicate:
    """Long-running stage: ready once ``marker`` shows up in its output.

    The process may keep running. A log line that happens to contain the
    marker counts too; there is no stronger readiness signal to wait on.
    """

    def predicate(state: RunState, stdout: str, stderr: str) -> bool:
        return marker in stdout or marker in stderr

    return predicate


@dataclass
class Stage:
    """One external-command step of a pipeline."""

    name: str
    build: Callable[[FactSet], CommandSpec]
    tool: Optional[str] = None
    rules: Sequence[ExtractionRule] = ()
    completion: CompletionPredicate = field(default_factory=exited_ok)
    label: Optional[str] = None  # text shown next to the progress ticker

    @property
    def display_label(self) -> str:
        return self.label or f"Running {self.name}..."


@dataclass
class StageRecord:
    """What happened to a stage during a run."""

    name: str
    status: StageStatus = StageStatus.PENDING
    command: Optional[str] = None
    exit_code: Optional[int] = None
    error: Optional[str] = None


@dataclass
class PipelineResult:
    facts: FactSet
    records: List[StageRecord] = field(default_factory=list)
    # Handle of a stage that became ready but is still running.
    active: Optional[ProcessHandle] = None

    def record(self, name: str) -> Optional[StageRecord]:
        for record in self.records:
            if record.name == name:
                return record
        return None
