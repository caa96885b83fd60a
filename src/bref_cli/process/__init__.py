"""External process execution and progress display."""

from .runner import CommandSpec, ProcessHandle, ProcessRunner, RunState
from .ticker import ProgressTicker

__all__ = ["CommandSpec", "ProcessHandle", "ProcessRunner", "RunState", "ProgressTicker"]
