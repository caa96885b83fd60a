"""Test doubles shared by the pipeline and CLI tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Set, Tuple

from bref_cli.errors import ToolNotFound
from bref_cli.process import CommandSpec, ProcessHandle, RunState

# (stdout chunk, stderr chunk, exit code or None while still running)
Step = Tuple[str, str, Optional[int]]


class FakeRunner:
    """Replays scripted output per command, keyed by (executable, first arg)."""

    def __init__(
        self,
        scripts: Dict[Tuple[str, str], Sequence[Step]],
        available: Optional[Set[str]] = None,
    ) -> None:
        self.scripts = {key: list(steps) for key, steps in scripts.items()}
        self.available = available if available is not None else {"serverless", "docker"}
        self.started: List[CommandSpec] = []
        self.terminated: List[CommandSpec] = []
        self.released: List[CommandSpec] = []

    @staticmethod
    def key(spec: CommandSpec) -> Tuple[str, str]:
        return spec.executable, spec.args[0] if spec.args else ""

    def is_available(self, tool: str) -> bool:
        return tool in self.available

    def start(self, spec: CommandSpec) -> ProcessHandle:
        if spec.executable not in self.available:
            raise ToolNotFound(spec.executable)
        self.started.append(spec)
        return ProcessHandle(spec=spec)

    def poll(self, handle: ProcessHandle) -> RunState:
        if not handle.running:
            return RunState.exited(handle.exit_code)
        steps = self.scripts.get(self.key(handle.spec), [])
        if not steps:
            return RunState.running()
        out, err, code = steps.pop(0)
        if out:
            handle.append("stdout", out.encode("utf-8"))
        if err:
            handle.append("stderr", err.encode("utf-8"))
        if code is None:
            return RunState.running()
        handle.finish(code)
        return RunState.exited(code)

    def captured_output(self, handle: ProcessHandle) -> Tuple[str, str]:
        return handle.stdout, handle.stderr

    def terminate(self, handle: ProcessHandle) -> None:
        self.terminated.append(handle.spec)
        handle.finish(-15)

    def release(self, handle: ProcessHandle) -> None:
        self.released.append(handle.spec)

    def started_keys(self) -> List[Tuple[str, str]]:
        return [self.key(spec) for spec in self.started]


class RecordingTicker:
    def __init__(self) -> None:
        self.labels: List[str] = []
        self.cleared = 0

    def tick(self, label: str) -> None:
        self.labels.append(label)

    def clear(self) -> None:
        self.cleared += 1


INFO_OUTPUT = """Service Information
service: app
stage: prod
region: us-east-1
stack: app-prod
endpoints:
  ANY - https://abc123.execute-api.us-east-1.amazonaws.com/prod
functions:
  api: app-prod-api
"""


NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def stack_event(hours_ago, status, resource="AWS::Lambda::Function", reason=None):
    payload = {
        "Timestamp": NOW - timedelta(hours=hours_ago),
        "ResourceType": resource,
        "ResourceStatus": status,
        "LogicalResourceId": resource.split("::")[-1],
    }
    if reason:
        payload["ResourceStatusReason"] = reason
    return payload


class FakePaginator:
    def __init__(self, pages, error=None):
        self.pages = pages
        self.error = error
        self.calls = []

    def paginate(self, StackName):
        self.calls.append(StackName)
        if self.error:
            raise self.error
        return iter(self.pages)


class FakeCloudFormation:
    def __init__(self, events=None, pages=None, stack=None, error=None, events_error=None):
        if pages is None:
            pages = [{"StackEvents": events or []}]
        self.paginator = FakePaginator(pages, events_error)
        self.stack = stack if stack is not None else {
            "StackName": "app-prod",
            "StackId": "arn:aws:cloudformation:us-east-1:123:stack/app-prod/abc",
            "StackStatus": "UPDATE_COMPLETE",
        }
        self.error = error

    def describe_stacks(self, StackName):
        if self.error:
            raise self.error
        return {"Stacks": [self.stack] if self.stack else []}

    def get_paginator(self, name):
        assert name == "describe_stack_events"
        return self.paginator
