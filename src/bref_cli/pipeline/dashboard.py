"""Stages that stand up the local Bref dashboard for a deployed stage."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..facts import SERVERLESS_INFO_RULES, FactSet
from ..process import CommandSpec
from .models import Stage, exited_ok, marker_seen

DEFAULT_IMAGE = "bref/dashboard"
DEFAULT_PORT = 8000
DEFAULT_READY_MARKER = "Dashboard started"


@dataclass(frozen=True)
class DashboardOptions:
    stage: str = "dev"
    profile: Optional[str] = None
    image: str = DEFAULT_IMAGE
    port: int = DEFAULT_PORT
    ready_marker: str = DEFAULT_READY_MARKER
    aws_dir: Optional[str] = None  # mounted read-only for credentials
    cwd: Optional[str] = None

    @property
    def url(self) -> str:
        return f"http://localhost:{self.port}"


def build_dashboard_stages(options: DashboardOptions) -> List[Stage]:
    """info -> pull -> run; the run stage keeps going until cancelled."""

    def info(facts: FactSet) -> CommandSpec:
        args = ["info", "--stage", options.stage]
        if options.profile:
            args += ["--aws-profile", options.profile]
        return CommandSpec("serverless", tuple(args), cwd=options.cwd)

    def pull(facts: FactSet) -> CommandSpec:
        return CommandSpec("docker", ("pull", options.image))

    def run(facts: FactSet) -> CommandSpec:
        args = [
            "run", "--rm",
            "-p", f"{options.port}:8000",
            "--env", f"STAGE={facts['stage']}",
            "--env", f"AWS_REGION={facts['region']}",
        ]
        if options.aws_dir:
            args += ["-v", f"{options.aws_dir}:/root/.aws:ro"]
        if options.profile:
            args += ["--env", f"AWS_PROFILE={options.profile}"]
        if "stack" in facts:
            args += ["--env", f"STACK_NAME={facts['stack']}"]
        args.append(options.image)
        return CommandSpec("docker", tuple(args), unbounded=True)

    return [
        Stage(
            name="info",
            tool="serverless",
            build=info,
            rules=SERVERLESS_INFO_RULES,
            completion=exited_ok(),
            label=f"Retrieving the '{options.stage}' deployment...",
        ),
        Stage(
            name="pull",
            tool="docker",
            build=pull,
            completion=exited_ok(),
            label=f"Pulling {options.image}...",
        ),
        Stage(
            name="run",
            tool="docker",
            build=run,
            completion=marker_seen(options.ready_marker),
            label="Starting the dashboard...",
        ),
    ]
