"""Command-line interface for bref-cli."""

from __future__ import annotations

import argparse
import json
import sys
import webbrowser
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.prompt import Prompt

from .aws import client_region, create_client
from .config import AppConfig, load_config
from .diagnostics import DeploymentEventAnalyzer
from .errors import BrefCliError, ShortUrlError
from .invoke import FunctionInvoker
from .pipeline import DashboardOptions, PipelineOrchestrator, build_dashboard_stages
from .process import ProcessRunner, ProgressTicker
from .report import render_report
from .scaffold import TEMPLATE_DESCRIPTIONS, ProjectScaffolder
from .shorturl import ShortUrlClient, stack_console_url
from .utils.logging import get_logger, set_level

logger = get_logger(__name__)


@dataclass
class CLIContext:
    """Context captured from CLI arguments."""

    config: AppConfig
    console: Console


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bref",
        description="Create, inspect and debug serverless PHP applications on AWS Lambda.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a JSON config file overriding defaults (default: ./bref.json).",
    )
    parser.add_argument("--profile", default=None, help="AWS credentials profile")
    parser.add_argument("--region", default=None, help="AWS region")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Show debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init", help="Create a new project from a template")
    init_parser.add_argument(
        "--type", "-t", dest="template", choices=sorted(TEMPLATE_DESCRIPTIONS),
        default=None, help="Kind of application (asked interactively if omitted)",
    )
    init_parser.add_argument(
        "--directory", "-d", type=str, default=".",
        help="Directory to create the project in",
    )

    invoke_parser = subparsers.add_parser("invoke", help="Invoke a deployed function")
    invoke_parser.add_argument("function", help="Lambda function name")
    invoke_parser.add_argument(
        "--event", "-e", type=str, default=None,
        help="Event payload as a JSON string",
    )
    invoke_parser.add_argument(
        "--logs", action="store_true", help="Print the tail of the execution logs"
    )

    deployment_parser = subparsers.add_parser(
        "deployment", help="Show recent deployment events and errors of a stack"
    )
    deployment_parser.add_argument("stack", help="CloudFormation stack name")
    deployment_parser.add_argument(
        "--hours", type=float, default=None,
        help="Size of the event window in hours (default: 24)",
    )

    dashboard_parser = subparsers.add_parser(
        "dashboard", help="Run the local dashboard for a deployed stage"
    )
    dashboard_parser.add_argument("--stage", "-s", default="dev", help="Stage to inspect")
    dashboard_parser.add_argument("--port", type=int, default=None, help="Local port")
    dashboard_parser.add_argument("--image", default=None, help="Dashboard Docker image")
    dashboard_parser.add_argument(
        "--no-browser", action="store_true", help="Do not open a browser window"
    )

    return parser


def _build_context(args: argparse.Namespace) -> CLIContext:
    config = load_config(args.config)
    if args.profile:
        config.aws.profile = args.profile
    if args.region:
        config.aws.region = args.region
    set_level("DEBUG" if args.verbose else config.logging.level)
    return CLIContext(config=config, console=Console())


def handle_init_command(args: argparse.Namespace, context: CLIContext) -> int:
    template = args.template
    if template is None:
        for name, description in TEMPLATE_DESCRIPTIONS.items():
            context.console.print(f"  [bold]{name}[/bold]  {description}")
        template = Prompt.ask(
            "What kind of application are you building?",
            choices=list(TEMPLATE_DESCRIPTIONS),
            default="web",
            console=context.console,
        )

    result = ProjectScaffolder(Path(args.directory)).create(template)
    for path in result.files:
        context.console.print(f"  ✓ Created {path}")
    context.console.print(f"\n✅ Project initialized ({TEMPLATE_DESCRIPTIONS[template]})")
    context.console.print("   Deploy it with: serverless deploy")
    return 0


def handle_invoke_command(args: argparse.Namespace, context: CLIContext) -> int:
    event = None
    if args.event:
        try:
            event = json.loads(args.event)
        except json.JSONDecodeError as exc:
            logger.error("❌ --event is not valid JSON: %s", exc)
            return 1

    client = create_client("lambda", context.config.aws)
    invoker = FunctionInvoker(client, region=client_region(client))
    result = invoker.invoke(args.function, event, include_logs=args.logs)

    if result.logs:
        context.console.print(result.logs, markup=False, highlight=False)
    context.console.print_json(data=result.payload)
    return 0


def handle_deployment_command(args: argparse.Namespace, context: CLIContext) -> int:
    hours = args.hours if args.hours is not None else context.config.diagnostics.window_hours
    client = create_client("cloudformation", context.config.aws)
    region = client_region(client)
    analyzer = DeploymentEventAnalyzer(client, region=region)
    report = analyzer.analyze(args.stack, timedelta(hours=hours))

    link = None
    if region and report.stack_id:
        link = stack_console_url(region, report.stack_id)
        short_url = context.config.short_url
        if short_url.endpoint:
            try:
                link = ShortUrlClient(short_url.endpoint, timeout=short_url.timeout).shorten(link)
            except ShortUrlError as exc:
                logger.warning("⚠️ %s, using the full console URL", exc)

    render_report(report, context.console, link=link)
    return 0


def handle_dashboard_command(args: argparse.Namespace, context: CLIContext) -> int:
    dashboard = context.config.dashboard
    options = DashboardOptions(
        stage=args.stage,
        profile=context.config.aws.profile,
        image=args.image or dashboard.image,
        port=args.port or dashboard.port,
        ready_marker=dashboard.ready_marker,
        aws_dir=dashboard.aws_dir,
    )
    orchestrator = PipelineOrchestrator(
        ProcessRunner(),
        ProgressTicker(sys.stderr),
        poll_interval=dashboard.poll_interval,
    )
    result = orchestrator.run(build_dashboard_stages(options))

    facts = result.facts
    context.console.print(
        f"\n✅ Dashboard for stage [bold]{facts['stage']}[/bold] "
        f"({facts['region']}) running at {options.url}"
    )
    if "apiId" in facts:
        context.console.print(f"   API: {facts['apiId']}")
    context.console.print("   Press Ctrl+C to stop.")

    if not args.no_browser:
        webbrowser.open(options.url)

    if result.active is not None:
        code = orchestrator.wait(result.active)
        logger.debug("Dashboard container exited with %s", code)
    return 0


def dispatch_command(args: argparse.Namespace) -> int:
    context = _build_context(args)

    if args.command == "init":
        return handle_init_command(args, context)
    if args.command == "invoke":
        return handle_invoke_command(args, context)
    if args.command == "deployment":
        return handle_deployment_command(args, context)
    if args.command == "dashboard":
        return handle_dashboard_command(args, context)

    raise ValueError(f"Unsupported command: {args.command}")


def run_cli(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return dispatch_command(args)
    except (BrefCliError, FileNotFoundError) as exc:
        logger.error("❌ %s", exc)
        return 1
    except KeyboardInterrupt:
        print("\n   (cancelled)")
        return 130


def app_main() -> None:
    sys.exit(run_cli())
