"""Console rendering of deployment diagnostics."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .diagnostics import IncidentReport


def _hours(report: IncidentReport) -> str:
    hours = report.window.total_seconds() / 3600
    return f"{hours:g} hour" + ("" if hours == 1 else "s")


def render_report(
    report: IncidentReport,
    console: Optional[Console] = None,
    link: Optional[str] = None,
) -> None:
    console = console or Console()

    console.print(f"\n[bold]Stack:[/bold] {escape(report.stack_name)}")
    if report.stack_status:
        style = "red" if "FAILED" in report.stack_status or "ROLLBACK" in report.stack_status else "green"
        console.print(f"[bold]Status:[/bold] [{style}]{report.stack_status}[/{style}]")
    if report.region:
        console.print(f"[bold]Region:[/bold] {report.region}")

    if report.is_empty:
        console.print(f"\nNo deployment activity in the last {_hours(report)}.")
    else:
        table = Table(title=f"Events in the last {_hours(report)}", show_lines=False)
        table.add_column("Time (UTC)", no_wrap=True)
        table.add_column("Resource")
        table.add_column("Status")
        table.add_column("Reason", overflow="fold")
        for event in report.events:
            status = f"[red]{event.resource_status}[/red]" if event.is_failure else event.resource_status
            resource = event.resource_type
            if event.logical_resource_id:
                resource += f" ({event.logical_resource_id})"
            table.add_row(
                event.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                resource,
                status,
                escape(event.status_reason or ""),
            )
        console.print(table)

        if report.has_failures:
            console.print(f"\n[bold red]❌ {len(report.failures)} error(s):[/bold red]")
            for event in report.failures:
                reason = escape(event.status_reason or "(no reason given)")
                console.print(f"  • {event.resource_type}: {reason}")
        else:
            console.print("\n✅ No errors found")

    if report.outputs:
        outputs = Table(title="Stack outputs")
        outputs.add_column("Key", no_wrap=True)
        outputs.add_column("Value", overflow="fold")
        outputs.add_column("Description")
        for output in report.outputs:
            outputs.add_row(escape(output.key), escape(output.value or ""), escape(output.description or ""))
        console.print(outputs)

    if link:
        console.print(f"\n🔗 {link}")
