"""Reconcile command - run a full reconciliation pass on the server."""

import sys

import cyclopts

from placement.cli.client import call
from placement.cli.console import get_console

app = cyclopts.App(name="reconcile", help="Re-evaluate every company now")


@app.default
def reconcile() -> None:
    """Run a full reconciliation pass and print its report."""
    console = get_console()
    report = call("POST", "/reconcile")

    console.print(f"[bold]Checked:[/bold] {report['checked']}")
    console.print(f"[bold]Updated:[/bold] {report['updated']}")
    console.print(f"[bold]Mirror pushes requested:[/bold] {report['mirror_requested']}")
    console.print(f"[bold]Orphaned projections:[/bold] {report['orphans']}")

    failures = report.get("failures", [])
    if failures:
        console.table(failures, [("company_id", "Company"), ("error", "Error")], title="Failures")
        sys.exit(2)
    console.success("Reconciliation complete")
