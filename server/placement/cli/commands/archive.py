"""Archive commands - inspect and restore archived records."""

import json

import cyclopts

from placement.cli.client import call
from placement.cli.console import get_console, relative_time

app = cyclopts.App(name="archive", help="Archived records")


@app.command(name="list")
def list_archived(kind: str = "companies") -> None:
    """List archived records, most recently archived first.

    Args:
        kind: companies, students, admins or requirements.
    """
    console = get_console()
    data = call("GET", f"/archive/{kind}")
    if not data["items"]:
        console.info(f"No archived {kind}")
        return

    rows = [
        {
            "id": e["id"],
            "name": e["snapshot"].get("name", ""),
            "by": e["deleted_by_role"],
            "when": relative_time(e["deleted_at"]),
        }
        for e in data["items"]
    ]
    console.table(
        rows,
        [("id", "ID"), ("name", "Name"), ("by", "Archived by"), ("when", "Archived")],
        title=f"Archived {kind} ({data['total']})",
    )


@app.command
def show(record_id: str, /, kind: str = "companies") -> None:
    """Show an archived record's snapshot.

    Args:
        record_id: Id of the archived record.
        kind: companies, students, admins or requirements.
    """
    console = get_console()
    entry = call("GET", f"/archive/{kind}/{record_id}")["entry"]
    console.panel(
        json.dumps(entry["snapshot"], indent=2, sort_keys=True),
        title=f"{kind}/{entry['id']} archived by {entry['deleted_by_role']}",
    )


@app.command
def restore(record_id: str, /, kind: str = "companies") -> None:
    """Move an archived record back into the active store.

    Args:
        record_id: Id of the archived record.
        kind: companies, students, admins or requirements.
    """
    console = get_console()
    call("POST", f"/archive/{kind}/{record_id}/restore")
    console.success(f"Restored {kind}/{record_id}")
