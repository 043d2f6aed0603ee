"""Companies command - list companies with their MOA status."""

import cyclopts

from placement.cli.client import call
from placement.cli.console import get_console

app = cyclopts.App(name="companies", help="List companies and MOA status")


@app.default
def companies(status: str | None = None) -> None:
    """List active companies.

    Args:
        status: Only show companies in this MOA status
            (valid, expiring-soon, expired, no-moa).
    """
    console = get_console()
    params = {"status": status} if status else {}
    data = call("GET", "/companies", params=params)

    summary = data.get("moa_summary", {})
    console.print(
        "  ".join(f"[cyan]{name}[/cyan] {count}" for name, count in summary.items())
    )
    if not data["items"]:
        console.info("No companies found")
        return

    rows = [
        {
            "id": c["id"],
            "name": c["name"],
            "status": c["moa_status"],
            "expires": c.get("moa_expiration_date") or "",
            "version": c["version"],
        }
        for c in data["items"]
    ]
    console.table(
        rows,
        [
            ("id", "ID"),
            ("name", "Name"),
            ("status", "MOA"),
            ("expires", "Expires"),
            ("version", "Version"),
        ],
    )
