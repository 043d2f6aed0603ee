"""Main CLI application using Cyclopts.

The CLI is a thin HTTP client over the REST API, except for ``serve``,
which runs the server itself.
"""

import cyclopts

from placement.cli.commands import archive, companies, reconcile, serve

app = cyclopts.App(
    name="placement",
    help="Placement records - MOA lifecycle, mirror sync and archive",
)

app.command(serve.app, name="serve")
app.command(companies.app, name="companies")
app.command(reconcile.app, name="reconcile")
app.command(archive.app, name="archive")
