"""Serve command - run the API server and background workers in the foreground."""

import os
import sys
from pathlib import Path

import cyclopts
import uvicorn

from placement.cli.console import get_console

app = cyclopts.App(name="serve", help="Run the placement server")


@app.default
def serve(
    host: str = "127.0.0.1",
    port: int = 8000,
    config: Path | None = None,
) -> None:
    """Run the server.

    Args:
        host: Host to bind to.
        port: Port to listen on.
        config: YAML config file (sets PLACEMENT_CONFIG_FILE).
    """
    console = get_console()
    if config is not None:
        if not config.exists():
            console.error(f"Config file not found: {config}")
            sys.exit(1)
        os.environ["PLACEMENT_CONFIG_FILE"] = str(config.resolve())

    console.info(f"Serving on http://{host}:{port}")
    uvicorn.run(
        "placement.application.api.rest.app:create_app",
        factory=True,
        host=host,
        port=port,
        log_config=None,
    )
