"""HTTP helpers shared by CLI commands."""

import os
import sys
import time
from collections.abc import Callable
from typing import Any

import httpx

from placement.cli.console import get_console


def get_server_url() -> str:
    return os.environ.get("PLACEMENT_SERVER", "http://localhost:8000").rstrip("/")


def with_retry[T](
    fn: Callable[[], T],
    retries: int = 3,
    exceptions: tuple[type[Exception], ...] = (Exception,),
) -> T:
    """Retry ``fn`` on transient errors with linear backoff (0.2, 0.4, 0.6s)."""
    last_error: Exception | None = None
    for attempt in range(retries + 1):
        try:
            return fn()
        except exceptions as e:
            last_error = e
            if attempt < retries:
                time.sleep(0.2 * (attempt + 1))
    raise last_error  # type: ignore[misc]


def call(method: str, path: str, **kwargs: Any) -> Any:
    """Call the API and return the decoded JSON body.

    Prints the server's error (with its hint, if any) and exits with
    status 1 on failure.
    """
    console = get_console()
    server_url = get_server_url()
    url = f"{server_url}/api/v1{path}"

    try:
        response = with_retry(
            lambda: httpx.request(method, url, timeout=60.0, **kwargs),
            exceptions=(httpx.ReadError, httpx.ConnectError),
        )
    except httpx.ConnectError:
        console.error(
            f"Could not connect to server at {server_url}",
            hint="Is the server running? Start it with: placement serve",
        )
        sys.exit(1)

    if response.is_error:
        try:
            detail = response.json()
        except ValueError:
            detail = {"message": response.text}
        if "detail" in detail and isinstance(detail["detail"], (str, list)):
            detail = {"message": str(detail["detail"])}
        console.error(
            f"{response.status_code}: {detail.get('message', response.reason_phrase)}",
            hint=detail.get("hint"),
        )
        sys.exit(1)

    return response.json()
