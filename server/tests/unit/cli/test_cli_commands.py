"""CLI commands against a stubbed HTTP layer."""

from datetime import UTC, datetime, timedelta

import httpx
import pytest

from placement.cli import client
from placement.cli.commands import archive, reconcile
from placement.cli.console import relative_time


class StubServer:
    def __init__(self, responses: dict[tuple[str, str], httpx.Response]) -> None:
        self.responses = responses
        self.calls: list[tuple[str, str]] = []

    def __call__(self, method: str, url: str, **kwargs) -> httpx.Response:
        path = url.split("/api/v1", 1)[1]
        self.calls.append((method, path))
        response = self.responses[(method, path)]
        response.request = httpx.Request(method, url)
        return response


@pytest.fixture
def server(monkeypatch):
    def install(responses):
        stub = StubServer(responses)
        monkeypatch.setattr(client.httpx, "request", stub)
        return stub

    return install


REPORT = {"checked": 3, "updated": 1, "mirror_requested": 1, "orphans": 0, "failures": []}


class TestReconcile:
    def test_prints_report(self, server, capsys):
        server({("POST", "/reconcile"): httpx.Response(200, json=REPORT)})

        reconcile.reconcile()

        out = capsys.readouterr().out
        assert "Checked: 3" in out
        assert "Reconciliation complete" in out

    def test_failures_exit_nonzero(self, server):
        failing = {**REPORT, "failures": [{"company_id": "co-1", "error": "db down"}]}
        server({("POST", "/reconcile"): httpx.Response(200, json=failing)})

        with pytest.raises(SystemExit) as exc:
            reconcile.reconcile()

        assert exc.value.code == 2


class TestArchiveCommands:
    def test_restore(self, server, capsys):
        stub = server(
            {("POST", "/archive/companies/co-1/restore"): httpx.Response(200, json={})}
        )

        archive.restore("co-1")

        assert stub.calls == [("POST", "/archive/companies/co-1/restore")]
        assert "Restored companies/co-1" in capsys.readouterr().out

    def test_server_error_shows_hint_and_exits(self, server, capsys):
        server(
            {
                ("POST", "/archive/companies/co-1/restore"): httpx.Response(
                    403,
                    json={"code": "PERMISSION_DENIED", "message": "denied", "hint": "Sign in"},
                )
            }
        )

        with pytest.raises(SystemExit) as exc:
            archive.restore("co-1")

        assert exc.value.code == 1
        err = capsys.readouterr().err
        assert "403: denied" in err
        assert "Sign in" in err

    def test_unreachable_server(self, monkeypatch, capsys):
        def refuse(method, url, **kwargs):
            raise httpx.ConnectError("refused")

        monkeypatch.setattr(client.httpx, "request", refuse)
        monkeypatch.setattr(client.time, "sleep", lambda _: None)

        with pytest.raises(SystemExit):
            archive.restore("co-1")

        assert "Could not connect" in capsys.readouterr().err


class TestRelativeTime:
    def test_recent(self):
        assert relative_time(datetime.now(UTC).isoformat()) == "just now"

    def test_hours(self):
        stamp = (datetime.now(UTC) - timedelta(hours=3, minutes=5)).isoformat()
        assert relative_time(stamp) == "3 hours ago"

    def test_unparseable_passes_through(self):
        assert relative_time("yesterday") == "yesterday"


def test_server_url_from_env(monkeypatch):
    monkeypatch.setenv("PLACEMENT_SERVER", "http://records.test:9000/")

    assert client.get_server_url() == "http://records.test:9000"
