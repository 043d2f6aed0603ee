"""Unit tests for the HTTP mirror adapter, against an httpx mock transport."""

import json
from datetime import UTC, datetime

import httpx
import pytest

from placement.config import MirrorConfig
from placement.domain.company.model.value import CompanyId, MirrorProjection
from placement.domain.shared.error import PermissionDeniedError, SyncFailure
from placement.infrastructure.mirror.http import (
    HttpMirrorStore,
    projection_from_wire,
    projection_to_wire,
)

UPDATED = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)

PROJECTION = MirrorProjection(
    name="Acme", moa_present=True, moa_validity_years=2, updated_at=UPDATED
)

WIRE = {
    "companyName": "Acme",
    "moa": "Yes",
    "moaValidityYears": 2,
    "updatedAt": "2024-06-01T12:00:00+00:00",
}


class FakeTree:
    """Minimal JSON tree server recording each request."""

    def __init__(self, tree: dict | None = None, status: int | None = None) -> None:
        self.tree = tree or {}
        self.status = status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status is not None:
            return httpx.Response(self.status, json={"error": "nope"})

        parts = request.url.path.removesuffix(".json").strip("/").split("/")
        key = parts[1] if len(parts) > 1 else None

        if request.method == "GET":
            if key is None:
                if request.url.params.get("shallow") == "true":
                    return httpx.Response(200, json={k: True for k in self.tree} or None)
                return httpx.Response(200, json=self.tree or None)
            return httpx.Response(200, json=self.tree.get(key))
        if request.method == "PUT":
            self.tree[key] = json.loads(request.content)
            return httpx.Response(200, json=self.tree[key])
        if request.method == "DELETE":
            self.tree.pop(key, None)
            return httpx.Response(200, json=None)
        return httpx.Response(405)


def make_store(server: FakeTree, auth_token: str = "") -> HttpMirrorStore:
    config = MirrorConfig(
        backend="http", url="https://mirror.test/", path="/companies/", auth_token=auth_token
    )
    client = httpx.AsyncClient(transport=httpx.MockTransport(server))
    return HttpMirrorStore(config, client)


class TestWireFormat:
    def test_encode(self):
        assert projection_to_wire(PROJECTION) == WIRE

    def test_decode(self):
        assert projection_from_wire(WIRE) == PROJECTION

    def test_no_moa_encodes_as_no(self):
        projection = PROJECTION.model_copy(
            update={"moa_present": False, "moa_validity_years": None}
        )
        assert projection_to_wire(projection)["moa"] == "No"

    @pytest.mark.parametrize("data", [None, "junk", {"moa": "Yes"}, {**WIRE, "updatedAt": "x"}])
    def test_unparseable_entries_are_absent(self, data):
        assert projection_from_wire(data) is None


class TestHttpMirrorStore:
    async def test_put_then_get(self):
        server = FakeTree()
        store = make_store(server)

        await store.put(CompanyId("co-1"), PROJECTION)

        assert server.tree == {"co-1": WIRE}
        assert server.requests[0].url.path == "/companies/co-1.json"
        assert await store.get(CompanyId("co-1")) == PROJECTION

    async def test_get_missing(self):
        store = make_store(FakeTree())
        assert await store.get(CompanyId("co-1")) is None

    async def test_get_many_filters_requested_ids(self):
        server = FakeTree({"co-1": WIRE, "co-2": WIRE, "co-3": {"bad": 1}})
        store = make_store(server)

        found = await store.get_many([CompanyId("co-1"), CompanyId("co-3"), CompanyId("co-9")])

        assert found == {"co-1": PROJECTION}
        assert len(server.requests) == 1

    async def test_get_many_of_nothing_makes_no_request(self):
        server = FakeTree()
        assert await make_store(server).get_many([]) == {}
        assert server.requests == []

    async def test_delete(self):
        server = FakeTree({"co-1": WIRE})
        store = make_store(server)

        await store.delete(CompanyId("co-1"))

        assert server.tree == {}

    async def test_list_ids_uses_shallow_listing(self):
        server = FakeTree({"co-1": WIRE, "co-2": WIRE})

        ids = await make_store(server).list_ids()

        assert ids == {"co-1", "co-2"}
        assert server.requests[0].url.params["shallow"] == "true"

    async def test_list_ids_of_empty_tree(self):
        assert await make_store(FakeTree()).list_ids() == set()

    async def test_auth_token_sent_as_query_param(self):
        server = FakeTree()

        await make_store(server, auth_token="secret").get(CompanyId("co-1"))

        assert server.requests[0].url.params["auth"] == "secret"

    @pytest.mark.parametrize("status", [401, 403])
    async def test_rejected_credentials(self, status):
        store = make_store(FakeTree(status=status))

        with pytest.raises(PermissionDeniedError) as exc:
            await store.put(CompanyId("co-1"), PROJECTION)

        assert "auth token" in exc.value.hint

    async def test_server_error_is_sync_failure(self):
        store = make_store(FakeTree(status=503))

        with pytest.raises(SyncFailure, match="503"):
            await store.put(CompanyId("co-1"), PROJECTION)

    async def test_unreachable_is_sync_failure(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        config = MirrorConfig(backend="http", url="https://mirror.test")
        store = HttpMirrorStore(config, httpx.AsyncClient(transport=httpx.MockTransport(refuse)))

        with pytest.raises(SyncFailure, match="unreachable"):
            await store.get(CompanyId("co-1"))
