"""HTTP adapter for the MirrorStore port.

Talks to a JSON tree over REST in the Firebase Realtime Database style:
``GET/PUT/DELETE {base}/{path}/{id}.json``, with ``?shallow=true`` to list
keys and an optional ``auth`` query parameter.
"""

import logging
from collections.abc import Iterable
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from placement.config import MirrorConfig
from placement.domain.company.model.value import CompanyId, MirrorProjection
from placement.domain.company.port.mirror import MirrorStore
from placement.domain.shared.error import PermissionDeniedError, SyncFailure

logger = logging.getLogger(__name__)


def projection_to_wire(projection: MirrorProjection) -> dict[str, Any]:
    """Encode a projection in the shape the mobile client reads."""
    return {
        "companyName": projection.name,
        "moa": "Yes" if projection.moa_present else "No",
        "moaValidityYears": projection.moa_validity_years,
        "updatedAt": projection.updated_at.isoformat(),
    }


def projection_from_wire(data: Any) -> MirrorProjection | None:
    """Decode a mirror entry. Entries that do not parse are treated as absent."""
    if not isinstance(data, dict):
        return None
    try:
        return MirrorProjection(
            name=data["companyName"],
            moa_present=data.get("moa") == "Yes",
            moa_validity_years=data.get("moaValidityYears"),
            updated_at=data["updatedAt"],
        )
    except (KeyError, PydanticValidationError):
        return None


class HttpMirrorStore(MirrorStore):
    def __init__(self, config: MirrorConfig, client: httpx.AsyncClient) -> None:
        self._base = f"{config.url.rstrip('/')}/{config.path.strip('/')}"
        self._auth = config.auth_token
        self._http = client

    def _params(self, **extra: str) -> dict[str, str]:
        params = dict(extra)
        if self._auth:
            params["auth"] = self._auth
        return params

    async def _request(
        self, method: str, url: str, params: dict[str, str], json: Any = None
    ) -> Any:
        try:
            response = await self._http.request(method, url, params=params, json=json)
        except httpx.RequestError as e:
            logger.warning(f"Mirror {method} {url} failed: {e}")
            raise SyncFailure(f"Mirror store unreachable: {e}") from e

        if response.status_code in (401, 403):
            raise PermissionDeniedError(
                f"Mirror store refused {method} ({response.status_code})",
                hint="Check the mirror auth token and its write rules.",
            )
        if response.status_code >= 400:
            logger.error(
                "Mirror %s %s failed: status=%d, body=%s",
                method,
                url,
                response.status_code,
                response.text,
            )
            raise SyncFailure(f"Mirror store returned {response.status_code} for {method}")
        return response.json() if response.content else None

    async def get(self, company_id: CompanyId) -> MirrorProjection | None:
        data = await self._request("GET", f"{self._base}/{company_id}.json", self._params())
        return projection_from_wire(data)

    async def get_many(self, company_ids: Iterable[CompanyId]) -> dict[CompanyId, MirrorProjection]:
        wanted = set(company_ids)
        if not wanted:
            return {}
        tree = await self._request("GET", f"{self._base}.json", self._params()) or {}
        found: dict[CompanyId, MirrorProjection] = {}
        for key, value in tree.items():
            if key not in wanted:
                continue
            projection = projection_from_wire(value)
            if projection is not None:
                found[CompanyId(key)] = projection
        return found

    async def put(self, company_id: CompanyId, projection: MirrorProjection) -> None:
        await self._request(
            "PUT",
            f"{self._base}/{company_id}.json",
            self._params(),
            json=projection_to_wire(projection),
        )

    async def delete(self, company_id: CompanyId) -> None:
        await self._request("DELETE", f"{self._base}/{company_id}.json", self._params())

    async def list_ids(self) -> set[CompanyId]:
        tree = await self._request("GET", f"{self._base}.json", self._params(shallow="true"))
        return {CompanyId(key) for key in (tree or {})}
