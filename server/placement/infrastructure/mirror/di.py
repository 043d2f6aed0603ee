"""DI provider for the mirror store."""

from typing import AsyncIterable, NewType

import httpx
from dishka import provide

from placement.config import Config
from placement.domain.company.port.mirror import MirrorStore
from placement.infrastructure.mirror.http import HttpMirrorStore
from placement.infrastructure.persistence.repository.mirror import SQLMirrorStore
from placement.infrastructure.persistence.session import SerializedSession
from placement.util.di.base import Provider
from placement.util.di.scope import Scope

MirrorHttpClient = NewType("MirrorHttpClient", httpx.AsyncClient)


class MirrorProvider(Provider):
    """Selects the mirror backend named in ``config.mirror.backend``."""

    @provide(scope=Scope.APP)
    async def get_mirror_http_client(self, config: Config) -> AsyncIterable[MirrorHttpClient]:
        client = httpx.AsyncClient(timeout=config.mirror.timeout)
        yield MirrorHttpClient(client)
        await client.aclose()

    @provide(scope=Scope.UOW)
    def get_mirror_store(
        self,
        config: Config,
        client: MirrorHttpClient,
        session: SerializedSession,
    ) -> MirrorStore:
        if config.mirror.backend == "http":
            return HttpMirrorStore(config=config.mirror, client=client)
        return SQLMirrorStore(session)
