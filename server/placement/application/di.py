from dishka import AsyncContainer, from_context, make_async_container

from placement.config import Config
from placement.domain.archive.util.di import ArchiveProvider
from placement.domain.company.util.di import CompanyProvider
from placement.infrastructure.event.di import EventProvider
from placement.infrastructure.mirror.di import MirrorProvider
from placement.infrastructure.persistence.di import PersistenceProvider
from placement.util.di.base import Provider
from placement.util.di.scope import Scope


class ContextProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)


def create_container(config: Config | None = None) -> AsyncContainer:
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    return make_async_container(
        ContextProvider(),
        PersistenceProvider(),
        MirrorProvider(),
        EventProvider(),
        CompanyProvider(),
        ArchiveProvider(),
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
