"""Dishka integration that opens a Scope.UOW container per HTTP request."""

from dishka import AsyncContainer
from fastapi import FastAPI
from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Send
from starlette.types import Scope as AsgiScope

from placement.util.di.scope import Scope


class UowContainerMiddleware:
    """Like dishka's starlette ContainerMiddleware, but entering Scope.UOW.

    The UOW scope owns the database session, which commits when the scope closes.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: AsgiScope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        request = Request(scope, receive=receive, send=send)
        async with request.app.state.dishka_container(scope=Scope.UOW) as request_container:
            request.state.dishka_container = request_container
            return await self.app(scope, receive, send)


def setup_dishka(container: AsyncContainer, app: FastAPI) -> None:
    app.add_middleware(UowContainerMiddleware)
    app.state.dishka_container = container
