"""Dependency injection scopes."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """Hierarchy: APP -> UOW

    - APP: Application lifetime (singletons)
    - UOW: Unit of work (one HTTP request, one worker poll, one scheduled run)
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
