from dishka import Provider as DishkaProvider

from placement.util.di.scope import Scope


class Provider(DishkaProvider):
    """Base for all providers. Dependencies default to unit-of-work scope."""

    scope = Scope.UOW
