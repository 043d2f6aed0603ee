from placement.util.di.base import Provider
from placement.util.di.scope import Scope

__all__ = ["Provider", "Scope"]
