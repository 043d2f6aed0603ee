"""Error hierarchy for the placement server.

Error layers:
- PlacementError: Base class for all placement errors
- DomainError: Business rule violations, validation failures (4xx responses)
- InfrastructureError: Store and network failures (503 responses)

These errors are mapped to HTTP responses by the global exception handler in app.py.
"""


class PlacementError(Exception):
    """Base class for all placement errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (business logic violations - typically 4xx)
# =============================================================================


class DomainError(PlacementError):
    """Base class for domain/business errors."""


class NotFoundError(DomainError):
    """Record or archive entry not found."""


class ValidationError(DomainError):
    """Input validation failed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class InvalidStateError(DomainError):
    """Operation not allowed in current state."""


class ConflictError(DomainError):
    """Version token mismatch or id already taken."""


class PermissionDeniedError(DomainError):
    """A store rejected the caller's credentials."""

    def __init__(
        self,
        message: str,
        hint: str = "Sign in again and retry the operation.",
    ) -> None:
        super().__init__(message, code="PERMISSION_DENIED")
        self.hint = hint


# =============================================================================
# Infrastructure Errors (system-level failures - typically 503)
# =============================================================================


class InfrastructureError(PlacementError):
    """Base class for infrastructure/system errors."""


class StorageUnavailableError(InfrastructureError):
    """Primary or archive store is unreachable."""


class SyncFailure(InfrastructureError):
    """Derived-field write-back or mirror push failed."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
