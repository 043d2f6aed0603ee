from enum import StrEnum

from pydantic import computed_field

from placement.domain.shared.model.value import ValueObject


class EntityKind(StrEnum):
    """Record kinds that can be archived. Each has its own primary and archive collection."""

    COMPANIES = "companies"
    STUDENTS = "students"
    ADMINS = "admins"
    REQUIREMENTS = "requirements"

    @property
    def label(self) -> str:
        return {
            EntityKind.COMPANIES: "Company",
            EntityKind.STUDENTS: "Student",
            EntityKind.ADMINS: "Admin",
            EntityKind.REQUIREMENTS: "Requirement",
        }[self]


class ArchiveFailure(ValueObject):
    id: str
    code: str
    message: str


class ArchiveBatchResult(ValueObject):
    kind: EntityKind
    succeeded: int
    archived: list[str]
    failures: list[ArchiveFailure]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def partial(self) -> bool:
        """Some, but not all, of the requested records were archived."""
        return self.succeeded > 0 and bool(self.failures)
