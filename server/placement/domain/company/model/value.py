from calendar import isleap
from datetime import date, datetime
from enum import StrEnum
from typing import NewType

from placement.domain.shared.model.value import ValueObject

CompanyId = NewType("CompanyId", str)


class MoaStatus(StrEnum):
    VALID = "valid"
    EXPIRING_SOON = "expiring-soon"
    EXPIRED = "expired"
    NO_MOA = "no-moa"

    @property
    def visible(self) -> bool:
        """Whether a company in this status is shown to the mobile client."""
        return self in (MoaStatus.VALID, MoaStatus.EXPIRING_SOON)


class WorkMode(StrEnum):
    ON_SITE = "On-site"
    REMOTE = "Remote"
    HYBRID = "Hybrid"


class Attribution(ValueObject):
    """Who created a record, snapshotted at creation time."""

    username: str
    role: str


class MirrorProjection(ValueObject):
    """The subset of a company the mobile client reads from the mirror store."""

    name: str
    moa_present: bool
    moa_validity_years: int | None = None
    updated_at: datetime


def add_years(start: date, years: int) -> date:
    """Calendar-add whole years. Feb 29 rolls forward to Mar 1 in non-leap years."""
    target = start.year + years
    if start.month == 2 and start.day == 29 and not isleap(target):
        return date(target, 3, 1)
    return start.replace(year=target)
