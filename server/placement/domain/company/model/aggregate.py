from datetime import date, datetime
from typing import Any

from pydantic import Field, field_validator, model_validator

from placement.domain.company.model.value import (
    Attribution,
    CompanyId,
    MirrorProjection,
    MoaStatus,
    WorkMode,
    add_years,
)
from placement.domain.shared.error import InvalidStateError
from placement.domain.shared.model.aggregate import Aggregate

# Fields a caller may edit. Status and visibility are owned by the synchronizer.
EDITABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "address",
        "contact_email",
        "website",
        "fields_of_work",
        "skills_required",
        "mode_of_work",
        "moa_present",
        "moa_validity_years",
        "moa_start_date",
    }
)


class Company(Aggregate):
    id: CompanyId
    name: str
    description: str = ""
    address: str = ""
    contact_email: str = ""
    website: str = ""
    fields_of_work: list[str] = Field(default_factory=list)
    skills_required: list[str] = Field(default_factory=list)
    mode_of_work: list[WorkMode] = Field(default_factory=list)
    # Legacy rows without an MOA flag load as "no MOA"
    moa_present: bool = False
    moa_validity_years: int | None = Field(default=None, gt=0)
    moa_start_date: date | None = None
    moa_expiration_date: date | None = None
    moa_status: MoaStatus = MoaStatus.NO_MOA
    visible_to_mobile: bool = False
    created_at: datetime
    updated_at: datetime
    created_by: Attribution | None = None
    version: int = Field(default=1, ge=1)

    @field_validator("mode_of_work")
    @classmethod
    def _unique_modes(cls, modes: list[WorkMode]) -> list[WorkMode]:
        """Modes are a set of tags, kept in first-seen order so stored documents are stable."""
        return list(dict.fromkeys(modes))

    @model_validator(mode="after")
    def _derive_expiration(self) -> "Company":
        self._recompute_expiration()
        return self

    def _recompute_expiration(self) -> None:
        if self.moa_start_date is not None and self.moa_validity_years is not None:
            self.moa_expiration_date = add_years(self.moa_start_date, self.moa_validity_years)
        else:
            self.moa_expiration_date = None

    def _touch(self, now: datetime) -> None:
        self.updated_at = now
        self.version += 1

    def apply_changes(self, changes: dict[str, Any], now: datetime) -> list[str]:
        """Apply caller-owned field edits. Returns the names of fields that changed."""
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise InvalidStateError(f"Fields are not editable: {sorted(unknown)}")

        changed = [name for name, value in changes.items() if getattr(self, name) != value]
        if not changed:
            return []

        for name in changed:
            setattr(self, name, changes[name])
        self._recompute_expiration()
        self._touch(now)
        return changed

    def renew_moa(self, today: date, now: datetime) -> None:
        """Restart the MOA today, keeping the current validity period (default one year)."""
        self.moa_present = True
        self.moa_validity_years = self.moa_validity_years or 1
        self.moa_start_date = today
        self._recompute_expiration()
        self._touch(now)

    def apply_evaluation(self, status: MoaStatus) -> list[str]:
        """Write synchronizer-derived fields. Returns what changed; never bumps version."""
        changed: list[str] = []
        if self.moa_status != status:
            self.moa_status = status
            changed.append("moa_status")
        if self.visible_to_mobile != status.visible:
            self.visible_to_mobile = status.visible
            changed.append("visible_to_mobile")
        return changed

    def projection(self) -> MirrorProjection:
        return MirrorProjection(
            name=self.name,
            moa_present=self.moa_present,
            moa_validity_years=self.moa_validity_years,
            updated_at=self.updated_at,
        )
