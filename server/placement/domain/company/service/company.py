import logging
from datetime import date
from typing import Any
from uuid import uuid4

import pydantic

from placement.domain.company.event import CompanyChanged
from placement.domain.company.model.aggregate import Company
from placement.domain.company.model.value import Attribution, CompanyId, WorkMode
from placement.domain.company.port.repository import CompanyRepository
from placement.domain.shared.error import ConflictError, NotFoundError, ValidationError
from placement.domain.shared.event import EventId
from placement.domain.shared.outbox import Outbox
from placement.domain.shared.port.clock import Clock
from placement.domain.shared.service import Service

logger = logging.getLogger(__name__)

_REQUIRED_TEXT = (
    ("name", "Company name is required"),
    ("description", "Description is required"),
    ("website", "Website is required"),
    ("address", "Address is required"),
    ("contact_email", "Email is required"),
)


def _dedupe(values: list[Any]) -> list[Any]:
    return list(dict.fromkeys(values))


def check_profile(company: Company) -> None:
    """Raise ValidationError for the first profile rule the company breaks."""
    for field, message in _REQUIRED_TEXT:
        if not getattr(company, field).strip():
            raise ValidationError(message, field=field)
    if not company.fields_of_work:
        raise ValidationError("At least one field is required", field="fields_of_work")
    if not company.skills_required:
        raise ValidationError("At least one skill is required", field="skills_required")
    if not company.mode_of_work:
        raise ValidationError("At least one mode of work is required", field="mode_of_work")
    if company.moa_present:
        if company.moa_validity_years is None:
            raise ValidationError("MOA validity period is required", field="moa_validity_years")
        if company.moa_start_date is None:
            raise ValidationError("MOA start date is required", field="moa_start_date")


def _normalize(changes: dict[str, Any]) -> dict[str, Any]:
    out = dict(changes)
    for key in ("fields_of_work", "skills_required"):
        if key in out:
            out[key] = _dedupe([v.strip() for v in out[key] if v.strip()])
    if "mode_of_work" in out:
        out["mode_of_work"] = _dedupe([WorkMode(m) for m in out["mode_of_work"]])
    return out


class CompanyService(Service):
    companies: CompanyRepository
    outbox: Outbox
    clock: Clock

    async def create(
        self,
        profile: dict[str, Any],
        created_by: Attribution | None = None,
    ) -> Company:
        now = self.clock.now()
        fields = _normalize(profile)
        fields.setdefault("moa_present", True)
        try:
            company = Company(
                id=CompanyId(uuid4().hex[:20]),
                created_at=now,
                updated_at=now,
                created_by=created_by,
                **fields,
            )
        except pydantic.ValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(p) for p in first["loc"]) or None
            raise ValidationError(first["msg"], field=field) from e
        check_profile(company)

        await self.companies.add(company)
        await self._changed(company, "created")
        logger.info(f"Company {company.id} created")
        return company

    async def get(self, company_id: CompanyId) -> Company:
        company = await self.companies.get(company_id)
        if company is None:
            raise NotFoundError(f"Company not found: {company_id}")
        return company

    async def list(self) -> list[Company]:
        return await self.companies.list()

    async def update(
        self,
        company_id: CompanyId,
        changes: dict[str, Any],
        expected_version: int,
    ) -> Company:
        company = await self.get(company_id)
        self._check_version(company, expected_version)

        changes = _normalize(changes)
        check_profile(company.model_copy(update=changes))
        if changes.get("moa_validity_years") is not None and changes["moa_validity_years"] < 1:
            raise ValidationError("MOA validity must be at least one year", "moa_validity_years")

        changed = company.apply_changes(changes, self.clock.now())
        if not changed:
            return company

        await self.companies.save(company, expected_version=expected_version)
        await self._changed(company, "updated")
        logger.info(f"Company {company.id} updated: {changed}")
        return company

    async def renew_moa(
        self,
        company_id: CompanyId,
        expected_version: int | None = None,
        start: date | None = None,
    ) -> Company:
        company = await self.get(company_id)
        if expected_version is not None:
            self._check_version(company, expected_version)
        previous = company.version

        company.renew_moa(start or self.clock.today(), self.clock.now())
        await self.companies.save(company, expected_version=previous)
        await self._changed(company, "moa_renewed")
        logger.info(f"Company {company.id} MOA renewed until {company.moa_expiration_date}")
        return company

    def _check_version(self, company: Company, expected_version: int) -> None:
        if company.version != expected_version:
            raise ConflictError(
                f"Company {company.id} was modified (version {company.version}, "
                f"expected {expected_version})"
            )

    async def _changed(self, company: Company, reason: str) -> None:
        await self.outbox.append(
            CompanyChanged(id=EventId(uuid4()), company_id=company.id, reason=reason)
        )
