"""Company REST routes."""

from typing import Any

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Body

from placement.application.api.v1.routes._body import build
from placement.domain.company.command import (
    CompanyCreated,
    CompanyUpdated,
    CreateCompany,
    CreateCompanyHandler,
    MoaRenewed,
    RenewMoa,
    RenewMoaHandler,
    UpdateCompany,
    UpdateCompanyHandler,
)
from placement.domain.company.model.value import CompanyId, MoaStatus
from placement.domain.company.query import (
    CompanyDetail,
    CompanyList,
    GetCompany,
    GetCompanyHandler,
    ListCompanies,
    ListCompaniesHandler,
)

router = APIRouter(prefix="/companies", tags=["Companies"], route_class=DishkaRoute)


@router.post("", response_model=CompanyCreated, status_code=201)
async def create_company(
    body: CreateCompany,
    handler: FromDishka[CreateCompanyHandler],
) -> CompanyCreated:
    return await handler.run(body)


@router.get("", response_model=CompanyList)
async def list_companies(
    handler: FromDishka[ListCompaniesHandler],
    status: MoaStatus | None = None,
) -> CompanyList:
    return await handler.run(ListCompanies(status=status))


@router.get("/{company_id}", response_model=CompanyDetail)
async def get_company(
    company_id: str,
    handler: FromDishka[GetCompanyHandler],
) -> CompanyDetail:
    return await handler.run(GetCompany(id=CompanyId(company_id)))


@router.patch("/{company_id}", response_model=CompanyUpdated)
async def update_company(
    company_id: str,
    body: dict[str, Any],
    handler: FromDishka[UpdateCompanyHandler],
) -> CompanyUpdated:
    return await handler.run(build(UpdateCompany, body, id=company_id))


@router.post("/{company_id}/renew-moa", response_model=MoaRenewed)
async def renew_moa(
    company_id: str,
    handler: FromDishka[RenewMoaHandler],
    body: dict[str, Any] = Body(default_factory=dict),
) -> MoaRenewed:
    return await handler.run(build(RenewMoa, body, id=company_id))
