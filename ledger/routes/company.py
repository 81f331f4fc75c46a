"""API routes for Company manipulation"""

from fastapi import APIRouter, Depends

from ledger.middlewares.token import get_actor_from_token
from ledger.schemas.base import PaginationSchema
from ledger.schemas.company import (
    CompanyCreateSchema,
    CompanyFiltersSchema,
    CompanySchema,
    CompanyUpdateSchema,
)
from ledger.services.company import CompanyService

company_router = APIRouter(prefix="/companies", tags=["Companies"])


@company_router.post("", response_model=CompanySchema)
def create_company(
    company: CompanyCreateSchema,
    service: CompanyService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return service.create(company)


@company_router.get("/{company_id}", response_model=CompanySchema)
def read_company(
    company_id: int,
    service: CompanyService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return service.get(company_id)


@company_router.get("", response_model=PaginationSchema[CompanySchema])
def read_companies(
    filters: CompanyFiltersSchema = Depends(),
    skip: int = 0,
    limit: int = 100,
    service: CompanyService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return service.get_all(filters, skip, limit)


@company_router.patch("/{company_id}", response_model=CompanySchema)
def update_company(
    company_id: int,
    company_update: CompanyUpdateSchema,
    service: CompanyService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return service.update(company_id, company_update)
