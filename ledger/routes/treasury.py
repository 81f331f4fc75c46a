"""API routes for Treasury manipulation"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from ledger.middlewares.token import get_actor_from_token
from ledger.schemas.base import PaginationSchema
from ledger.schemas.reconciliation import TreasuryReconciliationSchema
from ledger.schemas.stats import TreasuryBalanceTotalsSchema, TreasuryFlowSchema
from ledger.schemas.treasury import (
    TreasuryCreateSchema,
    TreasuryFiltersSchema,
    TreasurySchema,
    TreasuryUpdateSchema,
)
from ledger.services.reconciliation import ReconciliationService
from ledger.services.stats import StatsService
from ledger.services.treasury import TreasuryService

treasury_router = APIRouter(prefix="/treasuries", tags=["Treasuries"])


@treasury_router.post("", response_model=TreasurySchema)
def create_treasury(
    treasury: TreasuryCreateSchema,
    service: TreasuryService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return service.create(treasury, actor=actor)


# static paths go before /{treasury_id}
@treasury_router.get("/stats", response_model=TreasuryBalanceTotalsSchema)
def read_treasury_stats(
    include_inactive: bool = False,
    stats_service: StatsService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return stats_service.get_balance_totals(include_inactive=include_inactive)


@treasury_router.get("/stats/flow", response_model=TreasuryFlowSchema)
def read_treasury_flow(
    timeframe_from: Optional[date] = None,
    timeframe_to: Optional[date] = None,
    stats_service: StatsService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return stats_service.get_flow(timeframe_from, timeframe_to)


@treasury_router.get(
    "/reconciliation", response_model=list[TreasuryReconciliationSchema]
)
def reconcile_treasuries(
    service: ReconciliationService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return service.reconcile_all()


@treasury_router.get("/{treasury_id}", response_model=TreasurySchema)
def read_treasury(
    treasury_id: int,
    service: TreasuryService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return service.get(treasury_id)


@treasury_router.get("", response_model=PaginationSchema[TreasurySchema])
def read_treasuries(
    filters: TreasuryFiltersSchema = Depends(),
    skip: int = 0,
    limit: int = 100,
    service: TreasuryService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return service.get_all(filters, skip, limit)


@treasury_router.patch("/{treasury_id}", response_model=TreasurySchema)
def update_treasury(
    treasury_id: int,
    treasury_update: TreasuryUpdateSchema,
    service: TreasuryService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return service.update(treasury_id, treasury_update)


@treasury_router.post("/{treasury_id}/deactivate", response_model=TreasurySchema)
def deactivate_treasury(
    treasury_id: int,
    service: TreasuryService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return service.deactivate(treasury_id)


@treasury_router.post("/{treasury_id}/activate", response_model=TreasurySchema)
def activate_treasury(
    treasury_id: int,
    service: TreasuryService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return service.activate(treasury_id)


@treasury_router.delete("/{treasury_id}")
def delete_treasury(
    treasury_id: int,
    service: TreasuryService = Depends(),
    actor: str = Depends(get_actor_from_token),
) -> int:
    return service.delete(treasury_id)


@treasury_router.get(
    "/{treasury_id}/reconciliation", response_model=TreasuryReconciliationSchema
)
def reconcile_treasury(
    treasury_id: int,
    service: ReconciliationService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return service.reconcile(treasury_id)
