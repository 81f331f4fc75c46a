"""API routes for postings, transfers and the treasury transaction log"""

from fastapi import APIRouter, Depends

from ledger.middlewares.token import get_actor_from_token
from ledger.schemas.base import PageSchema
from ledger.schemas.treasury_transaction import (
    PostingCreateSchema,
    PostingResultSchema,
    TransferCreateSchema,
    TransferResultSchema,
    TreasuryTransactionFiltersSchema,
    TreasuryTransactionSchema,
)
from ledger.services.posting import PostingService
from ledger.services.transfer import TransferService
from ledger.services.treasury_transaction import TreasuryTransactionService

treasury_transaction_router = APIRouter(
    prefix="/treasury-transactions", tags=["Treasury transactions"]
)


@treasury_transaction_router.post("", response_model=PostingResultSchema)
def create_posting(
    posting: PostingCreateSchema,
    posting_service: PostingService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return posting_service.post(actor=actor, **posting.dump())


@treasury_transaction_router.post("/transfer", response_model=TransferResultSchema)
def create_transfer(
    transfer: TransferCreateSchema,
    transfer_service: TransferService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return transfer_service.transfer(actor=actor, **transfer.dump())


@treasury_transaction_router.get(
    "/transfer/{pair_id}", response_model=TransferResultSchema
)
def read_transfer(
    pair_id: str,
    transfer_service: TransferService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return transfer_service.get_pair(pair_id)


@treasury_transaction_router.get(
    "/{transaction_id}", response_model=TreasuryTransactionSchema
)
def read_treasury_transaction(
    transaction_id: int,
    service: TreasuryTransactionService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return service.get(transaction_id)


@treasury_transaction_router.get(
    "", response_model=PageSchema[TreasuryTransactionSchema]
)
def read_treasury_transactions(
    filters: TreasuryTransactionFiltersSchema = Depends(),
    page: int = 1,
    limit: int = 50,
    service: TreasuryTransactionService = Depends(),
    actor: str = Depends(get_actor_from_token),
):
    return service.get_all(filters, page, limit)
