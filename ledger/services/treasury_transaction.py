"""Treasury transaction read service: statements and audit listings"""

import math
from datetime import datetime, time, timedelta

from fastapi import Depends
from sqlalchemy.orm import Query, Session

from ledger.errors.common import LedgerValidationError
from ledger.models.treasury_transaction import TreasuryTransaction
from ledger.schemas.base import PageSchema
from ledger.schemas.treasury_transaction import TreasuryTransactionFiltersSchema
from ledger.services.base import BaseService
from ledger.uow import get_uow

MAX_PAGE_SIZE = 500


class TreasuryTransactionService(BaseService[TreasuryTransaction]):
    """
    Read path over the transaction log.

    Every row carries the `balance_after` stored when it was written, which is
    the running balance of the whole treasury history at that point. Filters
    only select rows, they never recompute that value for the filtered subset.
    """

    model = TreasuryTransaction

    def __init__(self, db: Session = Depends(get_uow)):
        self.db = db

    def create(self, schema, overrides: dict = {}):
        raise NotImplementedError("Use PostingService or TransferService")

    def update(self, obj_id, schema, overrides: dict = {}):
        raise NotImplementedError("Treasury transactions are immutable")

    def delete(self, obj_id):
        raise NotImplementedError("Treasury transactions are immutable")

    def _apply_filters(  # type: ignore[override]
        self,
        query: Query[TreasuryTransaction],
        filters: TreasuryTransactionFiltersSchema,
    ) -> Query[TreasuryTransaction]:
        if filters.treasury_id is not None:
            query = query.filter(self.model.treasury_id == filters.treasury_id)
        if filters.type is not None:
            query = query.filter(self.model.type == filters.type)
        if filters.source is not None:
            query = query.filter(self.model.source == filters.source)
        if filters.pair_id is not None:
            query = query.filter(self.model.pair_id == filters.pair_id)
        if filters.start_date is not None:
            query = query.filter(
                self.model.created_at >= datetime.combine(filters.start_date, time.min)
            )
        if filters.end_date is not None:
            end = datetime.combine(filters.end_date + timedelta(days=1), time.min)
            query = query.filter(self.model.created_at < end)
        return query

    def get_all(  # type: ignore[override]
        self,
        filters: TreasuryTransactionFiltersSchema | None = None,
        page: int = 1,
        limit: int = 50,
    ) -> PageSchema[TreasuryTransaction]:
        if page < 1:
            raise LedgerValidationError(f"page={page} must be at least 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise LedgerValidationError(
                f"limit={limit} must be between 1 and {MAX_PAGE_SIZE}"
            )
        if (
            filters is not None
            and filters.start_date is not None
            and filters.end_date is not None
            and filters.start_date > filters.end_date
        ):
            raise LedgerValidationError("start_date must not be after end_date")

        query = self.db.query(self.model)
        if filters:
            query = self._apply_filters(query, filters)
        total = query.count()
        items = (
            query.order_by(self.model.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return PageSchema[TreasuryTransaction](
            items=items,
            total=total,
            page=page,
            limit=limit,
            pages=math.ceil(total / limit),
        )
