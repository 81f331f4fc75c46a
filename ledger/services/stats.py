"""Stats service"""

import calendar
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ledger.errors.common import LedgerValidationError
from ledger.models.base import utcnow
from ledger.models.treasury import Treasury, TreasuryType
from ledger.models.treasury_transaction import (
    TreasuryTransaction,
    TreasuryTransactionSource,
    TreasuryTransactionType,
)
from ledger.schemas.stats import (
    TreasuryBalanceTotalsSchema,
    TreasuryFlowDirectionSchema,
    TreasuryFlowItemSchema,
    TreasuryFlowSchema,
    TreasuryTypeTotalSchema,
)
from ledger.services.posting import CENT
from ledger.uow import get_uow


class StatsService:
    def __init__(self, db: Session = Depends(get_uow)):
        self.db = db

    def get_balance_totals(
        self, include_inactive: bool = False
    ) -> TreasuryBalanceTotalsSchema:
        """
        Sum cached treasury balances per treasury type.

        Reads only the `balance` column; re-deriving from the transaction log is
        the job of the reconciliation service.
        """
        query = select(
            Treasury.type,
            func.count(Treasury.id),
            func.sum(Treasury.balance),
        ).group_by(Treasury.type)
        if not include_inactive:
            query = query.where(Treasury.active.is_(True))

        rows = {
            row_type: (count, balance)
            for row_type, count, balance in self.db.execute(query).all()
        }
        by_type = []
        for treasury_type in TreasuryType:
            count, balance = rows.get(treasury_type, (0, None))
            by_type.append(
                TreasuryTypeTotalSchema(
                    type=treasury_type,
                    treasury_count=count,
                    balance=Decimal(str(balance or 0)).quantize(CENT),
                )
            )
        return TreasuryBalanceTotalsSchema(
            by_type=by_type,
            treasury_count=sum(item.treasury_count for item in by_type),
            total_balance=sum(
                (item.balance.to_decimal() for item in by_type), Decimal(0)
            ),
        )

    def get_flow(
        self,
        timeframe_from: date | None = None,
        timeframe_to: date | None = None,
    ) -> TreasuryFlowSchema:
        """
        Deposits and withdrawals per active treasury within a timeframe.

        Defaults to the current calendar month, days are UTC days. Transfers and
        opening balances are left out: they move money around rather than in or out.
        """
        today = utcnow().date()
        if timeframe_from is None:
            timeframe_from = today.replace(day=1)
        if timeframe_to is None:
            last_day = calendar.monthrange(today.year, today.month)[1]
            timeframe_to = today.replace(day=last_day)
        if timeframe_from > timeframe_to:
            raise LedgerValidationError("timeframe_from must not be after timeframe_to")

        start = datetime.combine(timeframe_from, time.min)
        end = datetime.combine(timeframe_to + timedelta(days=1), time.min)

        query = (
            select(
                Treasury.id,
                Treasury.name,
                Treasury.type,
                Treasury.bank_name,
                TreasuryTransaction.type,
                func.sum(TreasuryTransaction.amount),
            )
            .join(TreasuryTransaction, TreasuryTransaction.treasury_id == Treasury.id)
            .where(
                Treasury.active.is_(True),
                TreasuryTransaction.type.in_(
                    [TreasuryTransactionType.DEPOSIT, TreasuryTransactionType.WITHDRAWAL]
                ),
                TreasuryTransaction.source != TreasuryTransactionSource.OPENING_BALANCE,
                TreasuryTransaction.created_at >= start,
                TreasuryTransaction.created_at < end,
            )
            .group_by(
                Treasury.id,
                Treasury.name,
                Treasury.type,
                Treasury.bank_name,
                TreasuryTransaction.type,
            )
            .order_by(Treasury.type, Treasury.name)
        )

        breakdown: dict[TreasuryTransactionType, list[TreasuryFlowItemSchema]] = (
            defaultdict(list)
        )
        for treasury_id, name, treasury_type, bank_name, tx_type, amount in self.db.execute(
            query
        ).all():
            if not amount:
                continue
            if treasury_type == TreasuryType.BANK and bank_name:
                name = f"{name} - {bank_name}"
            breakdown[tx_type].append(
                TreasuryFlowItemSchema(
                    treasury_id=treasury_id,
                    name=name,
                    type=treasury_type,
                    amount=Decimal(str(amount)).quantize(CENT),
                )
            )

        def direction(tx_type: TreasuryTransactionType) -> TreasuryFlowDirectionSchema:
            items = breakdown[tx_type]
            return TreasuryFlowDirectionSchema(
                total=sum((item.amount.to_decimal() for item in items), Decimal(0)),
                breakdown=items,
            )

        return TreasuryFlowSchema(
            timeframe_from=timeframe_from,
            timeframe_to=timeframe_to,
            deposits=direction(TreasuryTransactionType.DEPOSIT),
            withdrawals=direction(TreasuryTransactionType.WITHDRAWAL),
        )
