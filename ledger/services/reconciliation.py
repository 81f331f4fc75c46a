"""Reconciliation service: replays treasury history against cached balances"""

import logging
from decimal import Decimal

from fastapi import Depends
from sqlalchemy.orm import Session

from ledger.errors.common import NotFoundError
from ledger.models.treasury import Treasury
from ledger.models.treasury_transaction import (
    TreasuryTransaction,
    TreasuryTransactionSource,
)
from ledger.schemas.reconciliation import (
    ReconciliationMismatchSchema,
    TreasuryReconciliationSchema,
)
from ledger.uow import get_uow

logger = logging.getLogger(__name__)


class ReconciliationService:
    def __init__(self, db: Session = Depends(get_uow)):
        self.db = db

    def reconcile(self, treasury_id: int) -> TreasuryReconciliationSchema:
        treasury = self.db.query(Treasury).filter(Treasury.id == treasury_id).first()
        if treasury is None:
            raise NotFoundError(f"Treasury id={treasury_id}")
        return self._replay(treasury)

    def reconcile_all(self) -> list[TreasuryReconciliationSchema]:
        treasuries = self.db.query(Treasury).order_by(Treasury.id).all()
        return [self._replay(treasury) for treasury in treasuries]

    def _replay(self, treasury: Treasury) -> TreasuryReconciliationSchema:
        """
        Walk the history in id order starting from zero. Ids are assigned inside
        the treasury critical section, so they follow write order even when the
        clock does not.

        A treasury is consistent when every stored balance_before/balance_after
        matches the replay, the replay ends at the cached balance, and the
        cached balance equals the opening balance plus all other entries.
        Entries written while the replay runs may show up as a mismatch; run
        it again before acting on one.
        """
        entries = (
            self.db.query(TreasuryTransaction)
            .filter(TreasuryTransaction.treasury_id == treasury.id)
            .order_by(TreasuryTransaction.id.asc())
            .all()
        )
        running = Decimal(0)
        movements = Decimal(0)
        mismatches = []
        for entry in entries:
            expected_before = running
            running += entry.signed_amount
            if entry.source != TreasuryTransactionSource.OPENING_BALANCE:
                movements += entry.signed_amount
            if entry.balance_before != expected_before or entry.balance_after != running:
                mismatches.append(
                    ReconciliationMismatchSchema(
                        transaction_id=entry.id,
                        stored_balance_before=entry.balance_before,
                        expected_balance_before=expected_before,
                        stored_balance_after=entry.balance_after,
                        expected_balance_after=running,
                    )
                )

        consistent = (
            not mismatches
            and running == treasury.balance
            and treasury.opening_balance + movements == treasury.balance
        )
        if not consistent:
            logger.error(
                "Treasury id=%s is inconsistent: cached=%s replayed=%s mismatches=%d",
                treasury.id,
                treasury.balance,
                running,
                len(mismatches),
            )
        return TreasuryReconciliationSchema(
            treasury_id=treasury.id,
            name=treasury.name,
            opening_balance=treasury.opening_balance,
            cached_balance=treasury.balance,
            replayed_balance=running,
            transaction_count=len(entries),
            consistent=consistent,
            mismatches=mismatches,
        )
