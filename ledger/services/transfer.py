"""Transfer service: moves money between two treasuries as one atomic unit"""

import logging
from decimal import Decimal
from uuid import uuid4

from fastapi import Depends
from sqlalchemy.orm import Session

from ledger.errors.common import NotFoundError
from ledger.errors.treasury import SameTreasuryTransfer
from ledger.models.treasury_transaction import (
    TreasuryTransaction,
    TreasuryTransactionSource,
    TreasuryTransactionType,
)
from ledger.schemas.treasury_transaction import (
    TransferResultSchema,
    TreasuryTransactionSchema,
)
from ledger.services.posting import PostingService
from ledger.uow import get_uow

logger = logging.getLogger(__name__)


class TransferService:
    def __init__(
        self,
        db: Session = Depends(get_uow),
        posting_service: PostingService = Depends(),
    ):
        self.db = db
        self._posting_service = posting_service

    def transfer(
        self,
        from_treasury_id: int,
        to_treasury_id: int,
        amount: Decimal,
        description: str | None = None,
        actor: str | None = None,
    ) -> TransferResultSchema:
        """
        Withdraw from one treasury and deposit into another.

        Both legs share one pair id and are committed together; if either leg is
        rejected (unknown or inactive treasury, insufficient funds) nothing is written.
        """
        if from_treasury_id == to_treasury_id:
            raise SameTreasuryTransfer(f"Treasury id={from_treasury_id}")
        amount = self._posting_service.validate_amount(amount)
        pair_id = uuid4().hex

        def operation() -> tuple[TreasuryTransaction, TreasuryTransaction]:
            # row locks follow the same ascending order as the process locks
            locked = {
                treasury_id: self._posting_service.lock_treasury(treasury_id)
                for treasury_id in sorted((from_treasury_id, to_treasury_id))
            }
            source = locked[from_treasury_id]
            target = locked[to_treasury_id]
            withdrawal = self._posting_service.append_entry(
                source,
                tx_type=TreasuryTransactionType.TRANSFER,
                source=TreasuryTransactionSource.TRANSFER_OUT,
                amount=amount,
                description=description or f"Transfer to {target.name}",
                actor=actor,
                pair_id=pair_id,
                related_treasury_id=target.id,
            )
            deposit = self._posting_service.append_entry(
                target,
                tx_type=TreasuryTransactionType.TRANSFER,
                source=TreasuryTransactionSource.TRANSFER_IN,
                amount=amount,
                description=description or f"Transfer from {source.name}",
                actor=actor,
                pair_id=pair_id,
                related_treasury_id=source.id,
            )
            return withdrawal, deposit

        withdrawal, deposit = self._posting_service.run_serialized(
            [from_treasury_id, to_treasury_id], operation
        )
        logger.info(
            "Transferred %s from treasury id=%s to id=%s, pair_id=%s",
            amount,
            from_treasury_id,
            to_treasury_id,
            pair_id,
        )
        return self._to_result(withdrawal, deposit)

    def get_pair(self, pair_id: str) -> TransferResultSchema:
        legs = (
            self.db.query(TreasuryTransaction)
            .filter(TreasuryTransaction.pair_id == pair_id)
            .all()
        )
        by_source = {leg.source: leg for leg in legs}
        withdrawal = by_source.get(TreasuryTransactionSource.TRANSFER_OUT)
        deposit = by_source.get(TreasuryTransactionSource.TRANSFER_IN)
        if len(legs) != 2 or withdrawal is None or deposit is None:
            raise NotFoundError(f"Transfer pair_id={pair_id}")
        return self._to_result(withdrawal, deposit)

    def _to_result(
        self, withdrawal: TreasuryTransaction, deposit: TreasuryTransaction
    ) -> TransferResultSchema:
        return TransferResultSchema(
            pair_id=withdrawal.pair_id,
            withdrawal=TreasuryTransactionSchema.model_validate(withdrawal),
            deposit=TreasuryTransactionSchema.model_validate(deposit),
            from_balance=withdrawal.balance_after,
            to_balance=deposit.balance_after,
        )
