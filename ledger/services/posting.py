"""Ledger posting service.

Every balance change goes through here: a transaction row is appended and the
treasury's cached balance is moved to that row's `balance_after` in the same
database transaction. Writers of one treasury are serialized by a process lock,
a row lock (where the database supports `SELECT ... FOR UPDATE`) and the
treasury's version column.
"""

import logging
import time
from decimal import Decimal, InvalidOperation
from typing import Callable, Iterable, TypeVar

from fastapi import Depends
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ledger.config import Config, get_config
from ledger.errors.common import LedgerValidationError, NotFoundError
from ledger.errors.treasury import (
    InactiveTreasury,
    InsufficientFunds,
    LedgerConflictError,
)
from ledger.models.base import utcnow
from ledger.models.treasury import Treasury
from ledger.models.treasury_transaction import (
    ENGINE_SOURCES,
    TreasuryTransaction,
    TreasuryTransactionSource,
    TreasuryTransactionType,
    signed_amount,
)
from ledger.schemas.treasury_transaction import (
    PostingResultSchema,
    TreasuryTransactionSchema,
)
from ledger.services.locks import TreasuryLocks, TreasuryLockTimeout
from ledger.uow import get_uow

logger = logging.getLogger(__name__)

R = TypeVar("R")

# serialization failure, deadlock, lock not available
LOCK_SQLSTATES = frozenset({"40001", "40P01", "55P03"})

CENT = Decimal("0.01")
# largest magnitude stored in money columns, NUMERIC(15, 2)
MAX_MONEY = Decimal("9999999999999.99")


def to_money(value, field: str = "amount") -> Decimal:
    """Coerce a value to a Decimal with at most two fractional digits."""
    if isinstance(value, float):
        value = str(value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise LedgerValidationError(f"{field}={value!r} is not a number")
    if not amount.is_finite():
        raise LedgerValidationError(f"{field}={value!r} is not a number")
    if abs(amount) > MAX_MONEY:
        raise LedgerValidationError(f"{field}={value} exceeds {MAX_MONEY}")
    try:
        money = amount.quantize(CENT)
    except InvalidOperation:
        raise LedgerValidationError(f"{field}={value} is not a valid amount")
    if amount != money:
        raise LedgerValidationError(f"{field}={value} has more than two decimals")
    return money


def is_lock_conflict(exc: OperationalError) -> bool:
    """True for database errors that a retry of the same operation can resolve."""
    orig = exc.orig
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate in LOCK_SQLSTATES:
        return True
    # sqlite: "database is locked", "database table is locked"
    return "is locked" in str(orig).lower()


class PostingService:
    def __init__(
        self,
        db: Session = Depends(get_uow),
        config: Config = Depends(get_config),
    ):
        self.db = db
        self.config = config

    def validate_amount(self, value) -> Decimal:
        amount = to_money(value)
        if amount <= 0:
            raise LedgerValidationError(f"amount={amount} must be positive")
        return amount

    def post(
        self,
        treasury_id: int,
        type: TreasuryTransactionType | str,
        amount: Decimal,
        source: TreasuryTransactionSource | str = TreasuryTransactionSource.MANUAL,
        description: str | None = None,
        actor: str | None = None,
        reference_type: str | None = None,
        reference_id: int | None = None,
    ) -> PostingResultSchema:
        """Append a deposit or withdrawal to a treasury and return it with the new balance."""
        try:
            tx_type = TreasuryTransactionType(type)
            tx_source = TreasuryTransactionSource(source)
        except ValueError as exc:
            raise LedgerValidationError(str(exc))
        if tx_type == TreasuryTransactionType.TRANSFER:
            raise LedgerValidationError("transfers must go through the transfer service")
        if tx_source in ENGINE_SOURCES:
            raise LedgerValidationError(
                f"source {tx_source.value} is reserved for the ledger engine"
            )
        amount = self.validate_amount(amount)

        def operation() -> TreasuryTransaction:
            treasury = self.lock_treasury(treasury_id)
            return self.append_entry(
                treasury,
                tx_type=tx_type,
                source=tx_source,
                amount=amount,
                description=description,
                actor=actor,
                reference_type=reference_type,
                reference_id=reference_id,
            )

        tx = self.run_serialized([treasury_id], operation)
        logger.info(
            "Posted %s %s of %s to treasury id=%s, balance=%s",
            tx.type.value,
            tx.source.value,
            tx.amount,
            tx.treasury_id,
            tx.balance_after,
        )
        return PostingResultSchema(
            transaction=TreasuryTransactionSchema.model_validate(tx),
            balance=tx.balance_after,
        )

    def lock_treasury(self, treasury_id: int, require_active: bool = True) -> Treasury:
        """Load a treasury with a row lock and fresh column values."""
        treasury = (
            self.db.query(Treasury)
            .filter(Treasury.id == treasury_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if treasury is None:
            raise NotFoundError(f"Treasury id={treasury_id}")
        if require_active and not treasury.active:
            raise InactiveTreasury(f"Treasury id={treasury_id}")
        return treasury

    def append_entry(
        self,
        treasury: Treasury,
        tx_type: TreasuryTransactionType,
        source: TreasuryTransactionSource,
        amount: Decimal,
        description: str | None = None,
        actor: str | None = None,
        pair_id: str | None = None,
        related_treasury_id: int | None = None,
        reference_type: str | None = None,
        reference_id: int | None = None,
    ) -> TreasuryTransaction:
        """Write one entry and move the cached balance. Caller holds the treasury lock."""
        delta = signed_amount(tx_type, source, amount)
        balance_before = treasury.balance
        balance_after = balance_before + delta
        if abs(balance_after) > MAX_MONEY:
            raise LedgerValidationError(
                f"Treasury id={treasury.id} balance would exceed {MAX_MONEY}"
            )
        if (
            delta < 0
            and balance_after < 0
            and not self.config.allows_overdraft(treasury.type.value)
        ):
            raise InsufficientFunds(
                f"Treasury id={treasury.id} balance={balance_before}, requested={amount}"
            )
        tx = TreasuryTransaction(
            treasury_id=treasury.id,
            type=tx_type,
            source=source,
            amount=amount,
            balance_before=balance_before,
            balance_after=balance_after,
            description=description,
            pair_id=pair_id,
            related_treasury_id=related_treasury_id,
            reference_type=reference_type,
            reference_id=reference_id,
            created_by=actor,
            created_at=utcnow(),
        )
        self.db.add(tx)
        treasury.balance = balance_after
        self.db.flush()
        return tx

    def run_serialized(
        self, treasury_ids: Iterable[int], operation: Callable[[], R]
    ) -> R:
        """Run `operation` inside the critical section of the given treasuries and commit.

        The operation is re-run from scratch after a version conflict, a lock
        timeout or a database lock error, at most `max_retries` times in total.
        Any other error rolls the session back and propagates unchanged.
        """
        treasury_ids = sorted(set(treasury_ids))
        attempts = max(1, self.config.max_retries)
        for attempt in range(1, attempts + 1):
            try:
                with TreasuryLocks.hold(treasury_ids, timeout=self.config.lock_timeout):
                    try:
                        result = operation()
                        self.db.commit()
                    except BaseException:
                        self.db.rollback()
                        raise
                return result
            except (StaleDataError, OperationalError, TreasuryLockTimeout) as exc:
                if isinstance(exc, OperationalError) and not is_lock_conflict(exc):
                    raise
                logger.warning(
                    "Conflict on treasuries %s, attempt %d/%d: %s",
                    treasury_ids,
                    attempt,
                    attempts,
                    exc,
                )
                if attempt < attempts:
                    time.sleep(self.config.retry_backoff * attempt)
        raise LedgerConflictError(f"Treasury ids={treasury_ids}")
