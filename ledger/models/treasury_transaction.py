"""Treasury transaction model. Append-only: rows are never updated or deleted."""

import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DECIMAL, DateTime, Enum, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger.models.base import BaseModel, utcnow
from ledger.models.treasury import Treasury


class TreasuryTransactionType(enum.Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    TRANSFER = "TRANSFER"


class TreasuryTransactionSource(enum.Enum):
    RECEIPT = "RECEIPT"
    PAYMENT = "PAYMENT"
    MANUAL = "MANUAL"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"
    OPENING_BALANCE = "OPENING_BALANCE"
    SALARY = "SALARY"
    BONUS = "BONUS"
    BAD_DEBT = "BAD_DEBT"
    SALE = "SALE"


# sources stamped by the engine itself, never accepted from producers
ENGINE_SOURCES = frozenset(
    {
        TreasuryTransactionSource.TRANSFER_IN,
        TreasuryTransactionSource.TRANSFER_OUT,
        TreasuryTransactionSource.OPENING_BALANCE,
    }
)


def signed_amount(
    tx_type: TreasuryTransactionType,
    source: TreasuryTransactionSource,
    amount: Decimal,
) -> Decimal:
    """Effect of an entry on the owning treasury's balance."""
    if tx_type == TreasuryTransactionType.DEPOSIT:
        return amount
    if tx_type == TreasuryTransactionType.WITHDRAWAL:
        return -amount
    if source == TreasuryTransactionSource.TRANSFER_OUT:
        return -amount
    return amount


class TreasuryTransaction(BaseModel):
    __tablename__ = "treasury_transactions"
    __table_args__ = (
        Index("ix_treasury_transactions_treasury_created", "treasury_id", "created_at"),
    )

    treasury_id: Mapped[int] = mapped_column(
        ForeignKey("treasuries.id"), nullable=False
    )
    treasury: Mapped[Treasury] = relationship(foreign_keys=[treasury_id])

    type: Mapped[TreasuryTransactionType] = mapped_column(
        Enum(TreasuryTransactionType), nullable=False
    )
    source: Mapped[TreasuryTransactionSource] = mapped_column(
        Enum(TreasuryTransactionSource), nullable=False
    )

    amount: Mapped[Decimal] = mapped_column(
        DECIMAL(precision=15, scale=2), nullable=False
    )
    balance_before: Mapped[Decimal] = mapped_column(
        DECIMAL(precision=15, scale=2), nullable=False
    )
    balance_after: Mapped[Decimal] = mapped_column(
        DECIMAL(precision=15, scale=2), nullable=False
    )

    description: Mapped[str | None] = mapped_column(String, nullable=True)

    # both legs of one transfer share the pair id
    pair_id: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)
    related_treasury_id: Mapped[int | None] = mapped_column(
        ForeignKey("treasuries.id"), nullable=True
    )
    related_treasury: Mapped[Treasury | None] = relationship(
        foreign_keys=[related_treasury_id]
    )

    # producer document this entry came from, e.g. ("receipt", 42)
    reference_type: Mapped[str | None] = mapped_column(String, nullable=True)
    reference_id: Mapped[int | None] = mapped_column(nullable=True)

    created_by: Mapped[str | None] = mapped_column(String, nullable=True)

    # UTC wall clock, informational only: history order is the id order
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )

    @property
    def signed_amount(self) -> Decimal:
        return signed_amount(self.type, self.source, self.amount)
