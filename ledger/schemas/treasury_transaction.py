"""DTO for TreasuryTransaction, postings and transfers"""

from datetime import date
from decimal import Decimal

from pydantic import field_validator

from ledger.models.treasury_transaction import (
    ENGINE_SOURCES,
    TreasuryTransactionSource,
    TreasuryTransactionType,
)
from ledger.schemas.base import BaseReadSchema, BaseSchema, BaseUpdateSchema, CurrencyDecimal


class TreasuryTransactionSchema(BaseReadSchema):
    treasury_id: int
    type: TreasuryTransactionType
    source: TreasuryTransactionSource
    amount: CurrencyDecimal
    balance_before: CurrencyDecimal
    balance_after: CurrencyDecimal
    description: str | None = None
    pair_id: str | None = None
    related_treasury_id: int | None = None
    reference_type: str | None = None
    reference_id: int | None = None
    created_by: str | None = None


class PostingCreateSchema(BaseUpdateSchema):
    treasury_id: int
    type: TreasuryTransactionType
    amount: Decimal
    source: TreasuryTransactionSource = TreasuryTransactionSource.MANUAL
    description: str | None = None
    reference_type: str | None = None
    reference_id: int | None = None

    @field_validator("amount")
    def amount_must_be_positive(cls, v):
        if v <= 0:
            raise ValueError("Amount must be positive")
        return v

    @field_validator("type")
    def type_must_be_single_sided(cls, v):
        if v == TreasuryTransactionType.TRANSFER:
            raise ValueError("Transfers must be created through the transfer endpoint")
        return v

    @field_validator("source")
    def source_must_be_producer_source(cls, v):
        if v in ENGINE_SOURCES:
            raise ValueError(f"Source {v.value} is reserved for the ledger engine")
        return v


class PostingResultSchema(BaseSchema):
    transaction: TreasuryTransactionSchema
    balance: CurrencyDecimal


class TransferCreateSchema(BaseUpdateSchema):
    from_treasury_id: int
    to_treasury_id: int
    amount: Decimal
    description: str | None = None

    @field_validator("amount")
    def amount_must_be_positive(cls, v):
        if v <= 0:
            raise ValueError("Amount must be positive")
        return v


class TransferResultSchema(BaseSchema):
    pair_id: str
    withdrawal: TreasuryTransactionSchema
    deposit: TreasuryTransactionSchema
    from_balance: CurrencyDecimal
    to_balance: CurrencyDecimal


class TreasuryTransactionFiltersSchema(BaseSchema):
    treasury_id: int | None = None
    type: TreasuryTransactionType | None = None
    source: TreasuryTransactionSource | None = None
    pair_id: str | None = None
    # both days are inclusive, in UTC
    start_date: date | None = None
    end_date: date | None = None
