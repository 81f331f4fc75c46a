"""Schemas for ledger replay reports"""

from ledger.schemas.base import BaseSchema, CurrencyDecimal


class ReconciliationMismatchSchema(BaseSchema):
    transaction_id: int
    stored_balance_before: CurrencyDecimal
    expected_balance_before: CurrencyDecimal
    stored_balance_after: CurrencyDecimal
    expected_balance_after: CurrencyDecimal


class TreasuryReconciliationSchema(BaseSchema):
    treasury_id: int
    name: str
    opening_balance: CurrencyDecimal
    cached_balance: CurrencyDecimal
    replayed_balance: CurrencyDecimal
    transaction_count: int
    consistent: bool
    mismatches: list[ReconciliationMismatchSchema]
