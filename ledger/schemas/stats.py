"""Schemas for treasury stats"""

from datetime import date

from ledger.models.treasury import TreasuryType
from ledger.schemas.base import BaseSchema, CurrencyDecimal


class TreasuryTypeTotalSchema(BaseSchema):
    type: TreasuryType
    treasury_count: int
    balance: CurrencyDecimal


class TreasuryBalanceTotalsSchema(BaseSchema):
    by_type: list[TreasuryTypeTotalSchema]
    treasury_count: int
    total_balance: CurrencyDecimal


class TreasuryFlowItemSchema(BaseSchema):
    treasury_id: int
    name: str
    type: TreasuryType
    amount: CurrencyDecimal


class TreasuryFlowDirectionSchema(BaseSchema):
    total: CurrencyDecimal
    breakdown: list[TreasuryFlowItemSchema]


class TreasuryFlowSchema(BaseSchema):
    timeframe_from: date
    timeframe_to: date
    deposits: TreasuryFlowDirectionSchema
    withdrawals: TreasuryFlowDirectionSchema
