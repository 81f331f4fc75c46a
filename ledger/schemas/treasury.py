"""DTO for Treasury"""

from datetime import datetime
from decimal import Decimal

from ledger.models.treasury import TreasuryType
from ledger.schemas.base import (
    BaseFilterSchema,
    BaseReadSchema,
    BaseUpdateSchema,
    CurrencyDecimal,
)
from ledger.schemas.company import CompanySchema


class TreasurySchema(BaseReadSchema):
    name: str
    type: TreasuryType
    active: bool
    comment: str | None = None
    company_id: int | None = None
    company: CompanySchema | None = None
    bank_name: str | None = None
    account_number: str | None = None
    opening_balance: CurrencyDecimal
    balance: CurrencyDecimal
    modified_at: datetime | None = None


class TreasuryCreateSchema(BaseUpdateSchema):
    name: str
    type: TreasuryType = TreasuryType.GENERAL
    company_id: int | None = None
    bank_name: str | None = None
    account_number: str | None = None
    opening_balance: Decimal = Decimal(0)
    comment: str | None = None


class TreasuryUpdateSchema(BaseUpdateSchema):
    """Balance changes only through postings; type and opening balance never change."""

    name: str | None = None
    bank_name: str | None = None
    account_number: str | None = None
    active: bool | None = None
    comment: str | None = None


class TreasuryFiltersSchema(BaseFilterSchema):
    name: str | None = None
    type: TreasuryType | None = None
    company_id: int | None = None
    active: bool | None = None
