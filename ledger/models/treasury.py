"""Treasury model: a cash box or bank account with a cached running balance"""

import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DECIMAL, Boolean, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ledger.models.base import BaseModel
from ledger.models.company import Company


class TreasuryType(enum.Enum):
    GENERAL = "GENERAL"
    COMPANY = "COMPANY"
    BANK = "BANK"


class Treasury(BaseModel):
    __tablename__ = "treasuries"

    name: Mapped[str] = mapped_column(String, unique=True)
    type: Mapped[TreasuryType] = mapped_column(
        Enum(TreasuryType), nullable=False, default=TreasuryType.GENERAL
    )
    active: Mapped[bool] = mapped_column(Boolean, default=True)
    comment: Mapped[Optional[str]]

    company_id: Mapped[int | None] = mapped_column(
        ForeignKey("companies.id"), nullable=True
    )
    company: Mapped[Company | None] = relationship(foreign_keys=[company_id])

    bank_name: Mapped[str | None] = mapped_column(String, nullable=True)
    account_number: Mapped[str | None] = mapped_column(String, nullable=True)

    opening_balance: Mapped[Decimal] = mapped_column(
        DECIMAL(precision=15, scale=2), nullable=False, default=Decimal(0)
    )
    # projection of the transaction log, written only together with a new transaction
    balance: Mapped[Decimal] = mapped_column(
        DECIMAL(precision=15, scale=2), nullable=False, default=Decimal(0)
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    modified_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    __mapper_args__ = {"version_id_col": version}
