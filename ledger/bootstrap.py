from typing import Type

from ledger.models.base import BaseModel
from ledger.models.company import Company
from ledger.models.treasury import Treasury, TreasuryType

# commonly used companies
head_office = Company(id=1, name="head office", code="HQ", comment="default company")

# commonly used treasuries
# seeded with zero balance and no history, so no opening transaction is needed
cash_treasury = Treasury(id=1, name="cash", type=TreasuryType.GENERAL)

BOOTSTRAP: dict[Type[BaseModel], list[BaseModel]] = {
    Company: [
        head_office,
    ],
    Treasury: [
        cash_treasury,
    ],
}
