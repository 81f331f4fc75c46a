"""Treasury service: registry of cash boxes and bank accounts"""

import datetime
import logging
from decimal import Decimal

from fastapi import Depends
from sqlalchemy import or_
from sqlalchemy.orm import Query, Session

from ledger.errors.common import LedgerValidationError
from ledger.errors.company import CompanyInactive
from ledger.errors.treasury import TreasuryDeletionError
from ledger.models.treasury import Treasury, TreasuryType
from ledger.models.treasury_transaction import (
    TreasuryTransaction,
    TreasuryTransactionSource,
    TreasuryTransactionType,
)
from ledger.schemas.treasury import (
    TreasuryCreateSchema,
    TreasuryFiltersSchema,
    TreasuryUpdateSchema,
)
from ledger.services.base import BaseService
from ledger.services.company import CompanyService
from ledger.services.posting import PostingService, to_money
from ledger.uow import get_uow

logger = logging.getLogger(__name__)


class TreasuryService(BaseService[Treasury]):
    model = Treasury

    def __init__(
        self,
        db: Session = Depends(get_uow),
        company_service: CompanyService = Depends(),
        posting_service: PostingService = Depends(),
    ):
        self.db = db
        self._company_service = company_service
        self._posting_service = posting_service

    def _apply_filters(  # type: ignore[override]
        self, query: Query[Treasury], filters: TreasuryFiltersSchema
    ) -> Query[Treasury]:
        if filters.name is not None:
            query = query.filter(self.model.name.ilike(f"%{filters.name}%"))
        if filters.type is not None:
            query = query.filter(self.model.type == filters.type)
        if filters.company_id is not None:
            query = query.filter(self.model.company_id == filters.company_id)
        if filters.active is not None:
            query = query.filter(self.model.active == filters.active)
        return query

    def _ensure_name_free(self, name: str, own_id: int | None = None) -> None:
        if not name or not name.strip():
            raise LedgerValidationError("name is required")
        query = self.db.query(self.model).filter(self.model.name == name)
        if own_id is not None:
            query = query.filter(self.model.id != own_id)
        if query.first() is not None:
            raise LedgerValidationError(f"name={name!r} is already used")

    def _validate_type_fields(self, schema: TreasuryCreateSchema) -> None:
        if schema.type == TreasuryType.COMPANY:
            if schema.company_id is None:
                raise LedgerValidationError("company_id is required for COMPANY treasury")
            company = self._company_service.get(schema.company_id)
            if not company.active:
                raise CompanyInactive(f"Company id={company.id}")
        elif schema.company_id is not None:
            raise LedgerValidationError("company_id is only allowed for COMPANY treasury")

        if schema.type == TreasuryType.BANK:
            if not schema.bank_name or not schema.bank_name.strip():
                raise LedgerValidationError("bank_name is required for BANK treasury")
        elif schema.bank_name is not None or schema.account_number is not None:
            raise LedgerValidationError(
                "bank_name and account_number are only allowed for BANK treasury"
            )

    def create(  # type: ignore[override]
        self, schema: TreasuryCreateSchema, actor: str | None = None
    ) -> Treasury:
        """
        Register a treasury. A non-zero opening balance is booked as an
        OPENING_BALANCE entry in the same commit, so the cached balance is backed
        by history from the start.
        """
        self._ensure_name_free(schema.name)
        self._validate_type_fields(schema)
        opening_balance = to_money(schema.opening_balance, field="opening_balance")

        def operation() -> Treasury:
            treasury = Treasury(
                name=schema.name,
                type=schema.type,
                company_id=schema.company_id,
                bank_name=schema.bank_name,
                account_number=schema.account_number,
                comment=schema.comment,
                opening_balance=opening_balance,
                balance=Decimal(0),
            )
            self.db.add(treasury)
            self.db.flush()
            if opening_balance != 0:
                self._posting_service.append_entry(
                    treasury,
                    tx_type=(
                        TreasuryTransactionType.DEPOSIT
                        if opening_balance > 0
                        else TreasuryTransactionType.WITHDRAWAL
                    ),
                    source=TreasuryTransactionSource.OPENING_BALANCE,
                    amount=abs(opening_balance),
                    description="Opening balance",
                    actor=actor,
                )
            return treasury

        # a brand new row cannot be contended, no treasury lock is needed
        treasury = self._posting_service.run_serialized([], operation)
        logger.info(
            "Created treasury id=%s name=%s type=%s opening_balance=%s",
            treasury.id,
            treasury.name,
            treasury.type.value,
            opening_balance,
        )
        return treasury

    def update(  # type: ignore[override]
        self, obj_id: int, schema: TreasuryUpdateSchema
    ) -> Treasury:
        data = schema.dump()

        def operation() -> Treasury:
            treasury = self._posting_service.lock_treasury(obj_id, require_active=False)
            if "name" in data:
                self._ensure_name_free(data["name"], own_id=obj_id)
            if treasury.type != TreasuryType.BANK and (
                "bank_name" in data or "account_number" in data
            ):
                raise LedgerValidationError(
                    "bank_name and account_number are only allowed for BANK treasury"
                )
            if treasury.type == TreasuryType.BANK and "bank_name" in data:
                if not data["bank_name"].strip():
                    raise LedgerValidationError("bank_name is required for BANK treasury")
            for key, value in data.items():
                setattr(treasury, key, value)
            treasury.modified_at = datetime.datetime.now()
            self.db.flush()
            return treasury

        return self._posting_service.run_serialized([obj_id], operation)

    def _set_active(self, obj_id: int, active: bool) -> Treasury:
        def operation() -> Treasury:
            treasury = self._posting_service.lock_treasury(obj_id, require_active=False)
            treasury.active = active
            treasury.modified_at = datetime.datetime.now()
            self.db.flush()
            return treasury

        treasury = self._posting_service.run_serialized([obj_id], operation)
        logger.info("Treasury id=%s active=%s", obj_id, active)
        return treasury

    def deactivate(self, obj_id: int) -> Treasury:
        """Stop accepting postings. Balance and history stay as they are."""
        return self._set_active(obj_id, False)

    def activate(self, obj_id: int) -> Treasury:
        return self._set_active(obj_id, True)

    def delete(self, obj_id: int) -> int:  # type: ignore[override]
        """Delete a treasury that has no history and holds no money."""

        def operation() -> int:
            treasury = self._posting_service.lock_treasury(obj_id, require_active=False)
            count = (
                self.db.query(TreasuryTransaction)
                .filter(
                    or_(
                        TreasuryTransaction.treasury_id == obj_id,
                        TreasuryTransaction.related_treasury_id == obj_id,
                    )
                )
                .count()
            )
            if count > 0 or treasury.balance != 0:
                raise TreasuryDeletionError(
                    f"Treasury id={obj_id} transactions={count} balance={treasury.balance}"
                )
            self.db.delete(treasury)
            self.db.flush()
            return obj_id

        deleted_id = self._posting_service.run_serialized([obj_id], operation)
        logger.info("Deleted treasury id=%s", deleted_id)
        return deleted_id
