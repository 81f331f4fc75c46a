"""Service dependency providers for code running outside a request (scripts, tests)."""

from sqlalchemy.orm import Session

from ledger.config import Config


class ServiceContainer:
    """Session-scoped service container."""

    def __init__(self, db: Session, config: Config):
        self.db = db
        self.config = config
        self._company_service = None
        self._posting_service = None
        self._treasury_service = None
        self._transfer_service = None
        self._treasury_transaction_service = None
        self._stats_service = None
        self._reconciliation_service = None
        self._token_service = None

    @property
    def company_service(self):
        if self._company_service is None:
            from ledger.services.company import CompanyService

            self._company_service = CompanyService(db=self.db)
        return self._company_service

    @property
    def posting_service(self):
        if self._posting_service is None:
            from ledger.services.posting import PostingService

            self._posting_service = PostingService(db=self.db, config=self.config)
        return self._posting_service

    @property
    def treasury_service(self):
        if self._treasury_service is None:
            from ledger.services.treasury import TreasuryService

            self._treasury_service = TreasuryService(
                db=self.db,
                company_service=self.company_service,
                posting_service=self.posting_service,
            )
        return self._treasury_service

    @property
    def transfer_service(self):
        if self._transfer_service is None:
            from ledger.services.transfer import TransferService

            self._transfer_service = TransferService(
                db=self.db, posting_service=self.posting_service
            )
        return self._transfer_service

    @property
    def treasury_transaction_service(self):
        if self._treasury_transaction_service is None:
            from ledger.services.treasury_transaction import TreasuryTransactionService

            self._treasury_transaction_service = TreasuryTransactionService(db=self.db)
        return self._treasury_transaction_service

    @property
    def stats_service(self):
        if self._stats_service is None:
            from ledger.services.stats import StatsService

            self._stats_service = StatsService(db=self.db)
        return self._stats_service

    @property
    def reconciliation_service(self):
        if self._reconciliation_service is None:
            from ledger.services.reconciliation import ReconciliationService

            self._reconciliation_service = ReconciliationService(db=self.db)
        return self._reconciliation_service

    @property
    def token_service(self):
        if self._token_service is None:
            from ledger.services.token import TokenService

            self._token_service = TokenService(config=self.config)
        return self._token_service
