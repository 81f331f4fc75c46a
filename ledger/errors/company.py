"""Company usage errors"""

from ledger.errors.common import LedgerValidationError


class CompanyInactive(LedgerValidationError):
    error_code = 4001
    error = "Company is not active"
