"""Common application errors, may be raised from several services"""

from ledger.errors.base import ApplicationError


class NotFoundError(ApplicationError):
    http_code = 404
    error_code = 1404
    error = "Not found"


class LedgerValidationError(ApplicationError):
    http_code = 422
    error_code = 1422
    error = "Validation failed"
