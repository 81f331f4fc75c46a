"""Treasury and posting errors"""

from ledger.errors.base import ApplicationError


class TreasuryDeletionError(ApplicationError):
    http_code = 409
    error_code = 8001
    error = "Treasury has transactions or a non-zero balance and cannot be deleted"


class InactiveTreasury(ApplicationError):
    http_code = 409
    error_code = 8002
    error = "Treasury is not active"


class InsufficientFunds(ApplicationError):
    http_code = 409
    error_code = 8003
    error = "Insufficient funds in treasury"


class SameTreasuryTransfer(ApplicationError):
    http_code = 422
    error_code = 8004
    error = "Source and destination treasury must be different"


class LedgerConflictError(ApplicationError):
    """Lock wait or version conflict that survived every retry. Safe to retry later."""

    http_code = 409
    error_code = 8005
    error = "Treasury is busy, retry the operation"
