"""Replay every treasury's history and compare it with the cached balances.

Usage:
    python -m ledger.scripts.reconcile
    python -m ledger.scripts.reconcile --treasury-id 101 --verbose

Exits with status 1 when at least one treasury is inconsistent, so it can be
run from cron or a deployment check.
"""

from __future__ import annotations

import argparse
import logging
import sys

from ledger.config import get_config
from ledger.db import DatabaseConnection
from ledger.dependencies.services import ServiceContainer
from ledger.log import configure_logging
from ledger.schemas.reconciliation import TreasuryReconciliationSchema
from ledger.uow import UnitOfWork

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile treasury balances")
    parser.add_argument(
        "--treasury-id",
        type=int,
        required=False,
        help="Check a single treasury (default: all)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print consistent treasuries too",
    )
    return parser.parse_args(argv)


def format_report(report: TreasuryReconciliationSchema) -> str:
    status = "OK" if report.consistent else "MISMATCH"
    line = (
        f"[{status}] treasury id={report.treasury_id} name={report.name} "
        f"cached={report.cached_balance} replayed={report.replayed_balance} "
        f"entries={report.transaction_count}"
    )
    for mismatch in report.mismatches:
        line += (
            f"\n    transaction id={mismatch.transaction_id} "
            f"before={mismatch.stored_balance_before}/{mismatch.expected_balance_before} "
            f"after={mismatch.stored_balance_after}/{mismatch.expected_balance_after}"
        )
    return line


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging()
    config = get_config()
    db = DatabaseConnection(config=config)
    with UnitOfWork(db.get_session()) as uow:
        service = ServiceContainer(uow, config).reconciliation_service
        if args.treasury_id is not None:
            reports = [service.reconcile(args.treasury_id)]
        else:
            reports = service.reconcile_all()

    inconsistent = [report for report in reports if not report.consistent]
    for report in reports:
        if args.verbose or not report.consistent:
            print(format_report(report))
    logger.info(
        "Checked %d treasuries, %d inconsistent", len(reports), len(inconsistent)
    )
    return 1 if inconsistent else 0


if __name__ == "__main__":
    sys.exit(main())
