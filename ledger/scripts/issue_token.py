"""Print a signed actor token for calling the API.

Usage:
    python -m ledger.scripts.issue_token --actor accountant:42
"""

from __future__ import annotations

import argparse

from ledger.config import get_config
from ledger.services.token import TokenService


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Issue an API token for an actor")
    parser.add_argument(
        "--actor",
        type=str,
        required=True,
        help="Actor reference stored as created_by on ledger entries",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    config = get_config()
    if not config.secret_key:
        raise SystemExit("LEDGER_SECRET_KEY is not set")
    print(TokenService(config=config).issue_token(args.actor))


if __name__ == "__main__":
    main()
