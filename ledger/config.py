"""Application configuration"""

from dataclasses import dataclass, field
from os import getenv
from pathlib import Path


def _split_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [item.strip().upper() for item in value.split(",") if item.strip()]


@dataclass
class Config:
    secret_key: str | None = field(default=getenv("LEDGER_SECRET_KEY", ""))

    app_name: str = "ledger"
    app_version: str = "0.1.0"

    # Optional database URL for Postgres or other databases
    database_url_env: str | None = field(default=getenv("LEDGER_DATABASE_URL", None))

    # treasury types (GENERAL, COMPANY, BANK) allowed to go below zero
    overdraft_types: list[str] = field(
        default_factory=lambda: _split_list(getenv("LEDGER_OVERDRAFT_TYPES", ""))
    )

    # seconds to wait for a treasury lock before giving up with a conflict
    lock_timeout: float = field(default=float(getenv("LEDGER_LOCK_TIMEOUT", "5")))
    # attempts for a posting that hits a version or database lock conflict
    max_retries: int = field(default=int(getenv("LEDGER_MAX_RETRIES", "3")))
    retry_backoff: float = field(default=float(getenv("LEDGER_RETRY_BACKOFF", "0.05")))

    @property
    def database_path(self) -> Path:
        return Path("./data/") / Path(f"{self.app_name}.db")

    @property
    def database_url(self) -> str:
        # Use provided DATABASE_URL if available, else fall back to SQLite file
        if self.database_url_env:
            return self.database_url_env
        return f"sqlite:///{self.database_path}"

    def allows_overdraft(self, treasury_type: str) -> bool:
        return treasury_type.upper() in self.overdraft_types


def get_config():
    return Config()
