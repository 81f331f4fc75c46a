from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from ledger.db import get_db as get_original_db  # fix for test mocks


class UnitOfWork:
    """Session wrapper shared by all services of one request or script run."""

    def __init__(self, db: Session):
        self.db = db

    def __getattr__(self, attr):
        # services use the unit of work as if it were the session
        return getattr(self.db, attr)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.db.rollback()
        else:
            # ledger writes commit on their own, this covers plain CRUD
            self.db.commit()
        self.db.close()


def get_uow(
    db: Session = Depends(get_original_db),
) -> Generator[UnitOfWork, None, None]:
    """
    FastAPI caches this dependency per request, so every service of a request
    works on the same session.
    """
    with UnitOfWork(db) as uow:
        yield uow
