"""Database connection and initialization"""

import logging
import os
from typing import Any, Generator, Type

from fastapi import Depends
from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ledger.bootstrap import BOOTSTRAP
from ledger.config import Config, get_config
from ledger.models.base import BaseModel
from ledger.models.treasury_transaction import TreasuryTransaction  # noqa: F401

logger = logging.getLogger(__name__)

# ids below this value are reserved for bootstrap rows
SEQUENCE_START = 100


class DatabaseConnection:
    engine: Engine
    session_local: sessionmaker[Session]
    # tables and seeds are ensured once per process
    _bootstrapped: bool = False

    def __init__(self, config: Config = Depends(get_config)) -> None:
        connect_args = {}
        if config.database_url.startswith("sqlite"):
            os.makedirs(config.database_path.parent, exist_ok=True)
            # sessions are handed to worker threads by FastAPI
            connect_args = {"check_same_thread": False}
        self.engine = create_engine(config.database_url, connect_args=connect_args)
        self.session_local = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
        )
        if not self.__class__._bootstrapped:
            self.create_tables()
            self.seed_bootstrap_data()
            self.__class__._bootstrapped = True

    def create_tables(self) -> None:
        logger.info("Creating ledger tables")
        BaseModel.metadata.create_all(bind=self.engine)

    def drop_tables(self) -> None:
        logger.info("Dropping ledger tables")
        BaseModel.metadata.drop_all(bind=self.engine)

    def get_session(self) -> Session:
        return self.session_local()

    def seed_bootstrap_data(self) -> None:
        """Upsert the bootstrap companies and treasuries, one commit per table."""
        with self.get_session() as session:
            for model, seeds in BOOTSTRAP.items():
                try:
                    for seed in seeds:
                        session.merge(seed)
                    session.flush()
                    self._reserve_ids(session, model)
                    session.commit()
                except SQLAlchemyError:
                    session.rollback()
                    logger.exception(
                        "Seeding table '%s' failed", model.__tablename__
                    )
                    raise
                logger.info(
                    "Seeded %d row(s) into '%s'", len(seeds), model.__tablename__
                )

    def _reserve_ids(self, session: Session, model: Type[BaseModel]) -> None:
        """Make new rows of `model` get ids from SEQUENCE_START on."""
        table_name = model.__tablename__
        dialect = session.get_bind().dialect.name.lower()

        if dialect == "postgresql":
            sequence_name = f"{table_name}_id_seq"
            current = session.execute(
                text(f"SELECT last_value FROM {sequence_name}")
            ).scalar()
            if (current or 0) < SEQUENCE_START - 1:
                logger.info("Restarting %s at %d", sequence_name, SEQUENCE_START)
                session.execute(
                    text(f"ALTER SEQUENCE {sequence_name} RESTART WITH {SEQUENCE_START}")
                )
        elif dialect == "sqlite":
            has_sequences = session.execute(
                text(
                    "SELECT name FROM sqlite_master "
                    "WHERE type='table' AND name='sqlite_sequence'"
                )
            ).first()
            if has_sequences is None:
                # plain rowid tables reuse max(id) + 1, nothing to move
                logger.debug("No sqlite_sequence, ids of '%s' not moved", table_name)
                return
            current = session.execute(
                text("SELECT seq FROM sqlite_sequence WHERE name = :table"),
                {"table": table_name},
            ).scalar()
            if (current or 0) < SEQUENCE_START - 1:
                session.execute(
                    text("UPDATE sqlite_sequence SET seq = :seq WHERE name = :table"),
                    {"seq": SEQUENCE_START - 1, "table": table_name},
                )
        else:
            logger.warning(
                "Dialect '%s' not handled, ids of '%s' not moved", dialect, table_name
            )


def get_db(db_conn: DatabaseConnection = Depends()) -> Generator[Session, Any, None]:
    """Session per request, closed when the request is done."""
    session = db_conn.get_session()
    try:
        yield session
    finally:
        session.close()
