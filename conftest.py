"""Test configuration and shared fixtures"""

import os
import sys
import traceback

# the app refuses to start without a secret, set it before the first import
os.environ.setdefault("LEDGER_SECRET_KEY", "ledger-test-secret")

import pytest  # noqa: E402
from fastapi import Depends  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from ledger.app import app  # noqa: E402
from ledger.config import Config, get_config  # noqa: E402
from ledger.db import DatabaseConnection  # noqa: E402
from ledger.dependencies.services import ServiceContainer  # noqa: E402
from ledger.services.token import TokenService  # noqa: E402
from ledger.uow import UnitOfWork  # noqa: E402

_original_request = TestClient.request


def logging_request(self, *args, **kwargs):
    try:
        response = _original_request(self, *args, **kwargs)
    except Exception:
        # Print request details on exception
        print("\n=== Exception in TestClient.request ===")
        print("Request args:", args)
        print("Request kwargs:", kwargs)
        traceback.print_exc(file=sys.stdout)
        raise

    if response.status_code >= 400:
        req = response.request
        print("\n=== HTTP Error Response Captured ===")
        print(f"Method: {req.method} URL: {req.url}")
        print("Request Content:", req.content)
        print("Response Status:", response.status_code)
        print("Response Body:", response.text)
    return response


# Patch TestClient.request globally
TestClient.request = logging_request


def _remove_database(config: Config) -> None:
    if os.path.exists(config.database_path):
        os.remove(config.database_path)


# each test class have it's own empty database
@pytest.fixture(scope="class")
def test_app():
    test_config = Config(
        # overwrite application name so it will use another database file
        app_name="ledger-test"
    )
    _remove_database(test_config)
    app.dependency_overrides = {get_config: lambda: test_config}

    # trigger table creation and bootstrapping
    db_conn = DatabaseConnection(config=test_config)
    db_conn.create_tables()
    db_conn.seed_bootstrap_data()

    # create private token generator route to be used only from tests
    @app.get("/tokens/{actor}", include_in_schema=False)
    def _issue_token(actor: str, token_service: TokenService = Depends()) -> str:
        return token_service.issue_token(actor)

    client = TestClient(app)
    yield client
    db_conn.engine.dispose()
    # clean up test database file after tests
    _remove_database(test_config)


# general fixture to get the token of any actor
@pytest.fixture(scope="class")
def token_factory(test_app: TestClient):
    """Get token for any actor reference"""

    def f(actor: str):
        r = test_app.get(f"/tokens/{actor}")
        assert r.status_code == 200
        return r.json()

    return f


@pytest.fixture(scope="class")
def token(token_factory):
    """token of the default test actor"""
    return token_factory("tester")


@pytest.fixture(scope="class")
def service_config():
    config = Config(app_name="ledger-test-services")
    _remove_database(config)
    yield config
    _remove_database(config)


@pytest.fixture(scope="class")
def db_conn(service_config: Config):
    """Database for tests that drive services directly, e.g. from several threads"""
    conn = DatabaseConnection(config=service_config)
    conn.create_tables()
    conn.seed_bootstrap_data()
    yield conn
    conn.engine.dispose()


@pytest.fixture
def container_factory(db_conn: DatabaseConnection, service_config: Config):
    """Build a service container on a fresh session. Each thread needs its own."""
    opened: list[UnitOfWork] = []

    def f(config: Config | None = None) -> ServiceContainer:
        uow = UnitOfWork(db_conn.get_session())
        opened.append(uow)
        return ServiceContainer(uow, config or service_config)

    yield f
    for uow in opened:
        uow.db.close()
