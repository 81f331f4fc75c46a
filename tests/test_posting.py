from dataclasses import replace
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from ledger.errors.treasury import InsufficientFunds
from ledger.models.treasury_transaction import TreasuryTransactionType
from ledger.schemas.treasury import TreasuryCreateSchema


@pytest.fixture(scope="class")
def treasury(test_app: TestClient, token):
    response = test_app.post(
        "/treasuries",
        json={"name": "Posting Cash", "opening_balance": "100.00"},
        headers={"x-token": token},
    )
    assert response.status_code == 200
    return response.json()


def post(test_app: TestClient, token: str, **payload):
    return test_app.post(
        "/treasury-transactions", json=payload, headers={"x-token": token}
    )


def get_balance(test_app: TestClient, token: str, treasury_id: int) -> str:
    response = test_app.get(f"/treasuries/{treasury_id}", headers={"x-token": token})
    assert response.status_code == 200
    return response.json()["balance"]


class TestPostingEndpoints:
    def test_deposit(self, test_app: TestClient, token, treasury):
        response = post(
            test_app,
            token,
            treasury_id=treasury["id"],
            type="DEPOSIT",
            amount="50.25",
            source="RECEIPT",
            description="Receipt #7",
            reference_type="receipt",
            reference_id=7,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["balance"] == "150.25"
        tx = data["transaction"]
        assert tx["type"] == "DEPOSIT"
        assert tx["source"] == "RECEIPT"
        assert tx["amount"] == "50.25"
        assert tx["balance_before"] == "100.00"
        assert tx["balance_after"] == "150.25"
        assert tx["reference_type"] == "receipt"
        assert tx["reference_id"] == 7
        assert tx["pair_id"] is None
        assert get_balance(test_app, token, treasury["id"]) == "150.25"

    def test_withdrawal(self, test_app: TestClient, token, treasury):
        response = post(
            test_app,
            token,
            treasury_id=treasury["id"],
            type="WITHDRAWAL",
            amount="0.25",
            source="PAYMENT",
        )
        assert response.status_code == 200
        assert response.json()["balance"] == "150.00"
        assert response.json()["transaction"]["balance_before"] == "150.25"

    def test_source_defaults_to_manual(self, test_app: TestClient, token, treasury):
        response = post(
            test_app, token, treasury_id=treasury["id"], type="DEPOSIT", amount="1"
        )
        assert response.status_code == 200
        assert response.json()["transaction"]["source"] == "MANUAL"
        assert response.json()["balance"] == "151.00"

    def test_insufficient_funds(self, test_app: TestClient, token, treasury):
        response = post(
            test_app,
            token,
            treasury_id=treasury["id"],
            type="WITHDRAWAL",
            amount="151.01",
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == 8003
        assert get_balance(test_app, token, treasury["id"]) == "151.00"

    def test_withdraw_everything(self, test_app: TestClient, token, treasury):
        response = post(
            test_app,
            token,
            treasury_id=treasury["id"],
            type="WITHDRAWAL",
            amount="151.00",
        )
        assert response.status_code == 200
        assert response.json()["balance"] == "0.00"

    @pytest.mark.parametrize("amount", ["0", "-5.00"])
    def test_non_positive_amount(self, test_app: TestClient, token, treasury, amount):
        response = post(
            test_app, token, treasury_id=treasury["id"], type="DEPOSIT", amount=amount
        )
        assert response.status_code == 422

    def test_amount_with_three_decimals(self, test_app: TestClient, token, treasury):
        response = post(
            test_app, token, treasury_id=treasury["id"], type="DEPOSIT", amount="1.001"
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == 1422

    @pytest.mark.parametrize("source", ["TRANSFER_IN", "TRANSFER_OUT", "OPENING_BALANCE"])
    def test_engine_sources_are_rejected(
        self, test_app: TestClient, token, treasury, source
    ):
        response = post(
            test_app,
            token,
            treasury_id=treasury["id"],
            type="DEPOSIT",
            amount="1.00",
            source=source,
        )
        assert response.status_code == 422

    def test_unknown_source(self, test_app: TestClient, token, treasury):
        response = post(
            test_app,
            token,
            treasury_id=treasury["id"],
            type="DEPOSIT",
            amount="1.00",
            source="LOTTERY",
        )
        assert response.status_code == 422

    def test_transfer_type_is_rejected(self, test_app: TestClient, token, treasury):
        response = post(
            test_app, token, treasury_id=treasury["id"], type="TRANSFER", amount="1.00"
        )
        assert response.status_code == 422

    def test_unknown_treasury(self, test_app: TestClient, token):
        response = post(test_app, token, treasury_id=99999, type="DEPOSIT", amount="1")
        assert response.status_code == 404
        assert response.json()["error_code"] == 1404

    def test_inactive_treasury(self, test_app: TestClient, token):
        response = test_app.post(
            "/treasuries",
            json={"name": "Closed Box", "opening_balance": "5.00"},
            headers={"x-token": token},
        )
        treasury_id = response.json()["id"]
        test_app.post(f"/treasuries/{treasury_id}/deactivate", headers={"x-token": token})

        response = post(
            test_app, token, treasury_id=treasury_id, type="DEPOSIT", amount="1.00"
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == 8002
        assert get_balance(test_app, token, treasury_id) == "5.00"

    def test_actor_is_recorded(self, test_app: TestClient, token_factory, treasury):
        response = post(
            test_app,
            token_factory("accountant-42"),
            treasury_id=treasury["id"],
            type="DEPOSIT",
            amount="3.00",
        )
        assert response.status_code == 200
        assert response.json()["transaction"]["created_by"] == "accountant-42"


class TestOverdraftPolicy:
    def test_overdraft_disabled_by_default(self, container_factory):
        container = container_factory()
        treasury = container.treasury_service.create(
            TreasuryCreateSchema(name="Strict Bank", type="BANK", bank_name="TBC")
        )
        with pytest.raises(InsufficientFunds):
            container.posting_service.post(
                treasury.id, TreasuryTransactionType.WITHDRAWAL, Decimal("1.00")
            )

    def test_overdraft_for_allowed_type(self, container_factory, service_config):
        config = replace(service_config, overdraft_types=["BANK"])
        container = container_factory(config)
        bank = container.treasury_service.create(
            TreasuryCreateSchema(name="Credit Line", type="BANK", bank_name="TBC")
        )
        result = container.posting_service.post(
            bank.id, TreasuryTransactionType.WITHDRAWAL, Decimal("40.00")
        )
        assert result.balance.to_decimal() == Decimal("-40.00")

        # other types keep the strict policy
        cash = container.treasury_service.create(TreasuryCreateSchema(name="Strict Cash"))
        with pytest.raises(InsufficientFunds):
            container.posting_service.post(
                cash.id, TreasuryTransactionType.WITHDRAWAL, Decimal("0.01")
            )

    def test_negative_opening_balance_for_allowed_type(
        self, container_factory, service_config
    ):
        config = replace(service_config, overdraft_types=["BANK"])
        container = container_factory(config)
        bank = container.treasury_service.create(
            TreasuryCreateSchema(
                name="Overdrawn Bank",
                type="BANK",
                bank_name="TBC",
                opening_balance=Decimal("-15.00"),
            )
        )
        assert bank.balance == Decimal("-15.00")
        report = container.reconciliation_service.reconcile(bank.id)
        assert report.consistent


class TestAmountBounds:
    def test_amount_beyond_column_precision(self, test_app: TestClient, token):
        response = post(
            test_app, token, treasury_id=1, type="DEPOSIT", amount="1e30"
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == 1422

    def test_amount_just_beyond_maximum(self, test_app: TestClient, token):
        response = post(
            test_app, token, treasury_id=1, type="DEPOSIT", amount="10000000000000.00"
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == 1422

    def test_balance_cannot_outgrow_columns(self, test_app: TestClient, token):
        response = test_app.post(
            "/treasuries",
            json={"name": "Full Vault", "opening_balance": "9999999999999.99"},
            headers={"x-token": token},
        )
        assert response.status_code == 200
        treasury_id = response.json()["id"]

        response = post(
            test_app, token, treasury_id=treasury_id, type="DEPOSIT", amount="0.01"
        )
        assert response.status_code == 422
        assert get_balance(test_app, token, treasury_id) == "9999999999999.99"
