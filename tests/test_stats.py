from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from ledger.models.base import utcnow

@pytest.fixture(scope="class")
def company(test_app: TestClient, token):
    response = test_app.post(
        "/companies", json={"name": "Stats Company"}, headers={"x-token": token}
    )
    assert response.status_code == 200
    return response.json()


@pytest.fixture(scope="class")
def treasuries(test_app: TestClient, token, company):
    created = {}
    for key, payload in {
        "cash": {"name": "Stats Cash", "opening_balance": "100.00"},
        "bank": {
            "name": "Stats Bank",
            "type": "BANK",
            "bank_name": "TBC",
            "opening_balance": "50.00",
        },
        "company": {
            "name": "Stats Company Safe",
            "type": "COMPANY",
            "company_id": company["id"],
            "opening_balance": "25.50",
        },
        "closed": {"name": "Stats Closed", "opening_balance": "1000.00"},
    }.items():
        response = test_app.post("/treasuries", json=payload, headers={"x-token": token})
        assert response.status_code == 200
        created[key] = response.json()
    response = test_app.post(
        f"/treasuries/{created['closed']['id']}/deactivate",
        headers={"x-token": token},
    )
    assert response.status_code == 200
    return created


def by_type(data: dict) -> dict:
    return {item["type"]: item for item in data["by_type"]}


class TestTreasuryStats:
    def test_balance_totals(self, test_app: TestClient, token, treasuries):
        response = test_app.get("/treasuries/stats", headers={"x-token": token})
        assert response.status_code == 200
        data = response.json()
        totals = by_type(data)
        # bootstrap "cash" treasury is GENERAL with zero balance
        assert totals["GENERAL"] == {
            "type": "GENERAL",
            "treasury_count": 2,
            "balance": "100.00",
        }
        assert totals["BANK"]["balance"] == "50.00"
        assert totals["BANK"]["treasury_count"] == 1
        assert totals["COMPANY"]["balance"] == "25.50"
        assert data["treasury_count"] == 4
        assert data["total_balance"] == "175.50"

    def test_balance_totals_with_inactive(self, test_app: TestClient, token, treasuries):
        response = test_app.get(
            "/treasuries/stats",
            params={"include_inactive": True},
            headers={"x-token": token},
        )
        data = response.json()
        assert by_type(data)["GENERAL"]["balance"] == "1100.00"
        assert data["treasury_count"] == 5
        assert data["total_balance"] == "1175.50"

    def test_flow(self, test_app: TestClient, token, treasuries):
        cash_id = treasuries["cash"]["id"]
        bank_id = treasuries["bank"]["id"]
        for payload in [
            {"treasury_id": cash_id, "type": "DEPOSIT", "amount": "40.00"},
            {"treasury_id": cash_id, "type": "DEPOSIT", "amount": "2.00"},
            {"treasury_id": bank_id, "type": "WITHDRAWAL", "amount": "10.00"},
        ]:
            response = test_app.post(
                "/treasury-transactions", json=payload, headers={"x-token": token}
            )
            assert response.status_code == 200
        # transfers move money around and do not count as flow
        response = test_app.post(
            "/treasury-transactions/transfer",
            json={"from_treasury_id": cash_id, "to_treasury_id": bank_id, "amount": "5"},
            headers={"x-token": token},
        )
        assert response.status_code == 200

        response = test_app.get("/treasuries/stats/flow", headers={"x-token": token})
        assert response.status_code == 200
        data = response.json()
        assert data["timeframe_from"] == utcnow().date().replace(day=1).isoformat()
        assert data["deposits"]["total"] == "42.00"
        assert data["deposits"]["breakdown"] == [
            {
                "treasury_id": cash_id,
                "name": "Stats Cash",
                "type": "GENERAL",
                "amount": "42.00",
            }
        ]
        assert data["withdrawals"]["total"] == "10.00"
        assert data["withdrawals"]["breakdown"][0]["name"] == "Stats Bank - TBC"

    def test_flow_outside_timeframe(self, test_app: TestClient, token, treasuries):
        past = utcnow().date() - timedelta(days=400)
        response = test_app.get(
            "/treasuries/stats/flow",
            params={
                "timeframe_from": past.isoformat(),
                "timeframe_to": (past + timedelta(days=30)).isoformat(),
            },
            headers={"x-token": token},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["deposits"] == {"total": "0.00", "breakdown": []}
        assert data["withdrawals"] == {"total": "0.00", "breakdown": []}

    def test_flow_inverted_timeframe(self, test_app: TestClient, token):
        response = test_app.get(
            "/treasuries/stats/flow",
            params={"timeframe_from": "2024-02-01", "timeframe_to": "2024-01-01"},
            headers={"x-token": token},
        )
        assert response.status_code == 422
