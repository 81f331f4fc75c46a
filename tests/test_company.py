from fastapi.testclient import TestClient


class TestCompanyEndpoints:
    def test_bootstrap_company(self, test_app: TestClient, token):
        response = test_app.get("/companies/1", headers={"x-token": token})
        assert response.status_code == 200
        assert response.json()["code"] == "HQ"

    def test_create_company(self, test_app: TestClient, token):
        response = test_app.post(
            "/companies",
            json={"name": "Branch Office", "code": "BR1"},
            headers={"x-token": token},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Branch Office"
        assert data["active"] is True

    def test_update_company(self, test_app: TestClient, token):
        response = test_app.post(
            "/companies", json={"name": "Renamed Later"}, headers={"x-token": token}
        )
        company_id = response.json()["id"]
        response = test_app.patch(
            f"/companies/{company_id}",
            json={"name": "Renamed", "active": False},
            headers={"x-token": token},
        )
        assert response.status_code == 200
        assert response.json()["name"] == "Renamed"
        assert response.json()["active"] is False

    def test_filter_companies(self, test_app: TestClient, token):
        response = test_app.get(
            "/companies", params={"active": False}, headers={"x-token": token}
        )
        assert response.status_code == 200
        assert all(item["active"] is False for item in response.json()["items"])
