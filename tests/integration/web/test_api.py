"""
Ledger API tests

Runs the FastAPI app (lifespan included) against a temporary database.
"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from core.config.loader import AppConfig
from web.app import API_VERSION, create_app


@pytest.fixture
def client(tmp_path: Path):
    config = AppConfig(db_path=tmp_path / "api.db", privileged_actors=("owner",))
    with TestClient(create_app(config)) as test_client:
        yield test_client


@pytest.fixture
def ids(client: TestClient) -> dict[str, int]:
    """Account ids keyed by code"""
    return {a["code"]: a["id"] for a in client.get("/api/accounts").json()}


@pytest.fixture
def create_entry(client: TestClient, ids: dict[str, int]):
    def _create(entry_date: str, description: str, *postings, **extra) -> dict:
        response = client.post(
            "/api/journal",
            json={
                "date": entry_date,
                "description": description,
                "lines": [
                    {"account_id": ids[code], "debit": str(debit), "credit": str(credit)}
                    for code, debit, credit in postings
                ],
                **extra,
            },
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _create


class TestHealth:
    """GET /health"""

    def test_health(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": API_VERSION, "database": "ok"}


class TestAccountsApi:
    """/api/accounts"""

    def test_list(self, client: TestClient) -> None:
        response = client.get("/api/accounts", params={"type": "income"})

        assert response.status_code == 200
        assert [a["code"] for a in response.json()] == ["4000", "4100", "4200"]

    def test_create(self, client: TestClient) -> None:
        response = client.post(
            "/api/accounts",
            json={"code": "1150", "name": "Petty Cash", "type": "asset", "role": "cash"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["code"] == "1150"
        assert body["role"] == "cash"
        assert body["is_active"] is True

    def test_create_duplicate(self, client: TestClient) -> None:
        response = client.post(
            "/api/accounts",
            json={"code": "1000", "name": "Cash again", "type": "asset"},
        )

        assert response.status_code == 400
        assert "already exists" in response.json()["detail"]

    def test_create_invalid_type(self, client: TestClient) -> None:
        response = client.post(
            "/api/accounts",
            json={"code": "7000", "name": "X", "type": "revenue"},
        )

        assert response.status_code == 422

    def test_get(self, client: TestClient, ids) -> None:
        assert client.get(f"/api/accounts/{ids['1100']}").json()["name"] == "Bank Account"
        assert client.get("/api/accounts/9999").status_code == 404

    def test_balance(self, client: TestClient, ids, create_entry) -> None:
        create_entry("2024-01-01", "Investment", ("1100", "10000", "0"), ("3000", "0", "10000"))
        create_entry("2024-02-01", "Rent", ("5600", "1500", "0"), ("1100", "0", "1500"))

        response = client.get(f"/api/accounts/{ids['1100']}/balance")
        as_of = client.get(f"/api/accounts/{ids['1100']}/balance", params={"as_of": "2024-01-31"})

        assert response.json()["balance"] == "8500.00"
        assert as_of.json() == {"account_id": ids["1100"], "as_of": "2024-01-31", "balance": "10000.00"}
        assert client.get("/api/accounts/9999/balance").status_code == 404

    def test_deactivate_blocks_postings(self, client: TestClient, ids) -> None:
        response = client.post(f"/api/accounts/{ids['5800']}/deactivate")
        assert response.json()["is_active"] is False

        rejected = client.post(
            "/api/journal",
            json={
                "date": "2024-01-01",
                "description": "Trip",
                "lines": [
                    {"account_id": ids["5800"], "debit": "10"},
                    {"account_id": ids["1000"], "credit": "10"},
                ],
            },
        )
        assert rejected.status_code == 400
        assert rejected.json()["detail"] == "Line 1: Account is inactive"

        assert client.post(f"/api/accounts/{ids['5800']}/activate").json()["is_active"] is True
        assert client.post("/api/accounts/9999/activate").status_code == 404


class TestJournalApi:
    """/api/journal"""

    def test_create(self, create_entry) -> None:
        entry = create_entry(
            "2024-01-31", "Office rent",
            ("5600", "1500", "0"),
            ("1100", "0", "1500"),
            reference="RENT-01",
        )

        assert entry["date"] == "2024-01-31"
        assert entry["entry_type"] == "standard"
        assert entry["is_locked"] is False
        assert entry["total_debits"] == "1500.00"
        assert entry["total_credits"] == "1500.00"
        assert [l["account"]["code"] for l in entry["lines"]] == ["5600", "1100"]
        assert entry["lines"][0]["debit"] == "1500.00"

    def test_create_unbalanced(self, client: TestClient, ids) -> None:
        response = client.post(
            "/api/journal",
            json={
                "date": "2024-01-31",
                "description": "Rent",
                "lines": [
                    {"account_id": ids["5600"], "debit": "1500"},
                    {"account_id": ids["1100"], "credit": "1000"},
                ],
            },
        )

        assert response.status_code == 400
        assert response.json()["detail"] == (
            "Journal entry is not balanced. Debits: $1,500.00, Credits: $1,000.00"
        )

    def test_create_amount_too_large(self, client: TestClient, ids) -> None:
        response = client.post(
            "/api/journal",
            json={
                "date": "2024-01-31",
                "description": "Typo",
                "lines": [
                    {"account_id": ids["5600"], "debit": "100000000000000000"},
                    {"account_id": ids["1100"], "credit": "100000000000000000"},
                ],
            },
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Line 1: Amount too large"

    def test_create_missing_description(self, client: TestClient, ids) -> None:
        response = client.post(
            "/api/journal",
            json={
                "date": "2024-01-31",
                "lines": [
                    {"account_id": ids["5600"], "debit": "1"},
                    {"account_id": ids["1100"], "credit": "1"},
                ],
            },
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Description is required"

    def test_get_and_list(self, client: TestClient, ids, create_entry) -> None:
        rent = create_entry("2024-01-31", "Rent", ("5600", "10", "0"), ("1100", "0", "10"))
        sale = create_entry("2024-02-05", "Sale", ("1000", "20", "0"), ("4000", "0", "20"))

        assert client.get(f"/api/journal/{rent['id']}").json()["description"] == "Rent"
        assert client.get("/api/journal/9999").status_code == 404

        listed = client.get("/api/journal").json()
        filtered = client.get(
            "/api/journal",
            params={"account_id": ids["1000"], "start_date": "2024-02-01"},
        ).json()

        assert [e["id"] for e in listed] == [sale["id"], rent["id"]]
        assert [e["id"] for e in filtered] == [sale["id"]]

    def test_update(self, client: TestClient, ids, create_entry) -> None:
        entry = create_entry("2024-01-31", "Rent", ("5600", "10", "0"), ("1100", "0", "10"))

        response = client.patch(
            f"/api/journal/{entry['id']}",
            json={
                "description": "January rent",
                "lines": [
                    {"account_id": ids["5600"], "debit": "12.50"},
                    {"account_id": ids["1000"], "credit": "12.50"},
                ],
            },
            headers={"X-Actor": "alice"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["description"] == "January rent"
        assert body["total_debits"] == "12.50"
        assert body["updated_at"] is not None

    def test_lock_unlock(self, client: TestClient, create_entry) -> None:
        entry = create_entry("2024-01-31", "Rent", ("5600", "10", "0"), ("1100", "0", "10"))
        entry_id = entry["id"]

        assert client.post(f"/api/journal/{entry_id}/lock").json()["is_locked"] is True

        locked_patch = client.patch(f"/api/journal/{entry_id}", json={"description": "x"})
        assert locked_patch.status_code == 409
        assert locked_patch.json()["detail"] == "Cannot update locked journal entry (period is closed)"
        assert client.delete(f"/api/journal/{entry_id}").status_code == 409

        assert client.post(f"/api/journal/{entry_id}/unlock").status_code == 403
        assert client.post(
            f"/api/journal/{entry_id}/unlock", headers={"X-Actor": "alice"}
        ).status_code == 403

        unlocked = client.post(f"/api/journal/{entry_id}/unlock", headers={"X-Actor": "owner"})
        assert unlocked.status_code == 200
        assert unlocked.json()["is_locked"] is False

    def test_delete(self, client: TestClient, create_entry) -> None:
        entry = create_entry("2024-01-31", "Rent", ("5600", "10", "0"), ("1100", "0", "10"))

        response = client.delete(f"/api/journal/{entry['id']}")

        assert response.status_code == 204
        assert client.get(f"/api/journal/{entry['id']}").status_code == 404
        assert client.delete(f"/api/journal/{entry['id']}").status_code == 404

    def test_reverse(self, client: TestClient, create_entry) -> None:
        entry = create_entry(
            "2024-01-31", "Rent",
            ("5600", "10", "0"),
            ("1100", "0", "10"),
            reference="R-1",
        )

        response = client.post(
            f"/api/journal/{entry['id']}/reverse",
            json={"date": "2024-02-01"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["date"] == "2024-02-01"
        assert body["description"] == "Reversal of: Rent"
        assert body["reference"] == "REV-R-1"
        assert body["entry_type"] == "reversing"
        assert body["reversal_of"] == entry["id"]
        assert [(l["debit"], l["credit"]) for l in body["lines"]] == [
            ("0.00", "10.00"),
            ("10.00", "0.00"),
        ]

    def test_reverse_without_body(self, client: TestClient, create_entry) -> None:
        entry = create_entry("2024-01-31", "Rent", ("5600", "10", "0"), ("1100", "0", "10"))

        response = client.post(f"/api/journal/{entry['id']}/reverse")

        assert response.status_code == 201
        assert client.post("/api/journal/9999/reverse").status_code == 404

    def test_history(self, client: TestClient, create_entry) -> None:
        entry = create_entry("2024-01-31", "Rent", ("5600", "10", "0"), ("1100", "0", "10"))
        client.post(f"/api/journal/{entry['id']}/lock", headers={"X-Actor": "alice"})

        history = client.get(f"/api/journal/{entry['id']}/history").json()

        assert [(h["action"], h["user"]) for h in history] == [
            ("lock", "alice"),
            ("create", "system"),
        ]
        assert history[1]["new_value"]["description"] == "Rent"


class TestReportsApi:
    """/api/reports"""

    @pytest.fixture
    def books(self, create_entry) -> None:
        create_entry("2024-01-01", "Owner investment", ("1100", "10000", "0"), ("3000", "0", "10000"))
        create_entry("2024-01-15", "Consulting", ("1200", "2500", "0"), ("4100", "0", "2500"))
        create_entry("2024-01-31", "Office rent", ("5600", "1500", "0"), ("1100", "0", "1500"))

    def test_trial_balance(self, client: TestClient, books) -> None:
        rows = client.get("/api/reports/trial-balance").json()
        check = client.get("/api/reports/trial-balance/verify").json()

        assert [(r["code"], r["debit"], r["credit"]) for r in rows] == [
            ("1100", "8500.00", "0.00"),
            ("1200", "2500.00", "0.00"),
            ("3000", "0.00", "10000.00"),
            ("4100", "0.00", "2500.00"),
            ("5600", "1500.00", "0.00"),
        ]
        assert check == {
            "total_debits": "12500.00",
            "total_credits": "12500.00",
            "difference": "0.00",
            "is_balanced": True,
        }

    def test_general_ledger(self, client: TestClient, ids, books) -> None:
        ledger = client.get(
            f"/api/reports/general-ledger/{ids['1100']}",
            params={"start_date": "2024-01-15", "include_opening_balance": True},
        ).json()

        assert ledger["account"]["code"] == "1100"
        assert ledger["opening_balance"] == "10000.00"
        assert ledger["closing_balance"] == "8500.00"
        assert [p["balance"] for p in ledger["postings"]] == ["8500.00"]
        assert client.get("/api/reports/general-ledger/9999").status_code == 404

    def test_balance_sheet(self, client: TestClient, books) -> None:
        sheet = client.get("/api/reports/balance-sheet", params={"as_of": "2024-01-31"}).json()

        assert sheet["date"] == "2024-01-31"
        assert sheet["assets"]["cash"] == "8500.00"
        assert sheet["assets"]["receivables"] == "2500.00"
        assert sheet["equity"]["retained_earnings"] == "1000.00"
        assert sheet["equity"]["items"][-1]["code"] == "RE"
        assert sheet["is_balanced"] is True

    def test_profit_loss(self, client: TestClient, books) -> None:
        pl = client.get(
            "/api/reports/profit-loss",
            params={"from_date": "2024-01-01", "to_date": "2024-01-31"},
        ).json()

        assert pl["revenue"]["total"] == "2500.00"
        assert pl["expenses"]["items"] == [
            {"code": "5600", "name": "Rent", "amount": "1500.00"}
        ]
        assert pl["net_income"] == "1000.00"

    def test_profit_loss_requires_dates(self, client: TestClient) -> None:
        response = client.get("/api/reports/profit-loss", params={"from_date": "2024-01-01"})

        assert response.status_code == 422

    def test_cash_flow(self, client: TestClient, books) -> None:
        flow = client.get(
            "/api/reports/cash-flow",
            params={"from_date": "2024-01-01", "to_date": "2024-01-31"},
        ).json()

        assert flow["inflows"]["items"] == [{"description": "Owner Equity", "amount": "10000.00"}]
        assert flow["outflows"]["items"] == [{"description": "Rent", "amount": "1500.00"}]
        assert flow["closing_balance"] == "8500.00"

    def test_receivables_aging(self, client: TestClient) -> None:
        aging = client.get(
            "/api/reports/receivables-aging", params={"as_of": "2024-06-30"}
        ).json()

        assert aging["as_of"] == "2024-06-30"
        assert aging["current"] == []
        assert aging["totals"]["total"] == "0.00"

    def test_expenses_by_category(self, client: TestClient, books) -> None:
        categories = client.get(
            "/api/reports/expenses-by-category",
            params={"from_date": "2024-01-01", "to_date": "2024-01-31"},
        ).json()

        assert categories == [{"category": "Rent", "amount": "1500.00", "percentage": 100}]
