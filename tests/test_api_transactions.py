"""Tests for the transaction endpoints."""

from fastapi.testclient import TestClient

from conftest import insert_transaction, register_and_login

EXPENSE = {
    "type": "Expense",
    "category": "Food",
    "amount": 85.5,
    "description": "Grocery shopping",
    "date": "2025-09-24",
}
INCOME = {"type": "Income", "amount": 3500, "date": "2025-09-23"}


def _user_id(client: TestClient, headers: dict) -> int:
    return client.get("/auth/me", headers=headers).json()["id"]


class TestCreateTransaction:
    """Tests for POST /transactions."""

    def test_create(self, client: TestClient, auth_headers: dict) -> None:
        resp = client.post("/transactions", json=EXPENSE, headers=auth_headers)
        assert resp.status_code == 201
        body = resp.json()
        assert body["type"] == "Expense"
        assert body["amount"] == 85.5
        assert body["date"] == "2025-09-24"
        assert body["created_at"]
        assert body["user_id"] == _user_id(client, auth_headers)

    def test_optional_fields_default_to_empty(self, client: TestClient, auth_headers: dict) -> None:
        body = client.post("/transactions", json=INCOME, headers=auth_headers).json()
        assert body["category"] == ""
        assert body["description"] == ""

    def test_requires_auth(self, client: TestClient) -> None:
        assert client.post("/transactions", json=EXPENSE).status_code == 401

    def test_rejects_negative_amount(self, client: TestClient, auth_headers: dict) -> None:
        resp = client.post("/transactions", json={**EXPENSE, "amount": -5}, headers=auth_headers)
        assert resp.status_code == 422

    def test_rejects_expense_without_category(self, client: TestClient, auth_headers: dict) -> None:
        payload = {k: v for k, v in EXPENSE.items() if k != "category"}
        resp = client.post("/transactions", json=payload, headers=auth_headers)
        assert resp.status_code == 422

    def test_rejects_unknown_type(self, client: TestClient, auth_headers: dict) -> None:
        resp = client.post("/transactions", json={**EXPENSE, "type": "Transfer"}, headers=auth_headers)
        assert resp.status_code == 422


class TestListTransactions:
    """Tests for GET /transactions."""

    def test_newest_first(self, client: TestClient, auth_headers: dict) -> None:
        user_id = _user_id(client, auth_headers)
        insert_transaction(user_id, days_ago=3, description="old")
        insert_transaction(user_id, days_ago=1, description="new")
        insert_transaction(user_id, days_ago=2, description="middle")

        resp = client.get("/transactions", headers=auth_headers)
        assert resp.status_code == 200
        assert [tx["description"] for tx in resp.json()] == ["new", "middle", "old"]

    def test_range_filters_on_created_at(self, client: TestClient, auth_headers: dict) -> None:
        user_id = _user_id(client, auth_headers)
        insert_transaction(user_id, days_ago=2, description="recent")
        insert_transaction(user_id, days_ago=20, description="older")

        recent = client.get("/transactions", params={"range": "last7days"}, headers=auth_headers).json()
        assert [tx["description"] for tx in recent] == ["recent"]

        month = client.get("/transactions", params={"range": "last30days"}, headers=auth_headers).json()
        assert [tx["description"] for tx in month] == ["recent", "older"]

    def test_pagination(self, client: TestClient, auth_headers: dict) -> None:
        user_id = _user_id(client, auth_headers)
        for day in range(1, 16):
            insert_transaction(user_id, days_ago=day, description=f"day-{day}")

        first = client.get("/transactions", headers=auth_headers).json()
        assert len(first) == 10
        assert first[0]["description"] == "day-1"

        rest = client.get("/transactions", params={"offset": 10, "limit": 10}, headers=auth_headers).json()
        assert [tx["description"] for tx in rest] == [f"day-{d}" for d in range(11, 16)]

    def test_rejects_bad_limit(self, client: TestClient, auth_headers: dict) -> None:
        resp = client.get("/transactions", params={"limit": 0}, headers=auth_headers)
        assert resp.status_code == 422

    def test_only_own_transactions(self, client: TestClient, auth_headers: dict) -> None:
        client.post("/transactions", json=EXPENSE, headers=auth_headers)
        other = register_and_login(client, email="bob@example.com")
        assert client.get("/transactions", headers=other).json() == []


class TestUpdateTransaction:
    """Tests for PUT /transactions/{id}."""

    def test_update(self, client: TestClient, auth_headers: dict) -> None:
        tx_id = client.post("/transactions", json=EXPENSE, headers=auth_headers).json()["id"]

        resp = client.put(
            f"/transactions/{tx_id}",
            json={**EXPENSE, "amount": 90, "date": "2025-09-20"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["amount"] == 90
        assert body["date"] == "2025-09-20"

    def test_missing(self, client: TestClient, auth_headers: dict) -> None:
        resp = client.put("/transactions/999", json=EXPENSE, headers=auth_headers)
        assert resp.status_code == 404

    def test_cannot_update_other_users_transaction(self, client: TestClient, auth_headers: dict) -> None:
        tx_id = client.post("/transactions", json=EXPENSE, headers=auth_headers).json()["id"]
        other = register_and_login(client, email="bob@example.com")

        resp = client.put(f"/transactions/{tx_id}", json={**EXPENSE, "amount": 1}, headers=other)
        assert resp.status_code == 404

        mine = client.get("/transactions", headers=auth_headers).json()
        assert mine[0]["amount"] == 85.5


class TestDeleteTransaction:
    """Tests for DELETE /transactions/{id}."""

    def test_delete(self, client: TestClient, auth_headers: dict) -> None:
        tx_id = client.post("/transactions", json=EXPENSE, headers=auth_headers).json()["id"]

        assert client.delete(f"/transactions/{tx_id}", headers=auth_headers).status_code == 204
        assert client.get("/transactions", headers=auth_headers).json() == []
        assert client.delete(f"/transactions/{tx_id}", headers=auth_headers).status_code == 404

    def test_cannot_delete_other_users_transaction(self, client: TestClient, auth_headers: dict) -> None:
        tx_id = client.post("/transactions", json=EXPENSE, headers=auth_headers).json()["id"]
        other = register_and_login(client, email="bob@example.com")

        assert client.delete(f"/transactions/{tx_id}", headers=other).status_code == 404
        assert len(client.get("/transactions", headers=auth_headers).json()) == 1
