"""
End-to-end tests of the REST surface through FastAPI's TestClient.
"""

import pytest


def data(response):
    body = response.json()
    assert body["ok"] is True, body
    return body["data"]


def create_account(client, **overrides):
    payload = {"name": "Card", "type": "card", "balance": 1000, **overrides}
    return data(client.post("/api/accounts", json=payload))


class TestEnvelope:

    def test_health(self, client):
        assert client.get("/api/health").json() == {"ok": True}

    def test_validation_error_is_400(self, client):
        response = client.post("/api/accounts", json={"name": "No type"})
        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "name and type are required"}

    def test_malformed_body_is_400(self, client):
        response = client.post("/api/transactions", json={"amount": "lots"})
        assert response.status_code == 400
        assert response.json()["ok"] is False

    def test_unknown_entity_is_404(self, client):
        response = client.get("/api/accounts/nope")
        assert response.status_code == 404
        assert response.json() == {"ok": False, "error": "Account 'nope' not found"}

    def test_unknown_route_uses_envelope(self, client):
        response = client.get("/api/unknown")
        assert response.status_code == 404
        assert response.json()["ok"] is False


class TestAccountsApi:

    def test_create_list_patch_close(self, client):
        account = create_account(client)
        assert account["balance"] == 1000
        assert account["isActive"] is True

        patched = data(client.patch(f"/api/accounts/{account['id']}", json={"name": "Daily"}))
        assert patched["name"] == "Daily"

        data(client.delete(f"/api/accounts/{account['id']}"))
        assert data(client.get("/api/accounts")) == []
        assert len(data(client.get("/api/accounts", params={"includeInactive": True}))) == 1

    def test_patch_balance_rejected(self, client):
        account = create_account(client)
        response = client.patch(f"/api/accounts/{account['id']}", json={"balance": 1})
        assert response.status_code == 400
        assert data(client.get(f"/api/accounts/{account['id']}"))["balance"] == 1000

    def test_transactions(self, client):
        account = create_account(client)
        tx = data(client.post("/api/transactions", json={
            "accountId": account["id"], "amount": 250.5, "type": "expense",
            "description": "Groceries", "date": "2024-01-10",
        }))
        assert tx["amount"] == -250.5
        assert tx["date"].startswith("2024-01-10")

        listed = data(client.get("/api/transactions", params={"accountId": account["id"]}))
        assert [t["id"] for t in listed] == [tx["id"]]
        assert data(client.get(f"/api/accounts/{account['id']}"))["balance"] == 749.5

    def test_transaction_for_unknown_account(self, client):
        response = client.post("/api/transactions", json={"accountId": "x", "amount": 1, "type": "income"})
        assert response.status_code == 404

    def test_deposit_interest_flow(self, client, clock):
        account = create_account(client, name="Savings", type="deposit", balance=0, interestRate=5)
        assert account["interestRate"] == 5

        moved = data(client.post(f"/api/accounts/{account['id']}/deposit", json={"amount": 100000}))
        assert moved["account"]["balance"] == 100000

        clock.advance(days=365)
        state = data(client.get(f"/api/accounts/{account['id']}/interest"))
        assert state["accruedInterest"] == 5000

        applied = data(client.post(f"/api/accounts/{account['id']}/interest/apply"))
        assert applied["amount"] == 5000
        assert applied["account"]["balance"] == 105000

        again = data(client.post(f"/api/accounts/{account['id']}/interest/apply"))
        assert again["amount"] == 0

    def test_rate_on_card_rejected(self, client):
        account = create_account(client)
        response = client.post(f"/api/accounts/{account['id']}/rate", json={"rate": 3})
        assert response.status_code == 400


class TestGoalsApi:

    def test_contribution_completes_goal(self, client):
        account = create_account(client)
        goal = data(client.post("/api/goals", json={"name": "Laptop", "targetAmount": 500}))

        updated = data(client.post(f"/api/goals/{goal['id']}/contributions", json={
            "amount": 500, "accountId": account["id"],
        }))
        assert updated["isCompleted"] is True
        assert updated["currentAmount"] == 500
        assert data(client.get(f"/api/accounts/{account['id']}"))["balance"] == 500

    def test_contribution_with_from_account_id(self, client):
        account = create_account(client)
        goal = data(client.post("/api/goals", json={"name": "Bike", "targetAmount": 1000}))

        updated = data(client.post(f"/api/goals/{goal['id']}/contributions", json={
            "amount": 100, "fromAccountId": account["id"],
        }))
        assert updated["currentAmount"] == 100
        assert updated["isCompleted"] is False
        assert data(client.get(f"/api/accounts/{account['id']}"))["balance"] == 900

    def test_contribution_without_account(self, client):
        goal = data(client.post("/api/goals", json={"name": "Bike", "targetAmount": 1000}))
        response = client.post(f"/api/goals/{goal['id']}/contributions", json={"amount": 100})
        assert response.status_code == 400
        assert response.json()["error"] == "fromAccountId is required"

    def test_close_goal(self, client):
        goal = data(client.post("/api/goals", json={"name": "Laptop", "targetAmount": 500}))
        closed = data(client.delete(f"/api/goals/{goal['id']}"))
        assert closed["isActive"] is False

    def test_invalid_target(self, client):
        response = client.post("/api/goals", json={"name": "Laptop", "targetAmount": 0})
        assert response.status_code == 400


class TestRemindersApi:

    def test_crud(self, client):
        created = data(client.post("/api/reminders", json={
            "title": "Pay rent", "nextDate": "2024-02-01T09:00:00Z", "type": "payment", "frequency": "monthly",
        }))
        assert created["frequency"] == "monthly"

        patched = data(client.patch(f"/api/reminders/{created['id']}", json={"isActive": False}))
        assert patched["isActive"] is False

        data(client.delete(f"/api/reminders/{created['id']}"))
        assert client.get(f"/api/reminders/{created['id']}").status_code == 404

    def test_bad_frequency(self, client):
        response = client.post("/api/reminders", json={
            "title": "X", "nextDate": "2024-02-01", "frequency": "hourly",
        })
        assert response.status_code == 400


class TestImportApi:

    CSV = "Дата операции;Описание операции;Сумма операции\n15.01.2024;Зарплата;1 234,56\n16.01.2024;Кафе;-234,56\n"

    def test_templates(self, client):
        ids = [t["id"] for t in data(client.get("/api/import/templates"))]
        assert ids == ["sberbank", "tinkoff", "alfabank", "custom"]

    def test_preview_and_import(self, client):
        account = create_account(client, balance=0)
        files = {"file": ("statement.csv", self.CSV.encode("utf-8"), "text/csv")}

        preview = data(client.post("/api/import/preview", files=files, data={"bank": "sberbank"}))
        assert [p["amount"] for p in preview] == [1234.56, 234.56]
        assert [p["type"] for p in preview] == ["income", "expense"]

        result = data(client.post("/api/import", files=files, data={"bank": "sberbank", "accountId": account["id"]}))
        assert result["imported"] == 2
        assert data(client.get(f"/api/accounts/{account['id']}"))["balance"] == 1000

    def test_parse_error_is_400(self, client):
        account = create_account(client)
        bad = "Дата операции;Описание операции;Сумма операции\nsoon;Кафе;-10\n"
        files = {"file": ("statement.csv", bad.encode("utf-8"), "text/csv")}
        response = client.post("/api/import", files=files, data={"bank": "sberbank", "accountId": account["id"]})
        assert response.status_code == 400
        assert response.json()["error"].startswith("Row 1")


class TestMiscApi:

    def test_token_and_settings(self, client):
        data(client.post("/api/token", json={"token": "abc"}))
        assert data(client.get("/api/token")) == {"token": "abc"}
        settings = data(client.patch("/api/settings", json={"theme": "dark"}))
        assert settings["theme"] == "dark"
        assert settings["hasBrokerToken"] is True

    def test_categories_filter(self, client):
        expense = data(client.get("/api/categories", params={"type": "expense"}))
        assert len(expense) == 8
        assert all(c["type"] == "expense" for c in expense)

    def test_push_and_notifications(self, client):
        assert "publicKey" in data(client.get("/api/push/public-key"))
        data(client.post("/api/push/subscribe", json={
            "endpoint": "https://push.test/1", "keys": {"p256dh": "k", "auth": "a"},
        }))
        sent = data(client.post("/api/push/test"))
        assert sent["type"] == "test"
        assert data(client.get("/api/notifications"))[0]["id"] == sent["id"]

    def test_broker_sync_without_token(self, client, monkeypatch):
        import services.broker_service as broker_module

        monkeypatch.setattr(broker_module, "TINKOFF_TOKEN", "")
        result = data(client.post("/api/sync/broker"))
        assert result["status"] == "no_credential"
        assert client.get("/api/broker/accounts").status_code == 400

    def test_stats(self, client):
        create_account(client)
        overview = data(client.get("/api/stats/overview"))
        assert overview["totalBalance"] == 1000
        assert len(data(client.get("/api/stats/monthly", params={"months": 4}))) == 4
