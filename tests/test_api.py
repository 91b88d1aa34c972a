"""
API HTTP (/api)
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from app import config
from app.crud import ledger as store


def _money(value) -> Decimal:
    return Decimal(str(value))


def _closing(client, **counts):
    payload = {"person_name": "Sam", "photo_path": "photo-1.jpg", **counts}
    return client.post("/api/daily-closing", json=payload)


def _withdrawal(client, name="Alex", amount="50.00", reason="Compras"):
    return client.post("/api/cash-withdrawal", json={
        "recipient_name": name, "amount": amount, "reason": reason, "photo_path": "photo-2.jpg",
    })


def _spending(client, name="Alex", amount="20.00", **extra):
    payload = {"user_name": name, "amount": amount, "description": "Café", "photo_path": "photo-3.jpg"}
    payload.update(extra)
    return client.post("/api/cash-spending", json=payload)


@pytest.fixture
def funded(client):
    """Corte de 43 y retiro de 50 para Alex vía HTTP."""
    assert _closing(client, bills_20=2, coins_loonies=3).status_code == 200
    assert _withdrawal(client).status_code == 200
    return client


class TestHealth:
    def test_health(self, client) -> None:
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json()["status"] == "OK"
        assert "timestamp" in response.json()


class TestMovements:
    """POST de movimientos"""

    def test_daily_closing(self, client) -> None:
        response = _closing(client, bills_20=2, coins_loonies=3)

        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert _money(body["total_amount"]) == Decimal("43.00")
        assert len(body["transaction_id"]) == 36

    def test_withdrawal_then_balances(self, funded) -> None:
        till = funded.get("/api/cash-balance").json()
        balances = funded.get("/api/user-balances").json()

        assert _money(till["total_till_cash"]) == Decimal("-7.00")
        assert till["updated_by"] == "Alex"
        assert [b["name"] for b in balances] == ["Alex"]
        assert _money(balances[0]["total_cash"]) == Decimal("50.00")

    def test_spending(self, funded) -> None:
        response = _spending(funded)

        body = response.json()
        assert response.status_code == 200
        assert _money(body["new_balance"]) == Decimal("30.00")
        assert body["till_balance"] is None
        assert _money(funded.get("/api/cash-balance").json()["total_till_cash"]) == Decimal("-7.00")

    def test_overspend(self, funded) -> None:
        """400 con el saldo disponible"""
        _spending(funded)

        response = _spending(funded, amount="40.00")

        body = response.json()
        assert response.status_code == 400
        assert body["code"] == "INSUFFICIENT_FUNDS"
        assert body["fields"] == ["amount"]
        assert _money(body["available"]) == Decimal("30.00")
        assert _money(funded.get("/api/user-balances").json()[0]["total_cash"]) == Decimal("30.00")

    def test_spending_unknown_person(self, client) -> None:
        response = _spending(client, name="Fantasma")

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_missing_fields(self, client) -> None:
        response = client.post("/api/cash-withdrawal", json={})

        body = response.json()
        assert response.status_code == 400
        assert body["code"] == "VALIDATION_ERROR"
        assert body["fields"] == ["recipient_name", "amount", "reason", "photo_path"]
        assert client.get("/api/transactions").json() == []

    def test_negative_counts(self, client) -> None:
        response = _closing(client, bills_50=-2)

        assert response.status_code == 400
        assert response.json()["fields"] == ["bills_50"]

    def test_malformed_amount(self, client) -> None:
        """Monto no numérico -> 422 de FastAPI"""
        response = _withdrawal(client, amount="mucho")

        assert response.status_code == 422

    def test_invalid_category(self, funded) -> None:
        response = _spending(funded, category="Casino")

        assert response.status_code == 400
        assert response.json()["fields"] == ["category"]

    def test_deposit(self, funded) -> None:
        response = funded.post("/api/cash-deposit", json={
            "user_name": "Alex", "amount": "10.00", "photo_path": "photo-4.jpg",
        })

        body = response.json()
        assert response.status_code == 200
        assert _money(body["new_balance"]) == Decimal("40.00")
        assert _money(body["till_balance"]) == Decimal("3.00")


class TestTransactions:
    """GET /api/transactions"""

    def test_recent_first(self, funded) -> None:
        _spending(funded, category="Food")

        rows = funded.get("/api/transactions").json()

        assert [r["type"] for r in rows] == ["cash_spending", "cash_withdrawal", "daily_closing"]
        assert rows[0]["spending_category"] == "Food"
        assert rows[0]["user_name"] == "Alex"
        assert rows[2]["counted_by"] == "Sam"
        assert rows[2]["bills_20"] == 2

    def test_limit(self, funded) -> None:
        assert len(funded.get("/api/transactions", params={"limit": 1}).json()) == 1

    def test_limit_out_of_range(self, client) -> None:
        assert client.get("/api/transactions", params={"limit": 0}).status_code == 422


class TestReconcileEndpoints:
    def test_get_report(self, funded) -> None:
        body = funded.get("/api/cash-balance/reconcile").json()

        assert _money(body["till_drift"]) == Decimal("0")
        assert body["persons"] == []
        assert body["transactions_replayed"] == 2
        assert body["repaired"] is False

    def test_post_repairs(self, funded) -> None:
        body = funded.post("/api/cash-balance/reconcile").json()

        assert body["repaired"] is True


class TestPhotos:
    """POST /api/upload-photo"""

    def test_upload_image(self, client) -> None:
        response = client.post(
            "/api/upload-photo",
            files={"photo": ("cajon.jpg", b"\xff\xd8\xff\xe0fake-jpeg", "image/jpeg")},
        )

        body = response.json()
        assert response.status_code == 200
        assert body["photo_path"].startswith("photo-")
        assert body["photo_path"].endswith(".jpg")
        assert body["session_id"]
        assert (config.UPLOAD_DIR / body["photo_path"]).exists()

    def test_rejects_non_image(self, client) -> None:
        response = client.post(
            "/api/upload-photo",
            files={"photo": ("notas.txt", b"hola", "text/plain")},
        )

        assert response.status_code == 400
        assert response.json()["fields"] == ["photo"]

    def test_photo_is_required(self, client) -> None:
        assert client.post("/api/upload-photo").status_code == 422


class TestExport:
    def test_transactions_xlsx(self, funded) -> None:
        response = funded.get("/api/reports/transactions.xlsx")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert "attachment" in response.headers["content-disposition"]
        assert response.content[:2] == b"PK"


class TestLimits:
    """Montos y conteos fuera de rango"""

    def test_huge_count_is_a_validation_error(self, client) -> None:
        response = _closing(client, coins_pennies=2**63)

        body = response.json()
        assert response.status_code == 400
        assert body["code"] == "VALIDATION_ERROR"
        assert body["fields"] == ["coins_pennies"]
        assert _money(client.get("/api/cash-balance").json()["total_till_cash"]) == Decimal("0.00")

    def test_huge_amount_not_acknowledged(self, client) -> None:
        """El monto que no cabe en la columna se rechaza, no se guarda aproximado"""
        response = _withdrawal(client, amount="12345678901234567.89")

        assert response.status_code == 400
        assert response.json()["fields"] == ["amount"]
        assert client.get("/api/user-balances").json() == []
        assert client.get("/api/transactions").json() == []


class TestServerErrors:
    """Errores 5xx"""

    @pytest.fixture
    def broken_storage(self, monkeypatch):
        def io_error(*args, **kwargs):
            raise OperationalError("UPDATE till_balance", {}, Exception("disk I/O error"))

        monkeypatch.setattr(store, "adjust_till_balance", io_error)

    def test_storage_error_payload(self, client, broken_storage) -> None:
        response = _withdrawal(client)

        body = response.json()
        assert response.status_code == 500
        assert body["code"] == "STORAGE_ERROR"
        assert body["detail"] == "Error al escribir en la base de datos"

    def test_detail_hidden_in_production(self, client, broken_storage, monkeypatch) -> None:
        monkeypatch.setattr(config, "IS_PRODUCTION", True)

        response = _withdrawal(client)

        body = response.json()
        assert response.status_code == 500
        assert body["code"] == "STORAGE_ERROR"
        assert body["detail"] == "Error interno del servidor"

    def test_client_errors_keep_detail_in_production(self, client, monkeypatch) -> None:
        monkeypatch.setattr(config, "IS_PRODUCTION", True)

        response = _spending(client, name="Fantasma")

        assert response.status_code == 404
        assert "Fantasma" in response.json()["detail"]


class TestPhotoLimits:
    """Tamaño de la foto"""

    def test_oversized_photo_leaves_no_file(self, client, monkeypatch) -> None:
        monkeypatch.setattr(config, "MAX_PHOTO_BYTES", 16)
        before = set(config.UPLOAD_DIR.iterdir())

        response = client.post(
            "/api/upload-photo",
            files={"photo": ("cajon.png", b"\x89PNG" + b"0" * 32, "image/png")},
        )

        assert response.status_code == 400
        assert response.json()["fields"] == ["photo"]
        assert set(config.UPLOAD_DIR.iterdir()) == before

    def test_photo_at_limit(self, client, monkeypatch) -> None:
        monkeypatch.setattr(config, "MAX_PHOTO_BYTES", 16)

        response = client.post(
            "/api/upload-photo",
            files={"photo": ("cajon.png", b"\x89PNG" + b"0" * 12, "image/png")},
        )

        assert response.status_code == 200

    def test_empty_photo(self, client) -> None:
        before = set(config.UPLOAD_DIR.iterdir())

        response = client.post(
            "/api/upload-photo",
            files={"photo": ("cajon.jpg", b"", "image/jpeg")},
        )

        assert response.status_code == 400
        assert set(config.UPLOAD_DIR.iterdir()) == before
