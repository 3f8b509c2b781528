"""Tests for expense API endpoints."""

from decimal import Decimal


def expense_payload(**overrides):
    payload = {
        "amount": "25.90",
        "date": "2024-05-12",
        "location": "Mercado Livre",
        "time": "19:05",
    }
    payload.update(overrides)
    return payload


class TestExpensesAPI:
    """Test expenses CRUD endpoints."""

    def test_list_expenses(self, client, sample_expense):
        response = client.get("/api/v1/expenses")
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        item = data["items"][0]
        assert item["category_name"] == "Alimentação"
        assert item["subcategory_name"] == "Supermercado"
        assert item["month"] == 5

    def test_list_by_month(self, client, sample_expense):
        """Only expenses dated inside the month are returned."""
        assert client.get("/api/v1/expenses", params={"year": 2024, "month": 5}).json()["total"] == 1
        assert client.get("/api/v1/expenses", params={"year": 2024, "month": 6}).json()["total"] == 0

    def test_year_without_month(self, client):
        response = client.get("/api/v1/expenses", params={"year": 2024})
        assert response.status_code == 422

    def test_create_by_subcategory_id(self, client, sample_subcategory):
        response = client.post("/api/v1/expenses", json=expense_payload(subcategory_id=sample_subcategory.id))
        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["amount"]) == Decimal("25.90")
        assert data["status"] == "approved"
        assert data["category_name"] == "Alimentação"

    def test_create_by_names(self, client, sample_subcategory):
        """Category and subcategory names are resolved ignoring accents and case."""
        response = client.post("/api/v1/expenses", json=expense_payload(
            category_name="alimentacao",
            subcategory_name="SUPERMERCADO"
        ))
        assert response.status_code == 201
        assert response.json()["subcategory_id"] == sample_subcategory.id

    def test_create_with_unknown_names(self, client, sample_subcategory):
        response = client.post("/api/v1/expenses", json=expense_payload(
            category_name="Alimentação",
            subcategory_name="Cinema"
        ))
        assert response.status_code == 404

    def test_create_without_subcategory(self, client):
        response = client.post("/api/v1/expenses", json=expense_payload())
        assert response.status_code == 422

    def test_create_negative_amount(self, client, sample_subcategory):
        response = client.post("/api/v1/expenses", json=expense_payload(
            amount="-1",
            subcategory_id=sample_subcategory.id
        ))
        assert response.status_code == 422

    def test_update_expense(self, client, sample_expense):
        """PUT replaces every field."""
        response = client.put(f"/api/v1/expenses/{sample_expense.id}", json=expense_payload(
            amount="99.99",
            subcategory_id=sample_expense.subcategory_id
        ))
        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["amount"]) == Decimal("99.99")
        assert data["location"] == "Mercado Livre"
        assert data["date"] == "2024-05-12"

    def test_update_missing_expense(self, client, sample_subcategory):
        response = client.put("/api/v1/expenses/missing", json=expense_payload(subcategory_id=sample_subcategory.id))
        assert response.status_code == 404

    def test_delete_expense(self, client, sample_expense):
        response = client.delete(f"/api/v1/expenses/{sample_expense.id}")
        assert response.status_code == 204
        assert client.get(f"/api/v1/expenses/{sample_expense.id}").status_code == 404
