"""
Product catalog API tests.
"""

import pytest

from mrchooks.extensions import db
from mrchooks.models import InventoryRecord, SaleLineItem


class TestProductCrud:

    def test_create_with_generated_id(self, client, db_session):
        resp = client.post("/api/products", json={"name": "Whole Chicken", "price": 350, "cost": "240.50"})

        assert resp.status_code == 201
        product = resp.get_json()["data"]
        assert product["id"]
        assert product["price"] == 350.0
        assert product["cost"] == 240.5
        assert product["is_active"] is True

    def test_create_with_client_id(self, client, db_session):
        resp = client.post("/api/products", json={"id": "p9", "name": "Java Rice", "price": 30, "cost": 12})
        assert resp.status_code == 201
        assert client.get("/api/products/p9").get_json()["data"]["name"] == "Java Rice"

    def test_duplicate_id_is_409(self, client, catalog):
        resp = client.post("/api/products", json={"id": "p1", "name": "Again", "price": 1, "cost": 1})
        assert resp.status_code == 409
        assert resp.get_json()["ok"] is False

    @pytest.mark.parametrize(
        "payload",
        [
            {"price": 10, "cost": 5},
            {"name": "X", "cost": 5},
            {"name": "X", "price": 10},
            {"name": "  ", "price": 10, "cost": 5},
            {"name": "X", "price": "abc", "cost": 5},
            {"name": "X", "price": -1, "cost": 5},
            {"name": "X", "price": 10, "cost": 5, "stock": 3},
        ],
    )
    def test_invalid_create_is_400(self, client, db_session, payload):
        resp = client.post("/api/products", json=payload)
        assert resp.status_code == 400

    def test_partial_update(self, client, catalog):
        resp = client.put("/api/products/p1", json={"price": 55.5})
        assert resp.status_code == 200
        product = resp.get_json()["data"]
        assert product["price"] == 55.5
        assert product["name"] == "Whole Chicken"

    def test_update_cannot_change_id(self, client, catalog):
        resp = client.put("/api/products/p1", json={"id": "p100"})
        assert resp.status_code == 400

    def test_update_missing_is_404(self, client, db_session):
        assert client.put("/api/products/nope", json={"price": 1}).status_code == 404

    def test_delete_removes_inventory_but_keeps_history(self, client, catalog):
        client.post("/api/sales", json={
            "payment_method": "Cash",
            "items": [{"product_id": "p1", "quantity": 1, "price": 50}],
        })

        resp = client.delete("/api/products/p1")
        assert resp.status_code == 200

        assert client.get("/api/products/p1").status_code == 404
        assert db.session.query(InventoryRecord).filter_by(product_id="p1").count() == 0
        line = db.session.query(SaleLineItem).filter_by(product_id="p1").one()
        assert line.product_name == "Whole Chicken"

    def test_delete_missing_is_404(self, client, db_session):
        resp = client.delete("/api/products/nope")
        assert resp.status_code == 404
        assert resp.get_json() == {"ok": False, "message": "Product not found"}


class TestProductListing:

    def test_filters(self, client, catalog):
        client.put("/api/products/p3", json={"is_active": False})

        everything = client.get("/api/products").get_json()["data"]
        assert everything["count"] == 3

        active = client.get("/api/products?active=true").get_json()["data"]
        assert sorted(p["id"] for p in active["items"]) == ["p1", "p2"]

        found = client.get("/api/products?q=chick").get_json()["data"]
        assert [p["id"] for p in found["items"]] == ["p1"]

    def test_pagination(self, client, catalog):
        page = client.get("/api/products?page=2&per_page=2").get_json()["data"]
        assert page["count"] == 1
        assert page["pagination"]["total"] == 3
        assert page["pagination"]["has_prev"] is True
        assert page["pagination"]["has_next"] is False
