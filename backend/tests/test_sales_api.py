"""
Sales HTTP API tests: envelope, status codes and query filters.
"""

import pytest
from sqlalchemy.exc import OperationalError

from mrchooks.services import sales_service


def _sale(client, **overrides):
    payload = {
        "payment_method": "Cash",
        "items": [{"product_id": "p1", "product_name": "Whole Chicken", "quantity": 2, "price": 50}],
    }
    payload.update(overrides)
    return client.post("/api/sales", json=payload)


class TestRecordSaleEndpoint:

    def test_created_with_totals(self, client, catalog, stock_of):
        resp = _sale(client)

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["ok"] is True
        assert body["data"]["subtotal"] == 100.0
        assert body["data"]["discount_total"] == 0.0
        assert body["data"]["total"] == 100.0
        assert body["data"]["sale_id"]
        assert stock_of("p1") == 8

    def test_get_sale_includes_items_and_discounts(self, client, catalog):
        created = _sale(
            client,
            items=[{"product_id": "p1", "quantity": 1, "price": 100}],
            discount={"type": "senior", "id_number": "SC-1", "amount": 20, "employee_name": "Ana"},
        ).get_json()["data"]

        resp = client.get(f"/api/sales/{created['sale_id']}")
        assert resp.status_code == 200
        sale = resp.get_json()["data"]
        assert sale["total"] == 80.0
        assert sale["items"][0]["product_name"] == "Whole Chicken"
        assert sale["items"][0]["discount"] == 20.0
        assert sale["discounts"][0]["type"] == "senior"
        assert sale["discounts"][0]["employee_name"] == "Ana"

    def test_gcash_without_reference_is_400(self, client, catalog, stock_of):
        resp = _sale(client, payment_method="GCash")

        assert resp.status_code == 400
        body = resp.get_json()
        assert body["ok"] is False
        assert "payment_reference" in body["message"]
        assert client.get("/api/sales").get_json()["data"] == []
        assert stock_of("p1") == 10

    def test_empty_items_is_400(self, client, catalog):
        resp = _sale(client, items=[])
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "items must be a non-empty list"

    def test_missing_body_is_400(self, client, catalog):
        resp = client.post("/api/sales", data="not json", content_type="text/plain")
        assert resp.status_code == 400
        assert resp.get_json()["ok"] is False

    @pytest.mark.parametrize(
        "items,discount",
        [
            ([{"product_id": "p1", "quantity": 1, "price": 1e30}], None),
            ([{"product_id": "p1", "quantity": 1, "price": "1e30"}], None),
            ([{"product_id": "p1", "quantity": 1, "price": 50, "cost": 1e30}], None),
            ([{"product_id": "p1", "quantity": 10**12, "price": 9999999}], None),
            ([{"product_id": "p1", "quantity": 1_000_001, "price": 1}], None),
            ([{"product_id": "p1", "quantity": 1000, "price": 9999999}], None),
            (
                [
                    {"product_id": "p1", "quantity": 1, "price": 6000000},
                    {"product_id": "p2", "quantity": 1, "price": 6000000},
                ],
                None,
            ),
            ([{"product_id": "p1", "quantity": 1, "price": 50}], {"type": "senior", "id_number": "SC-1", "amount": 1e30}),
        ],
    )
    def test_oversized_values_are_400(self, client, catalog, stock_of, items, discount):
        resp = _sale(client, items=items, discount=discount)

        assert resp.status_code == 400
        assert resp.get_json()["ok"] is False
        assert client.get("/api/sales").get_json()["data"] == []
        assert stock_of("p1") == 10

    def test_gcash_alias_used_when_reference_is_null(self, client, catalog):
        resp = _sale(client, payment_method="GCash", payment_reference=None, gcash_reference="GC-77")

        assert resp.status_code == 201
        sale = client.get(f"/api/sales/{resp.get_json()['data']['sale_id']}").get_json()["data"]
        assert sale["payment_reference"] == "GC-77"

    def test_storage_failure_is_500_and_saves_nothing(self, client, catalog, stock_of, monkeypatch):
        def broken_decrement(product_id, quantity):
            raise OperationalError("UPDATE inventory", {}, Exception("disk I/O error"))

        monkeypatch.setattr(sales_service, "decrement_stock", broken_decrement)

        resp = _sale(client)
        assert resp.status_code == 500
        body = resp.get_json()
        assert body["ok"] is False
        assert "no changes were saved" in body["message"]
        assert "disk I/O" not in body["message"]

        monkeypatch.undo()
        assert client.get("/api/sales").get_json()["data"] == []
        assert stock_of("p1") == 10


class TestSaleQueriesEndpoint:

    def test_unknown_sale_is_404(self, client, db_session):
        resp = client.get("/api/sales/does-not-exist")
        assert resp.status_code == 404
        assert resp.get_json() == {"ok": False, "message": "Sale not found"}

    def test_date_only_end_covers_whole_day(self, client, catalog):
        _sale(client, date="2026-03-01T23:30:00Z")
        _sale(client, date="2026-03-02T00:30:00Z")

        resp = client.get("/api/sales?startDate=2026-03-01&endDate=2026-03-01")
        assert resp.status_code == 200
        sales = resp.get_json()["data"]
        assert len(sales) == 1
        assert sales[0]["date"] == "2026-03-01T23:30:00Z"
        assert sales[0]["items"][0]["quantity"] == 2

    def test_payment_method_filter(self, client, catalog):
        _sale(client)
        _sale(client, payment_method="GCash", payment_reference="GC-9")

        sales = client.get("/api/sales?paymentMethod=GCash").get_json()["data"]
        assert [s["payment_method"] for s in sales] == ["GCash"]

    def test_bad_date_is_400(self, client, db_session):
        resp = client.get("/api/sales?startDate=yesterday")
        assert resp.status_code == 400

    def test_discount_usage(self, client, catalog):
        for _ in range(2):
            _sale(client, discount={"type": "pwd", "id_number": "PWD-1", "amount": 20})

        resp = client.get("/api/discounts/usage?idNumber=PWD-1")
        assert resp.status_code == 200
        assert resp.get_json()["data"]["count"] == 2

        assert client.get("/api/discounts/usage").status_code == 400
