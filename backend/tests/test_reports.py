"""
Reporting tests: all figures are recomputed from stored rows on every call.
"""

from datetime import date, datetime

import pytest

from mrchooks.services import reporting_service
from mrchooks.time_utils import months_ago
from mrchooks.validation import ValidationError

DAY = "2026-03-01"


def _seed_day(client):
    # Two sales: 2 x 50 cash, and 1 x 100 GCash with a 20 discount
    client.post("/api/sales", json={
        "payment_method": "Cash",
        "employee_id": "emp-1",
        "items": [{"product_id": "p1", "quantity": 2, "price": 50}],
        "date": f"{DAY}T09:00:00Z",
    })
    client.post("/api/sales", json={
        "payment_method": "GCash",
        "payment_reference": "GC-1",
        "employee_id": "emp-2",
        "items": [{"product_id": "p2", "quantity": 1, "price": 100}],
        "discount": {"type": "senior", "id_number": "SC-1", "amount": 20},
        "date": f"{DAY}T10:00:00Z",
    })
    client.post("/api/expenses", json={"category": "Utilities", "description": "LPG", "amount": 30, "date": f"{DAY}T08:00:00Z"})
    client.post("/api/expenses", json={"category": "Supplies", "description": "Bags", "amount": 10, "date": f"{DAY}T08:00:00Z"})
    client.post("/api/deliveries", json={"description": "Chicken", "amount": 25, "driver": "Ramon", "date": f"{DAY}T07:00:00Z"})
    client.post("/api/losses", json={
        "product_id": "p1", "product_name": "Whole Chicken", "quantity": 1,
        "reason": "Spoiled", "cost": 30, "date": f"{DAY}T20:00:00Z",
    })
    # Outside the day
    client.post("/api/expenses", json={"category": "Utilities", "description": "Later", "amount": 999, "date": "2026-03-02T08:00:00Z"})


class TestSummary:

    def test_range_summary(self, client, catalog):
        _seed_day(client)

        resp = client.get(f"/api/reports/summary?startDate={DAY}&endDate={DAY}")
        assert resp.status_code == 200
        summary = resp.get_json()["data"]

        assert summary["sales_count"] == 2
        assert summary["items_sold"] == 3
        assert summary["gross_sales"] == 200.0
        assert summary["total_discounts"] == 20.0
        assert summary["net_sales"] == 180.0
        assert summary["total_expenses"] == 40.0
        assert summary["net_profit"] == 140.0

    def test_today_period_by_default(self, client, catalog):
        client.post("/api/sales", json={"payment_method": "Cash", "items": [{"product_id": "p1", "quantity": 1, "price": 50}]})

        summary = client.get("/api/reports/summary").get_json()["data"]
        assert summary["period"] == "today"
        assert summary["gross_sales"] == 50.0

    def test_period_and_range_together_is_400(self, client, db_session):
        assert client.get(f"/api/reports/summary?period=week&startDate={DAY}").status_code == 400

    def test_unknown_period_is_400(self, client, db_session):
        assert client.get("/api/reports/summary?period=decade").status_code == 400

    def test_empty_range_is_zero(self, db_session):
        summary = reporting_service.period_summary(period="year")
        assert summary["sales_count"] == 0
        assert summary["gross_sales"] == 0.0
        assert summary["net_profit"] == 0.0


class TestDailyReconciliation:

    def test_reconciliation(self, client, catalog):
        _seed_day(client)

        resp = client.get(f"/api/reports/daily?date={DAY}")
        assert resp.status_code == 200
        report = resp.get_json()["data"]

        assert report["date"] == DAY
        assert report["net_profit"] == 140.0
        assert report["total_deliveries"] == 25.0
        assert report["total_losses"] == 30.0
        assert report["adjusted_net_profit"] == 85.0

        # p1: 10 x 30 beginning, 7 x 30 left; p2: 5 x 70 beginning, 4 x 70 left
        assert report["beginning_inventory_value"] == 650.0
        assert report["ending_inventory_value"] == 490.0

        assert report["expenses_by_category"] == [
            {"category": "Supplies", "amount": 10.0, "count": 1},
            {"category": "Utilities", "amount": 30.0, "count": 1},
        ]
        assert report["payments_by_method"] == [
            {"payment_method": "Cash", "amount": 100.0, "count": 1, "employees": ["emp-1"]},
            {"payment_method": "GCash", "amount": 80.0, "count": 1, "employees": ["emp-2"]},
        ]

    def test_date_required(self, client, db_session):
        assert client.get("/api/reports/daily").status_code == 400
        assert client.get("/api/reports/daily?date=03/01/2026").status_code == 400


class TestPeriods:

    NOW = datetime(2026, 3, 31, 15, 0, 0)

    @pytest.mark.parametrize(
        "period,start",
        [
            ("today", datetime(2026, 3, 31)),
            ("week", datetime(2026, 3, 24)),
            ("month", datetime(2026, 2, 28)),
            ("year", datetime(2025, 3, 31)),
        ],
    )
    def test_rolling_windows(self, period, start):
        window = reporting_service.resolve_period(period, now=self.NOW)
        assert window.start == start
        assert window.end == self.NOW

    def test_unknown_period(self):
        with pytest.raises(ValidationError):
            reporting_service.resolve_period("fortnight", now=self.NOW)

    def test_months_ago_clamps(self):
        assert months_ago(date(2024, 3, 31), 1) == date(2024, 2, 29)
        assert months_ago(date(2026, 1, 15), 1) == date(2025, 12, 15)
        assert months_ago(date(2024, 2, 29), 12) == date(2023, 2, 28)
