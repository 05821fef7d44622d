# Overview: HTTP client for the Mr. Chooks API with a read-through local cache for catalog and inventory.

# backend/mrchooks/client.py
"""
Python client for the JSON API.

The server is always authoritative. Catalog and inventory reads go through
a LocalCache so a till keeps showing the last known products when the
network drops:

- reads are served from cache while fresh (ttl seconds)
- refresh() drops everything and pulls catalog and inventory again
- every write invalidates the resources it can change
- on NetworkError a read falls back to the cached copy (last_read_stale
  is set); with nothing cached the error propagates
"""

from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import httpx

from .services.transactions import StorageError
from .validation import ValidationError, NotFoundError, ConflictError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = os.environ.get("MRCHOOKS_API_URL", "http://127.0.0.1:3001")


class NetworkError(Exception):
    """The API could not be reached (connection refused, timeout, DNS...)."""


class APIError(Exception):
    """Unexpected non-envelope response from the API."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class CacheEntry:
    value: Any
    fetched_at: Optional[float]  # None: loaded from disk, usable only as a fallback


class LocalCache:
    """
    In-memory key/value cache with TTL freshness and optional JSON snapshot.

    Entries restored from the snapshot are never fresh; they exist so an
    offline restart still has something to show.
    """

    def __init__(
        self,
        ttl: float = 60.0,
        path: Optional[str] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self.path = path
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        if path:
            self._load()

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def is_fresh(self, entry: CacheEntry) -> bool:
        if entry.fetched_at is None:
            return False
        return (self.clock() - entry.fetched_at) < self.ttl

    def put(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, fetched_at=self.clock())
        self._save()

    def invalidate(self, *prefixes: str) -> None:
        """Drop every key starting with one of the prefixes (all keys when none given)."""
        if not prefixes:
            self._entries.clear()
        else:
            for key in [k for k in self._entries if k.startswith(prefixes)]:
                del self._entries[key]
        self._save()

    def keys(self) -> list:
        return sorted(self._entries)

    def _load(self) -> None:
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                snapshot = json.load(f)
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable cache snapshot at %s", self.path)
            return
        for key, value in snapshot.items():
            self._entries[key] = CacheEntry(value=value, fetched_at=None)

    def _save(self) -> None:
        if not self.path:
            return
        snapshot = {key: entry.value for key, entry in self._entries.items()}
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(snapshot, f)
        os.replace(tmp_path, self.path)


class ChooksClient:
    """
    HTTP client wrapper with envelope unwrapping and typed errors.

    Error mapping: 400 ValidationError, 404 NotFoundError, 409 ConflictError,
    5xx StorageError, transport failures NetworkError.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        http: Optional[httpx.Client] = None,
        cache_path: Optional[str] = None,
        ttl: float = 60.0,
        timeout: float = 10.0,
        cache: Optional[LocalCache] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = http or httpx.Client(timeout=timeout)
        self.cache = cache or LocalCache(ttl=ttl, path=cache_path)
        self.last_read_stale = False

    # --- transport ---

    def _request(self, method: str, path: str, *, params: Optional[Dict] = None, json: Any = None) -> Any:
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        try:
            response = self.client.request(
                method,
                f"{self.base_url}{path}",
                params=params or None,
                json=json,
                headers={"Accept": "application/json"},
            )
        except httpx.TransportError as exc:
            raise NetworkError(f"{method} {path} failed: {exc}") from exc

        return self._unwrap(response)

    @staticmethod
    def _unwrap(response: httpx.Response) -> Any:
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("ok") is True:
            return body.get("data")

        message = None
        if isinstance(body, dict):
            message = body.get("message")
        message = message or response.reason_phrase or f"HTTP {response.status_code}"

        status = response.status_code
        if status == 400:
            raise ValidationError(message)
        if status == 404:
            raise NotFoundError(message)
        if status == 409:
            raise ConflictError(message)
        if status >= 500:
            raise StorageError(message)
        raise APIError(message, status_code=status)

    def _cached_get(self, key: str, path: str, params: Optional[Dict] = None) -> Any:
        entry = self.cache.get(key)
        if entry is not None and self.cache.is_fresh(entry):
            self.last_read_stale = False
            return entry.value

        try:
            data = self._request("GET", path, params=params)
        except NetworkError:
            if entry is None:
                raise
            logger.warning("Serving stale %s: API unreachable", key)
            self.last_read_stale = True
            return entry.value

        self.cache.put(key, data)
        self.last_read_stale = False
        return data

    def refresh(self) -> None:
        """Pull-on-focus: discard cached reads and fetch catalog and inventory again."""
        self.cache.invalidate()
        self.list_products()
        self.list_inventory()

    def close(self):
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # --- system ---

    def health(self) -> Dict:
        return self._request("GET", "/api/health")

    def version(self) -> Dict:
        return self._request("GET", "/api/version")

    # --- products (cached) ---

    def list_products(self, active: Optional[bool] = None, q: Optional[str] = None) -> Any:
        params = {"active": None if active is None else str(active).lower(), "q": q}
        key = "products?" + "&".join(f"{k}={v}" for k, v in sorted(params.items()) if v is not None)
        return self._cached_get(key, "/api/products", params=params)

    def get_product(self, product_id: str) -> Dict:
        return self._cached_get(f"products/{product_id}", f"/api/products/{product_id}")

    def create_product(self, **fields) -> Dict:
        data = self._request("POST", "/api/products", json=fields)
        self.cache.invalidate("products", "inventory")
        return data

    def update_product(self, product_id: str, **fields) -> Dict:
        data = self._request("PUT", f"/api/products/{product_id}", json=fields)
        self.cache.invalidate("products", "inventory")
        return data

    def delete_product(self, product_id: str) -> Dict:
        data = self._request("DELETE", f"/api/products/{product_id}")
        self.cache.invalidate("products", "inventory")
        return data

    # --- inventory (cached) ---

    def list_inventory(self) -> list:
        return self._cached_get("inventory", "/api/inventory")

    def get_inventory(self, product_id: str) -> Dict:
        return self._cached_get(f"inventory/{product_id}", f"/api/inventory/{product_id}")

    def set_inventory(self, product_id: str, *, beginning: int, stock: int) -> Dict:
        data = self._request("PUT", f"/api/inventory/{product_id}", json={"beginning": beginning, "stock": stock})
        self.cache.invalidate("inventory")
        return data

    # --- sales ---

    def record_sale(
        self,
        *,
        payment_method: str,
        items: list,
        payment_reference: Optional[str] = None,
        discount: Optional[Dict] = None,
        date: Optional[str] = None,
        employee_id: Optional[str] = None,
    ) -> Dict:
        payload = {"payment_method": payment_method, "items": items}
        optional = {
            "payment_reference": payment_reference,
            "discount": discount,
            "date": date,
            "employee_id": employee_id,
        }
        payload.update({k: v for k, v in optional.items() if v is not None})
        try:
            return self._request("POST", "/api/sales", json=payload)
        finally:
            # A 5xx may still have committed; never trust cached stock after a sale attempt
            self.cache.invalidate("inventory")

    def get_sale(self, sale_id: str) -> Dict:
        return self._request("GET", f"/api/sales/{sale_id}")

    def list_sales(
        self,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> list:
        return self._request("GET", "/api/sales", params={
            "startDate": start_date,
            "endDate": end_date,
            "paymentMethod": payment_method,
        })

    def discount_usage(self, id_number: str, date: Optional[str] = None) -> Dict:
        return self._request("GET", "/api/discounts/usage", params={"idNumber": id_number, "date": date})

    # --- losses ---

    def record_loss(self, **fields) -> Dict:
        try:
            return self._request("POST", "/api/losses", json=fields)
        finally:
            self.cache.invalidate("inventory")

    def list_losses(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> list:
        return self._request("GET", "/api/losses", params={"startDate": start_date, "endDate": end_date})

    # --- ledgers ---

    def list_expenses(self, start_date: Optional[str] = None, end_date: Optional[str] = None, category: Optional[str] = None) -> list:
        return self._request("GET", "/api/expenses", params={
            "startDate": start_date,
            "endDate": end_date,
            "category": category,
        })

    def create_expense(self, **fields) -> Dict:
        return self._request("POST", "/api/expenses", json=fields)

    def delete_expense(self, expense_id: str) -> Dict:
        return self._request("DELETE", f"/api/expenses/{expense_id}")

    def list_deliveries(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> list:
        return self._request("GET", "/api/deliveries", params={"startDate": start_date, "endDate": end_date})

    def create_delivery(self, **fields) -> Dict:
        return self._request("POST", "/api/deliveries", json=fields)

    def delete_delivery(self, delivery_id: str) -> Dict:
        return self._request("DELETE", f"/api/deliveries/{delivery_id}")

    def list_unsold(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> list:
        return self._request("GET", "/api/unsold", params={"startDate": start_date, "endDate": end_date})

    def record_unsold(self, **fields) -> Dict:
        return self._request("POST", "/api/unsold", json=fields)

    # --- purchase orders ---

    def list_purchase_orders(self, status: Optional[str] = None) -> list:
        return self._request("GET", "/api/purchase-orders", params={"status": status})

    def get_purchase_order(self, po_id: str) -> Dict:
        return self._request("GET", f"/api/purchase-orders/{po_id}")

    def create_purchase_order(self, **fields) -> Dict:
        return self._request("POST", "/api/purchase-orders", json=fields)

    def update_purchase_order(self, po_id: str, **fields) -> Dict:
        return self._request("PUT", f"/api/purchase-orders/{po_id}", json=fields)

    def delete_purchase_order(self, po_id: str) -> Dict:
        return self._request("DELETE", f"/api/purchase-orders/{po_id}")

    # --- settings ---

    def get_settings(self) -> Dict:
        return self._request("GET", "/api/settings")

    def get_setting(self, key: str) -> Dict:
        return self._request("GET", f"/api/settings/{key}")

    def put_setting(self, key: str, value: Any) -> Dict:
        return self._request("PUT", f"/api/settings/{key}", json={"value": value})

    # --- reports ---

    def summary(self, period: Optional[str] = None, start_date: Optional[str] = None, end_date: Optional[str] = None) -> Dict:
        return self._request("GET", "/api/reports/summary", params={
            "period": period,
            "startDate": start_date,
            "endDate": end_date,
        })

    def daily_report(self, date: str) -> Dict:
        return self._request("GET", "/api/reports/daily", params={"date": date})
