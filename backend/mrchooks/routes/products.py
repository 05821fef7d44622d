# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/mrchooks/routes/products.py
"""
Product catalog routes.

Prices and costs travel as currency units and are stored as cents.
Deleting a product removes its inventory row but never touches sales,
losses or purchase orders, which keep their own name snapshots.
"""
from flask import Blueprint, request

from ..models import Product
from ..responses import ok, error_response
from ..services import products_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    ValidationError,
    NotFoundError,
    ConflictError,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"id", "name", "description", "price", "cost", "is_active"},
    required_on_create={"name", "price", "cost"},
    money_fields={"price": "price_cents", "cost": "cost_cents"},
)

PRODUCT_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "price", "cost", "is_active"},
    money_fields={"price": "price_cents", "cost": "cost_cents"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _active_arg() -> bool | None:
    raw = request.args.get("active")
    if raw is None:
        return None
    return raw.lower() in ("1", "true", "yes")


@products_bp.get("")
def list_products():
    """
    List products.

    Query params:
    - active: true/false (optional)
    - q: search name/description (optional)
    - page, per_page: pagination (optional; all items when page is omitted)
    """
    result = products_service.list_products(
        active=_active_arg(),
        search=request.args.get("q"),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    )
    return ok(result)


@products_bp.get("/<product_id>")
def get_product_route(product_id: str):
    try:
        return ok(products_service.get_product(product_id).to_dict())
    except NotFoundError as e:
        return error_response(e)


@products_bp.post("")
def create_product_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        created = products_service.create_product(patch=patch)
    except (ValidationError, ConflictError) as e:
        return error_response(e)

    return ok(created, 201)


@products_bp.put("/<product_id>")
def update_product_route(product_id: str):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_UPDATE_POLICY, partial=True)
        updated = products_service.update_product(product_id=product_id, patch=patch)
    except (ValidationError, NotFoundError) as e:
        return error_response(e)

    return ok(updated)


@products_bp.delete("/<product_id>")
def delete_product_route(product_id: str):
    try:
        products_service.delete_product(product_id)
    except NotFoundError as e:
        return error_response(e)

    return ok({"id": product_id, "deleted": True})
