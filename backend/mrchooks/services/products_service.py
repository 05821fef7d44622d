# backend/mrchooks/services/products_service.py
"""
Products Service

Products are the leaf dependency of everything else: inventory rows hang
off them, while sales, losses and purchase orders only copy their id and
name at write time.
"""
from __future__ import annotations

from sqlalchemy import or_

from ..extensions import db
from ..models import Product
from ..validation import ConflictError, NotFoundError
from .transactions import commit

PRODUCT_MUTABLE_FIELDS = {"name", "description", "price_cents", "cost_cents", "is_active"}


def apply_product_patch(p: Product, patch: dict) -> None:
    for k, v in patch.items():
        if k not in PRODUCT_MUTABLE_FIELDS:
            continue
        setattr(p, k, v)


def list_products(
    *,
    active: bool | None = None,
    search: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """
    Product listing with optional filters and pagination.

    Args:
        active: only active (True) or inactive (False) products
        search: case-insensitive match on name or description
        page: Page number (1-indexed). If None, returns all items.
        per_page: Items per page (default 20, max 100)
    """
    base_query = db.session.query(Product)
    if active is not None:
        base_query = base_query.filter(Product.is_active.is_(active))
    if search:
        like = f"%{search.strip()}%"
        base_query = base_query.filter(or_(Product.name.ilike(like), Product.description.ilike(like)))
    base_query = base_query.order_by(Product.name.asc(), Product.id.asc())

    # If no pagination requested, return all items
    if page is None:
        products = base_query.all()
        return {
            "items": [p.to_dict() for p in products],
            "count": len(products),
        }

    # Pagination logic
    per_page = min(per_page or 20, 100)  # Default 20, max 100
    page = max(page, 1)  # Ensure page >= 1

    total = base_query.count()
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1

    products = base_query.offset((page - 1) * per_page).limit(per_page).all()

    return {
        "items": [p.to_dict() for p in products],
        "count": len(products),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def get_product(product_id: str) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


def create_product(*, patch: dict) -> dict:
    """Create product using a validated patch dict. A client-supplied id is kept."""
    product_id = patch.get("id")
    if product_id and db.session.get(Product, product_id) is not None:
        raise ConflictError(f"Product id already exists: {product_id}")

    product = Product(id=product_id) if product_id else Product()
    apply_product_patch(product, patch)
    db.session.add(product)
    commit("create product")
    return product.to_dict()


def update_product(*, product_id: str, patch: dict) -> dict:
    product = get_product(product_id)
    apply_product_patch(product, patch)
    commit("update product")
    return product.to_dict()


def delete_product(product_id: str) -> None:
    """Delete a product and its inventory row; history keeps its snapshots."""
    product = get_product(product_id)
    db.session.delete(product)
    commit("delete product")
