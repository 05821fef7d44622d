# backend/mrchooks/config.py
from __future__ import annotations
import os


def _env_list(name: str, default: str) -> tuple[str, ...]:
    raw = os.environ.get(name, default)
    return tuple(part.strip() for part in raw.split(",") if part.strip())


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/mrchooks.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///mrchooks.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Checkout rules
    PAYMENT_METHODS = _env_list("PAYMENT_METHODS", "Cash,GCash")
    REFERENCE_REQUIRED_METHODS = _env_list("REFERENCE_REQUIRED_METHODS", "GCash")

    DISCOUNT_TYPES = _env_list("DISCOUNT_TYPES", "whole_chicken,pwd,senior")
    DISCOUNT_ID_REQUIRED_TYPES = _env_list("DISCOUNT_ID_REQUIRED_TYPES", "pwd,senior")
    # Currency units (pesos), parsed with the same rules as request amounts
    DISCOUNT_AMOUNT = os.environ.get("DISCOUNT_AMOUNT", "20")
    MAX_DISCOUNT = os.environ.get("MAX_DISCOUNT", "20")

    # What a stock decrement does when a product has no inventory row:
    # "skip" (leave it untracked), "reject" (refuse the write), "create" (add a zeroed row)
    MISSING_INVENTORY_POLICY = os.environ.get("MISSING_INVENTORY_POLICY", "skip")

    # Browser front ends allowed to call the API
    CORS_ORIGINS = _env_list(
        "CORS_ORIGINS",
        "http://localhost:3001,http://127.0.0.1:3001,http://localhost:5500,http://127.0.0.1:5500",
    )

    DEFAULT_SETTINGS = {
        "store_name": "Mr. Chooks",
        "currency": "PHP",
        "receipt_footer": "Thank you for your purchase!",
    }
