"""
Configuration — read from the environment (and a local .env file).
"""

import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name, default):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _pay_methods():
    methods = [
        ("BTC", "Bitcoin (BTC)", "10–60 min"),
        ("LTC", "Litecoin (LTC)", "~4 min"),
        ("USDT_BEP20", "USDT (BNB Chain - BEP20)", "< 1 min"),
        ("BNB", "BNB (BNB Chain)", "< 1 min"),
        ("USDT_ERC20", "USDT (Ethereum - ERC20)", "1–5 min"),
    ]
    return [
        {
            "key": key,
            "label": label,
            "address": os.getenv(f"PAY_ADDRESS_{key}", ""),
            "eta": eta,
        }
        for key, label, eta in methods
    ]


class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///stockroom.sqlite")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    STORE_NAME = os.getenv("STORE_NAME", "LIVE STOCK")
    SUPPORT_CONTACT = os.getenv("SUPPORT_CONTACT", "")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

    ORDER_ID_PREFIX = os.getenv("ORDER_ID_PREFIX", "LS")
    MAX_ORDER_QTY = int(os.getenv("MAX_ORDER_QTY", "999"))
    CHECK_STOCK_ON_CREATE = _env_bool("CHECK_STOCK_ON_CREATE", True)
    ADMIN_ORDERS_LIMIT = int(os.getenv("ADMIN_ORDERS_LIMIT", "200"))

    # Unit-of-work retry on lock / serialization conflicts
    STORE_RETRY_ATTEMPTS = int(os.getenv("STORE_RETRY_ATTEMPTS", "3"))
    STORE_RETRY_BACKOFF = float(os.getenv("STORE_RETRY_BACKOFF", "0.05"))

    AUTO_CREATE_TABLES = _env_bool("AUTO_CREATE_TABLES", True)
    SEED_PRODUCTS = _env_bool("SEED_PRODUCTS", True)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    PAY_METHODS = _pay_methods()
