# backend/promo_basket/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored next to the backend by default
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///promo_basket.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Shop context used when a request does not name one
    DEFAULT_SHOP_ID = int(os.environ.get("DEFAULT_SHOP_ID", "1"))
    DEFAULT_CUSTOMER_GROUP_ID = int(os.environ.get("DEFAULT_CUSTOMER_GROUP_ID", "1"))

    # Order numbers of surcharge/discount lines removed when the basket runs empty
    PAYMENT_SURCHARGE_ABSOLUTE_NUMBER = os.environ.get(
        "PAYMENT_SURCHARGE_ABSOLUTE_NUMBER", "PAYMENTSURCHARGEABSOLUTENUMBER"
    )
    PAYMENT_SURCHARGE_NUMBER = os.environ.get("PAYMENT_SURCHARGE_NUMBER", "PAYMENTSURCHARGE")
    DISCOUNT_NUMBER = os.environ.get("DISCOUNT_NUMBER", "DISCOUNT")
    SHIPPING_DISCOUNT_NUMBER = os.environ.get("SHIPPING_DISCOUNT_NUMBER", "SHIPPINGDISCOUNT")

    # Locale of shopper-facing messages (see messages.py)
    LOCALE = os.environ.get("LOCALE", "en_GB")
