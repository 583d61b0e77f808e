# Overview: Localized shopper-facing messages, looked up by namespace and key.

from __future__ import annotations

from flask import current_app, has_app_context


DEFAULT_LOCALE = "en_GB"

BASKET_MESSAGES = "frontend/basket/internalMessages"

MESSAGES = {
    "en_GB": {
        BASKET_MESSAGES: {
            "VoucherFailureOnlyOnes": "Only one voucher can be processed in order",
            "VoucherFailureNotFound": "Voucher could not be found or is not valid anymore",
            "FreeGoodNotAvailable": "This free good is not available for your basket",
        },
    },
    "de_DE": {
        BASKET_MESSAGES: {
            "VoucherFailureOnlyOnes": "Pro Bestellung kann nur ein Gutschein eingelöst werden",
            "VoucherFailureNotFound": "Gutschein konnte nicht gefunden werden oder ist nicht mehr gültig",
            "FreeGoodNotAvailable": "Diese Gratisbeigabe ist für Ihren Warenkorb nicht verfügbar",
        },
    },
}


def get(namespace: str, key: str, fallback: str | None = None, locale: str | None = None) -> str:
    """Message text for the locale, falling back to the given text, then the key."""
    if locale is None:
        locale = current_app.config.get("LOCALE", DEFAULT_LOCALE) if has_app_context() else DEFAULT_LOCALE
    text = MESSAGES.get(locale, {}).get(namespace, {}).get(key)
    if text:
        return text
    return fallback if fallback is not None else key
