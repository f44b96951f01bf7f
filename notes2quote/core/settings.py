"""
Business profile and default currency, read from the settings table.

Keys match the profile form: businessName, businessPhone, businessEmail,
businessAddress, businessWebsite, defaultCurrency.
"""

import logging

from notes2quote.core import db, paths
from notes2quote.core.models import BusinessInfo, Currency

log = logging.getLogger("notes2quote.settings")

PROFILE_KEYS = {
    "name":    "businessName",
    "phone":   "businessPhone",
    "email":   "businessEmail",
    "address": "businessAddress",
    "website": "businessWebsite",
}
CURRENCY_KEY = "defaultCurrency"


def load_business_info() -> BusinessInfo:
    return BusinessInfo(**{
        attr: str(db.get_setting(key, "") or "")
        for attr, key in PROFILE_KEYS.items()
    })


def save_business_info(info: BusinessInfo) -> None:
    """Profile endpoint only; the pricing/document core never writes settings."""
    for attr, key in PROFILE_KEYS.items():
        db.set_setting(key, getattr(info, attr))
    log.info("Business profile updated: %s", info.name or "(unnamed)")


def default_currency() -> str:
    code = str(db.get_setting(CURRENCY_KEY, "") or paths.DEFAULT_CURRENCY).upper()
    try:
        return Currency(code).value
    except ValueError:
        log.warning("Unknown default currency %r, using GBP", code)
        return Currency.GBP.value


def set_default_currency(code: str) -> None:
    db.set_setting(CURRENCY_KEY, str(code).upper())
