"""Currency helpers"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict

DEFAULT_CURRENCY = "EUR"

COUNTRY_CURRENCIES: Dict[str, str] = {
    "Global": "EUR",
    "United States": "USD",
    "United Kingdom": "GBP",
    "India": "INR",
    "Germany": "EUR",
    "France": "EUR",
    "Canada": "CAD",
    "Australia": "AUD",
    "Japan": "JPY",
    "China": "CNY",
    "Brazil": "BRL",
    "Mexico": "MXN",
    "South Korea": "KRW",
    "Singapore": "SGD",
    "Netherlands": "EUR",
    "Switzerland": "CHF",
    "Sweden": "SEK",
    "Norway": "NOK",
    "Denmark": "DKK",
    "Finland": "EUR",
    "Italy": "EUR",
    "Spain": "EUR",
    "Portugal": "EUR",
    "Ireland": "EUR",
    "Austria": "EUR",
    "Belgium": "EUR",
    "Poland": "PLN",
    "Czech Republic": "CZK",
    "Hungary": "HUF",
    "Romania": "RON",
    "Bulgaria": "BGN",
    "Croatia": "EUR",
    "Slovenia": "EUR",
    "Slovakia": "EUR",
    "Estonia": "EUR",
    "Latvia": "EUR",
    "Lithuania": "EUR",
    "Luxembourg": "EUR",
    "Malta": "EUR",
    "Cyprus": "EUR",
    "Greece": "EUR",
}

# Stripe charges these currencies in whole units
ZERO_DECIMAL_CURRENCIES = frozenset({
    "BIF", "CLP", "DJF", "GNF", "JPY", "KMF", "KRW", "MGA",
    "PYG", "RWF", "UGX", "VND", "VUV", "XAF", "XOF", "XPF",
})


def get_currency_for_country(country: str) -> str:
    """Currency code for a country, EUR when unknown"""
    return COUNTRY_CURRENCIES.get(country, DEFAULT_CURRENCY)


def to_minor_units(amount: Decimal, currency: str) -> int:
    """
    Convert a decimal amount to the integer minor units a payment provider expects

    e.g. ``Decimal("36.50")`` EUR -> ``3650``; ``Decimal("1200")`` JPY -> ``1200``
    """
    factor = 1 if currency.upper() in ZERO_DECIMAL_CURRENCIES else 100
    return int((Decimal(amount) * factor).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(amount: int, currency: str) -> Decimal:
    """Inverse of :func:`to_minor_units`"""
    if currency.upper() in ZERO_DECIMAL_CURRENCIES:
        return Decimal(amount)
    return Decimal(amount) / 100
