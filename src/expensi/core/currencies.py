from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    name: str
    rate: float  # units per 1 USD


CURRENCIES: dict[str, Currency] = {
    c.code: c
    for c in (
        Currency("USD", "$", "US Dollar", 1),
        Currency("EUR", "€", "Euro", 0.92),
        Currency("GBP", "£", "British Pound", 0.79),
        Currency("CAD", "C$", "Canadian Dollar", 1.36),
        Currency("AUD", "A$", "Australian Dollar", 1.53),
        Currency("JPY", "¥", "Japanese Yen", 149.5),
        Currency("INR", "₹", "Indian Rupee", 83.1),
        Currency("BRL", "R$", "Brazilian Real", 4.97),
        Currency("MXN", "MX$", "Mexican Peso", 17.15),
        Currency("NGN", "₦", "Nigerian Naira", 1550),
    )
}

# Symbols stripped from amount cells before numeric parsing.
CURRENCY_SYMBOLS = ("$", "€", "£", "¥", "₹", "₦")

_ZERO_DECIMAL_CURRENCIES = {"JPY"}


def normalize_currency(value: str | None) -> str | None:
    if not value:
        return None
    code = value.strip().upper()
    if code in CURRENCIES:
        return code
    for currency in CURRENCIES.values():
        if value.strip() == currency.symbol:
            return currency.code
    return None


def currency_symbol(code: str | None) -> str:
    if not code:
        return "$"
    currency = CURRENCIES.get(code.upper())
    return currency.symbol if currency else "$"


def round_half_up(amount: float, places: int = 2) -> float:
    quant = Decimal(1).scaleb(-places)
    try:
        return float(Decimal(str(amount)).quantize(quant, rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # Infinities and magnitudes past Decimal precision carry no cents to round.
        return float(amount)


def format_currency(amount: float, currency: str = "USD") -> str:
    """Format ``amount`` with the currency symbol and US-style grouping.

    Yen has no fractional unit, so JPY renders without decimals. The minus
    sign goes before the symbol (``-$5.00``).
    """
    symbol = currency_symbol(currency)
    decimals = 0 if currency.upper() in _ZERO_DECIMAL_CURRENCIES else 2
    magnitude = round_half_up(abs(amount), decimals)
    formatted = f"{magnitude:,.{decimals}f}"
    return f"-{symbol}{formatted}" if amount < 0 else f"{symbol}{formatted}"


def convert_to_usd(amount: float, from_currency: str) -> float:
    currency = CURRENCIES.get(from_currency.upper())
    if currency is None:
        raise ValueError(f"Unsupported currency: {from_currency}")
    return round_half_up(amount / currency.rate)
