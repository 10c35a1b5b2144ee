"""Currency conversion and money formatting.

Convention: rate_to_base = units of base currency per 1 unit of the original
currency, so amount_base = amount_original * rate_to_base. Never divide.

Example: 10 EUR -> USD with rate_to_base=1.1 => 11 USD
"""

import math
from dataclasses import dataclass
from decimal import Context, Decimal, ROUND_HALF_UP

# Display precision (must match frontend lib/currency.ts)
ZERO_DECIMAL_CURRENCIES = frozenset({"JPY", "KRW", "VND"})

# Wide enough to hold any finite float at 2 decimals
_DISPLAY_CONTEXT = Context(prec=400, rounding=ROUND_HALF_UP)

CURRENCY_SYMBOLS: dict[str, str] = {
    # Major currencies
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "¥",
    # Middle East & Africa
    "ILS": "₪",
    "AED": "د.إ",
    "EGP": "E£",
    "ZAR": "R",
    # Asia
    "THB": "฿",
    "VND": "₫",
    "INR": "₹",
    "IDR": "Rp",
    "MYR": "RM",
    "SGD": "S$",
    "PHP": "₱",
    "KRW": "₩",
    # Europe (non-EUR)
    "CHF": "Fr",
    "SEK": "kr",
    "NOK": "kr",
    "DKK": "kr",
    "CZK": "Kč",
    "PLN": "zł",
    "HUF": "Ft",
    "RON": "lei",
    "TRY": "₺",
    # Americas
    "CAD": "C$",
    "AUD": "A$",
    "NZD": "NZ$",
    "MXN": "Mex$",
    "BRL": "R$",
    # Southeast Asia
    "KHR": "៛",
    "LAK": "₭",
    "LKR": "Rs",
}


@dataclass(frozen=True)
class CurrencyInfo:
    code: str
    symbol: str
    name: str


_CURRENCY_NAMES: dict[str, str] = {
    "USD": "US Dollar",
    "EUR": "Euro",
    "GBP": "British Pound",
    "JPY": "Japanese Yen",
    "CNY": "Chinese Yuan",
    "ILS": "Israeli Shekel",
    "AED": "UAE Dirham",
    "EGP": "Egyptian Pound",
    "ZAR": "South African Rand",
    "THB": "Thai Baht",
    "VND": "Vietnamese Dong",
    "INR": "Indian Rupee",
    "IDR": "Indonesian Rupiah",
    "MYR": "Malaysian Ringgit",
    "SGD": "Singapore Dollar",
    "PHP": "Philippine Peso",
    "KRW": "South Korean Won",
    "CHF": "Swiss Franc",
    "SEK": "Swedish Krona",
    "NOK": "Norwegian Krone",
    "DKK": "Danish Krone",
    "CZK": "Czech Koruna",
    "PLN": "Polish Złoty",
    "HUF": "Hungarian Forint",
    "RON": "Romanian Leu",
    "TRY": "Turkish Lira",
    "CAD": "Canadian Dollar",
    "AUD": "Australian Dollar",
    "NZD": "New Zealand Dollar",
    "MXN": "Mexican Peso",
    "BRL": "Brazilian Real",
    "KHR": "Cambodian Riel",
    "LAK": "Lao Kip",
    "LKR": "Sri Lankan Rupee",
}

CURRENCIES_INFO: list[CurrencyInfo] = [
    CurrencyInfo(code=code, symbol=symbol, name=_CURRENCY_NAMES[code])
    for code, symbol in CURRENCY_SYMBOLS.items()
]


def convert_to_base(amount_original: float, rate_to_base: float) -> float:
    """Convert an amount from its original currency to the base currency.

    Not rounded: stored values keep full precision, rounding happens on display.
    """
    return amount_original * rate_to_base


def get_inverse_rate(rate_to_base: float) -> float:
    """Reciprocal rate: foreign units per 1 unit of base currency.

    This is the opposite direction of rate_to_base and must not be passed
    where a rate_to_base is expected.
    """
    return 1 / rate_to_base


def currency_decimals(currency: str) -> int:
    return 0 if currency in ZERO_DECIMAL_CURRENCIES else 2


def format_amount_for_display(amount: float, currency: str) -> str:
    """Format an amount with the currency's decimal places (0 or 2).

    Rounds half away from zero on the exact value of the float, the same
    way fixed-point formatting does on the frontend.
    """
    if not math.isfinite(amount):
        return str(amount)
    quantum = Decimal(1).scaleb(-currency_decimals(currency))
    return str(Decimal(amount).quantize(quantum, context=_DISPLAY_CONTEXT))


def get_currency_symbol(currency: str) -> str:
    return CURRENCY_SYMBOLS.get(currency) or currency


def get_currency_info(code: str) -> CurrencyInfo | None:
    for info in CURRENCIES_INFO:
        if info.code == code:
            return info
    return None


def format_currency_with_symbol(code: str) -> str:
    """"€ EUR" for codes with a known symbol, otherwise just the code."""
    symbol = get_currency_symbol(code)
    return f"{symbol} {code}" if symbol != code else code


def format_money(amount: float, currency: str) -> str:
    """Display string with symbol and thousands separators, e.g. "$1,234.50"."""
    symbol = get_currency_symbol(currency)
    formatted = format_amount_for_display(amount, currency)

    sign = ""
    if formatted.startswith("-"):
        sign, formatted = "-", formatted[1:]

    integer_part, _, fraction = formatted.partition(".")
    if integer_part.isdigit():
        integer_part = f"{int(integer_part):,}"
    grouped = f"{integer_part}.{fraction}" if fraction else integer_part

    # Sign goes after the symbol: "$-5.00"
    return f"{symbol}{sign}{grouped}"


def format_compact_number(num: float) -> str:
    if num >= 1_000_000:
        return f"{num / 1_000_000:.1f}M"
    if num >= 1000:
        return f"{num / 1000:.1f}K"
    return str(int(num)) if float(num).is_integer() else str(num)
