"""Deterministic parsing of OCR'd receipt text.

Each field is extracted independently and carries its own confidence score.
Nothing here raises on odd input: a field that can't be found comes back as
ParsedField(value=None, confidence=0).

Known regional biases (kept on purpose, the app targets AU/IL/EU users):
- amounts: commas are stripped before parsing, so "1,234.56" works but a
  European "1.234,56" does not
- dates: numeric dates are read day-first (03/04/2024 is 3 April)
"""

import re
from datetime import date as date_type

from app.receipt.base import ParsedField, ParsedReceipt

AMOUNT_KEYWORD_CONFIDENCE = 0.9
AMOUNT_FALLBACK_CONFIDENCE = 0.5
CURRENCY_CODE_CONFIDENCE = 0.95
CURRENCY_SYMBOL_CONFIDENCE = 0.9
CURRENCY_DOLLAR_AU_CONFIDENCE = 0.85
CURRENCY_DOLLAR_DEFAULT_CONFIDENCE = 0.6
DATE_CONFIDENCE = 0.85
MERCHANT_CONFIDENCE = 0.7

MAX_PLAUSIBLE_AMOUNT = 1_000_000
TOTAL_LOOKAHEAD_LINES = 2

TOTAL_KEYWORDS = [
    re.compile(r"\btotal\b", re.IGNORECASE),
    re.compile(r"\bamount\s+due\b", re.IGNORECASE),
    re.compile(r"\bgrand\s+total\b", re.IGNORECASE),
    re.compile(r"\bbalance\s+due\b", re.IGNORECASE),
    re.compile(r"\bamount\s+payable\b", re.IGNORECASE),
    re.compile(r"\bto\s+pay\b", re.IGNORECASE),
    re.compile(r"סה[\"'״]?כ"),  # Hebrew "total"
    re.compile(r"לתשלום"),  # Hebrew "to pay"
    re.compile(r"\bsumme\b", re.IGNORECASE),  # German
    re.compile(r"\btotaal\b", re.IGNORECASE),  # Dutch
    re.compile(r"\btotale\b", re.IGNORECASE),  # Italian
]

# Optional currency symbol, then digit groups separated by "," or "."
NUMBER_PATTERN = re.compile(r"[$€£¥₪₹]?\s*(\d{1,3}(?:[,.]\d{3})*(?:[,.]\d{2})?)", re.ASCII)
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d+)?", re.ASCII)

ISO_CURRENCY_CODES = [
    "AUD", "USD", "EUR", "GBP", "ILS", "CAD", "JPY",
    "NZD", "CHF", "SEK", "NOK", "DKK", "SGD", "HKD",
]
_ISO_CODE_PATTERNS = [(code, re.compile(rf"\b{code}\b")) for code in ISO_CURRENCY_CODES]

CURRENCY_SYMBOL_CODES = [("₪", "ILS"), ("€", "EUR"), ("£", "GBP")]

AU_HINTS = [
    re.compile(r"\bAUSTRALIA\b", re.IGNORECASE),
    re.compile(r"\bAU\b"),
    re.compile(r"\bABN\b"),  # Australian Business Number
    re.compile(r"\bWOOLWORTHS\b", re.IGNORECASE),
    re.compile(r"\bCOLES\b", re.IGNORECASE),
    re.compile(r"\bMELBOURNE\b", re.IGNORECASE),
    re.compile(r"\bSYDNEY\b", re.IGNORECASE),
    re.compile(r"\bBRISBANE\b", re.IGNORECASE),
    re.compile(r"\bPERTH\b", re.IGNORECASE),
    re.compile(r"\bADELAIDE\b", re.IGNORECASE),
]

DATE_PATTERNS = [
    # DD/MM/YYYY, DD-MM-YYYY, DD.MM.YYYY
    re.compile(r"\b(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})\b", re.ASCII),
    # YYYY-MM-DD, YYYY/MM/DD
    re.compile(r"\b(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})\b", re.ASCII),
    # DD Mon YYYY (15 Jan 2024, 15 January 2024)
    re.compile(
        r"\b(\d{1,2})[ \t]+(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*[ \t]+(\d{4})\b",
        re.IGNORECASE | re.ASCII,
    ),
]

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

MERCHANT_SKIP_PATTERNS = [
    re.compile(r"^TAX\s+INVOICE", re.IGNORECASE),
    re.compile(r"^INVOICE", re.IGNORECASE),
    re.compile(r"^RECEIPT", re.IGNORECASE),
    re.compile(r"^ABN:", re.IGNORECASE),
    re.compile(r"^ACN:", re.IGNORECASE),
    re.compile(r"^PH:", re.IGNORECASE),
    re.compile(r"^PHONE:", re.IGNORECASE),
    re.compile(r"^TEL:", re.IGNORECASE),
    re.compile(r"^FAX:", re.IGNORECASE),
    re.compile(r"^EMAIL:", re.IGNORECASE),
    re.compile(r"^WWW\.", re.IGNORECASE),
    re.compile(r"^HTTP", re.IGNORECASE),
    re.compile(r"^\d+\s+\d+\s+\d+"),  # phone numbers
    re.compile(r"^[A-Z]{2,3}\s*\d{5}"),  # postcodes
    re.compile(r"\d{4,}"),  # long numbers (ABN/ACN)
]
LETTERS_PATTERN = re.compile(r"[A-Za-z]{2,}")
LEGAL_SUFFIX_PATTERN = re.compile(r"\b(PTY|LTD|LLC|INC|CORP|CO)\b\.?", re.IGNORECASE)
MERCHANT_MIN_LENGTH = 3
MERCHANT_MAX_LENGTH = 50


def _split_lines(text: str) -> list[str]:
    return re.split(r"\r?\n", text)


def _to_number(token: str) -> float:
    """Read the longest valid leading number, so "1.234.567" is 1.234."""
    # Commas are always thousands separators here.
    return float(_LEADING_NUMBER.match(token.replace(",", "")).group(0))


def _is_plausible_amount(value: float) -> bool:
    return 0 < value < MAX_PLAUSIBLE_AMOUNT


def _mask_dates(text: str) -> str:
    """Blank out date-shaped spans so their digits aren't read as amounts."""
    for pattern in DATE_PATTERNS:
        text = pattern.sub(lambda m: " " * len(m.group(0)), text)
    return text


def parse_amount(text: str) -> ParsedField[float]:
    """Extract the receipt total.

    Prefers the largest number on or just below a "total" keyword line,
    then falls back to the largest plausible number anywhere.
    """
    text = _mask_dates(text)
    lines = _split_lines(text)

    for i, line in enumerate(lines):
        if not any(keyword.search(line) for keyword in TOTAL_KEYWORDS):
            continue

        window = " ".join(lines[i:i + 1 + TOTAL_LOOKAHEAD_LINES])
        amounts = [_to_number(m.group(1)) for m in NUMBER_PATTERN.finditer(window)]
        if not amounts:
            continue

        # The total is usually the largest number near the keyword
        best = max(amounts)
        if _is_plausible_amount(best):
            return ParsedField[float](value=best, confidence=AMOUNT_KEYWORD_CONFIDENCE)

    amounts = [
        amount
        for amount in (_to_number(m.group(1)) for m in NUMBER_PATTERN.finditer(text))
        if _is_plausible_amount(amount)
    ]
    if amounts:
        return ParsedField[float](value=max(amounts), confidence=AMOUNT_FALLBACK_CONFIDENCE)

    return ParsedField[float]()


def parse_currency(text: str) -> ParsedField[str]:
    """Extract the ISO currency code from codes, symbols, or "$" plus context."""
    upper_text = text.upper()

    for code, pattern in _ISO_CODE_PATTERNS:
        if pattern.search(upper_text):
            return ParsedField[str](value=code, confidence=CURRENCY_CODE_CONFIDENCE)

    for symbol, code in CURRENCY_SYMBOL_CODES:
        if symbol in text:
            return ParsedField[str](value=code, confidence=CURRENCY_SYMBOL_CONFIDENCE)

    # "$" could be AUD, USD, CAD, ...
    if "$" in text:
        if any(hint.search(text) for hint in AU_HINTS):
            return ParsedField[str](value="AUD", confidence=CURRENCY_DOLLAR_AU_CONFIDENCE)
        return ParsedField[str](value="USD", confidence=CURRENCY_DOLLAR_DEFAULT_CONFIDENCE)

    return ParsedField[str]()


def _date_from_match(match: re.Match) -> date_type | None:
    first, middle, last = match.group(1), match.group(2), match.group(3)

    # Year-first whenever the first group has 4 digits, with "-" or "/"
    if len(first) == 4:
        year, month, day = int(first), int(middle), int(last)
    elif not middle.isdigit():
        year, month, day = int(last), MONTHS[middle[:3].lower()], int(first)
    else:
        # Day-first, as printed in AU/EU/IL
        year, month, day = int(last), int(middle), int(first)

    try:
        return date_type(year, month, day)
    except ValueError:
        return None


def parse_date(text: str) -> ParsedField[str]:
    """Extract the transaction date, normalized to YYYY-MM-DD."""
    for line in _split_lines(text):
        for pattern in DATE_PATTERNS:
            match = pattern.search(line)
            if not match:
                continue
            parsed = _date_from_match(match)
            if parsed is not None:
                return ParsedField[str](value=parsed.isoformat(), confidence=DATE_CONFIDENCE)

    return ParsedField[str]()


def parse_merchant(text: str) -> ParsedField[str]:
    """Take the first line that looks like a business name."""
    lines = [line.strip() for line in _split_lines(text)]

    for line in filter(None, lines):
        if any(pattern.search(line) for pattern in MERCHANT_SKIP_PATTERNS):
            continue
        if not LETTERS_PATTERN.search(line):
            continue

        cleaned = LEGAL_SUFFIX_PATTERN.sub("", line).strip()
        if MERCHANT_MIN_LENGTH <= len(cleaned) <= MERCHANT_MAX_LENGTH:
            return ParsedField[str](value=cleaned, confidence=MERCHANT_CONFIDENCE)

    return ParsedField[str]()


def parse_receipt_text(text: str) -> ParsedReceipt:
    """Run all field parsers. No cross-field validation is done."""
    return ParsedReceipt.from_fields(
        amount=parse_amount(text),
        currency=parse_currency(text),
        date=parse_date(text),
        merchant=parse_merchant(text),
    )
