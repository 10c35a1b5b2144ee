import logging
import os
from dataclasses import dataclass
from datetime import datetime, date as date_type, timedelta

import httpx
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.currency import convert_to_base
from app.models import ExchangeRate

logger = logging.getLogger("tripmoney")

# Free tier, no API key, 160+ currencies. Latest rates only.
DEFAULT_FX_API_BASE_URL = "https://api.exchangerate-api.com/v4/latest"
DEFAULT_CACHE_TTL_HOURS = 12


class ExchangeRateError(Exception):
    """Rate could not be fetched (network, upstream status, bad payload)."""


class UnsupportedCurrencyError(ExchangeRateError):
    """Upstream has no rate for the requested currency pair."""


@dataclass(frozen=True)
class FxConversion:
    from_currency: str
    to_currency: str
    amount: float
    rate_to_base: float
    amount_base: float  # not rounded
    as_of: date_type


def _api_base_url() -> str:
    return os.getenv("FX_API_BASE_URL", DEFAULT_FX_API_BASE_URL).rstrip("/")


def _cache_ttl() -> timedelta:
    return timedelta(hours=float(os.getenv("FX_CACHE_TTL_HOURS", DEFAULT_CACHE_TTL_HOURS)))


def fetch_rate_to_base(from_currency: str, base_currency: str) -> tuple[float, date_type]:
    """Fetch how many base_currency units 1 from_currency buys.

    The API is queried with from_currency as its base, so rates[base_currency]
    is already rate_to_base and must not be inverted.
    """
    try:
        resp = httpx.get(f"{_api_base_url()}/{from_currency}", timeout=10)
    except httpx.HTTPError as e:
        raise ExchangeRateError(f"Failed to fetch exchange rate: {e}") from e

    if resp.status_code == 404:
        raise UnsupportedCurrencyError(f"Unsupported currency: {from_currency}")
    if resp.is_error:
        raise ExchangeRateError(f"FX API error: {resp.status_code}")

    try:
        data = resp.json()
    except ValueError as e:
        raise ExchangeRateError("Invalid response format from FX API") from e

    rates = data.get("rates") if isinstance(data, dict) else None
    if not isinstance(rates, dict):
        raise ExchangeRateError("Invalid response format from FX API")

    rate_value = rates.get(base_currency)
    if rate_value is None:
        raise UnsupportedCurrencyError(
            f"Rate not available for {from_currency} -> {base_currency}"
        )

    try:
        rate_date = date_type.fromisoformat(data["date"]) if data.get("date") else date_type.today()
    except (TypeError, ValueError) as e:
        raise ExchangeRateError("Invalid response format from FX API") from e

    return float(rate_value), rate_date


def get_rate_to_base(db: Session, from_currency: str, base_currency: str) -> tuple[float, date_type]:
    """Get rate_to_base from cache or the FX API.

    Returns (rate, date) tuple. Cached rows are reused until they are older
    than FX_CACHE_TTL_HOURS.
    """
    from_currency = from_currency.upper()
    base_currency = base_currency.upper()

    if from_currency == base_currency:
        return 1.0, date_type.today()

    now = datetime.utcnow()
    cutoff = now - _cache_ttl()

    cached = (
        db.query(ExchangeRate)
        .filter(
            ExchangeRate.from_currency == from_currency,
            ExchangeRate.base_currency == base_currency,
            ExchangeRate.fetched_at >= cutoff,
        )
        .order_by(ExchangeRate.fetched_at.desc())
        .first()
    )
    if cached:
        return float(cached.rate_to_base), cached.date

    rate_value, rate_date = fetch_rate_to_base(from_currency, base_currency)
    logger.info(
        "Exchange rate fetched",
        extra={"extra_data": {
            "from": from_currency,
            "base": base_currency,
            "rate_to_base": rate_value,
            "as_of": rate_date.isoformat(),
        }},
    )

    existing = (
        db.query(ExchangeRate)
        .filter(
            ExchangeRate.date == rate_date,
            ExchangeRate.from_currency == from_currency,
            ExchangeRate.base_currency == base_currency,
        )
        .first()
    )
    if existing:
        existing.rate_to_base = rate_value
        existing.fetched_at = now
    else:
        db.add(
            ExchangeRate(
                date=rate_date,
                from_currency=from_currency,
                base_currency=base_currency,
                rate_to_base=rate_value,
                fetched_at=now,
            )
        )
    try:
        db.commit()
    except IntegrityError:
        # Another request already cached this rate
        db.rollback()

    return rate_value, rate_date


def convert_currency(db: Session, from_currency: str, to_currency: str, amount: float) -> FxConversion:
    """Convert amount of from_currency into to_currency (the base)."""
    rate_to_base, as_of = get_rate_to_base(db, from_currency, to_currency)
    return FxConversion(
        from_currency=from_currency.upper(),
        to_currency=to_currency.upper(),
        amount=amount,
        rate_to_base=rate_to_base,
        amount_base=convert_to_base(amount, rate_to_base),
        as_of=as_of,
    )
