import logging
import math

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from app.currency import CURRENCIES_INFO
from app.database import get_db
from app.exchange import ExchangeRateError, UnsupportedCurrencyError, convert_currency
from app.ratelimit import FX_CONVERT_LIMIT, limiter
from app.serializers import serialize_currency, serialize_fx_conversion

logger = logging.getLogger("tripmoney")
router = APIRouter()


@router.get("/fx/convert")
@limiter.limit(FX_CONVERT_LIMIT)
def fx_convert(
    request: Request,
    from_currency: str = Query(..., alias="from", min_length=3, max_length=3),
    to: str = Query(..., min_length=3, max_length=3),
    amount: float = Query(...),
    db: Session = Depends(get_db),
):
    if not math.isfinite(amount) or amount <= 0:
        raise HTTPException(status_code=400, detail="Invalid amount")

    try:
        conversion = convert_currency(db, from_currency, to, amount)
    except UnsupportedCurrencyError as e:
        logger.warning(f"FX conversion unsupported: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except ExchangeRateError as e:
        logger.error(
            f"FX conversion failed: {e}",
            exc_info=True,
            extra={"extra_data": {"from": from_currency.upper(), "to": to.upper()}},
        )
        raise HTTPException(status_code=502, detail="Failed to fetch exchange rate")

    return serialize_fx_conversion(conversion)


@router.get("/currencies")
def list_currencies():
    return [serialize_currency(info) for info in CURRENCIES_INFO]
