import os

from slowapi import Limiter
from slowapi.util import get_remote_address

RECEIPT_EXTRACT_LIMIT = os.getenv("RECEIPT_EXTRACT_RATE_LIMIT", "10/minute")
FX_CONVERT_LIMIT = os.getenv("FX_CONVERT_RATE_LIMIT", "60/minute")

limiter = Limiter(
    key_func=get_remote_address,
    enabled=os.getenv("RATE_LIMIT_ENABLED", "true").lower() in ("1", "true", "yes"),
)
