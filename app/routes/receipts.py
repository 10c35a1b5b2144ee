import logging
import os

from fastapi import APIRouter, HTTPException, Request, UploadFile, File

from app.ratelimit import RECEIPT_EXTRACT_LIMIT, limiter
from app.receipt.base import ParsedReceipt
from app.receipt.factory import PROVIDERS, get_receipt_extractor, get_receipt_provider_name
from app.receipt.text_parser import parse_receipt_text
from app.schemas import ParseReceiptTextIn
from app.serializers import serialize_parsed_receipt

logger = logging.getLogger("tripmoney")
router = APIRouter()

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB
ALLOWED_CONTENT_TYPES = {
    "image/jpeg", "image/jpg", "image/png", "image/webp", "image/heic", "image/heif",
}


def receipt_scanning_enabled() -> bool:
    return get_receipt_provider_name() in PROVIDERS and bool(os.getenv("OPENAI_API_KEY"))


def _log_parsed(receipt: ParsedReceipt, source: str) -> None:
    logger.info(
        "Receipt parsed",
        extra={"extra_data": {
            "source": source,
            "found": [
                name for name in ("amount", "currency", "date", "merchant")
                if getattr(receipt, name) is not None
            ],
        }},
    )


@router.get("/receipts/status")
def receipt_status():
    return {"enabled": receipt_scanning_enabled(), "provider": get_receipt_provider_name()}


@router.post("/receipts/parse-text")
def parse_text(data: ParseReceiptTextIn):
    receipt = parse_receipt_text(data.text)
    _log_parsed(receipt, "text")
    return serialize_parsed_receipt(receipt)


@router.post("/receipts/extract")
@limiter.limit(RECEIPT_EXTRACT_LIMIT)
async def extract_receipt(
    request: Request,
    image: UploadFile = File(...),
):
    if image.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400, detail="Unsupported image format. Use JPEG, PNG, WebP or HEIC."
        )

    image_bytes = await image.read()
    if len(image_bytes) == 0:
        raise HTTPException(status_code=400, detail="Empty file")
    if len(image_bytes) > MAX_FILE_SIZE:
        raise HTTPException(status_code=400, detail="Image too large. Maximum size is 10 MB.")

    # Unconfigured scanning returns an empty result, not an error
    if not receipt_scanning_enabled():
        logger.warning("Receipt scanning requested but not configured")
        return serialize_parsed_receipt(ParsedReceipt())

    try:
        extractor = get_receipt_extractor()
        text = await extractor.extract_text(image_bytes, image.content_type)
    except ValueError as e:
        logger.error(f"Receipt extraction config error: {e}")
        return serialize_parsed_receipt(ParsedReceipt())
    except Exception as e:
        logger.error(f"Receipt extraction failed: {e}", exc_info=True)
        return serialize_parsed_receipt(ParsedReceipt())

    receipt = parse_receipt_text(text)
    _log_parsed(receipt, "image")
    return serialize_parsed_receipt(receipt)
