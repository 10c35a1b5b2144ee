import os

from app.receipt.base import ReceiptTextExtractor
from app.receipt.openai_provider import OpenAIReceiptTextExtractor

PROVIDERS = ("openai",)


def get_receipt_provider_name() -> str:
    return os.getenv("RECEIPT_PROVIDER", "openai")


def get_receipt_extractor() -> ReceiptTextExtractor:
    """Return the configured receipt OCR provider."""
    provider = get_receipt_provider_name()
    if provider == "openai":
        return OpenAIReceiptTextExtractor()
    raise ValueError(f"Unknown receipt provider: {provider}")
