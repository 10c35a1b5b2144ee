from typing import Generic, Protocol, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ParsedField(BaseModel, Generic[T]):
    model_config = ConfigDict(frozen=True)

    value: T | None = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)  # heuristic, not a probability


class ReceiptConfidence(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: float = 0.0
    currency: float = 0.0
    date: float = 0.0
    merchant: float = 0.0


class ParsedReceipt(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: float | None = None  # display units (e.g. 45.00 for $45.00)
    currency: str | None = None  # ISO 4217 code
    date: str | None = None  # YYYY-MM-DD
    merchant: str | None = None
    confidence: ReceiptConfidence = ReceiptConfidence()

    @classmethod
    def from_fields(
        cls,
        amount: ParsedField[float],
        currency: ParsedField[str],
        date: ParsedField[str],
        merchant: ParsedField[str],
    ) -> "ParsedReceipt":
        return cls(
            amount=amount.value,
            currency=currency.value,
            date=date.value,
            merchant=merchant.value,
            confidence=ReceiptConfidence(
                amount=amount.confidence,
                currency=currency.confidence,
                date=date.confidence,
                merchant=merchant.confidence,
            ),
        )


class ReceiptTextExtractor(Protocol):
    async def extract_text(self, image_bytes: bytes, content_type: str) -> str: ...
