from pydantic import BaseModel, Field


# --- Receipts ---

class ParseReceiptTextIn(BaseModel):
    text: str = Field(max_length=20_000)  # OCR output is a few thousand chars at most
