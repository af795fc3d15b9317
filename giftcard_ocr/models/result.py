"""
Pydantic models for parsed gift card data.
"""

from pydantic import BaseModel, Field
from typing import Optional


class ParsedResult(BaseModel):
    """
    Structured fields extracted from one OCR transcript.

    Every field is optional and independent. Values are meant to pre-fill an
    editable form, never to be trusted blindly.
    """
    card_number: Optional[str] = Field(default=None, alias="cardNumber")
    balance: Optional[str] = None  # Two fraction digits, e.g. "45.00"
    expiration_date: Optional[str] = Field(default=None, alias="expirationDate")  # YYYY-MM-DD
    brand: Optional[str] = None
    pin: Optional[str] = None
    confidence: int = Field(default=0, ge=0, le=100)

    class Config:
        populate_by_name = True
        frozen = True

    def found_fields(self) -> list[str]:
        """Names of the extracted fields that are populated."""
        return [
            name for name in ('card_number', 'balance', 'expiration_date', 'brand', 'pin')
            if getattr(self, name) is not None
        ]
