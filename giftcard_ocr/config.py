from decimal import Decimal
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # App
    APP_NAME: str = "GiftCard OCR"
    DEBUG: bool = False

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:8081"]

    # Expiration window (inclusive years). Dates outside are treated as noise.
    MIN_EXPIRY_YEAR: int = 2024
    MAX_EXPIRY_YEAR: int = 2040

    # Balance window (inclusive)
    MIN_BALANCE: Decimal = Decimal("5.00")
    MAX_BALANCE: Decimal = Decimal("2000.00")

    # HTTP
    MAX_TEXT_LENGTH: int = 20000

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
