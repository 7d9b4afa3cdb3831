from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
from pathlib import Path
import logging
import urllib.parse

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    PROJECT_NAME: str = "InvoiceDesk API"
    PROJECT_VERSION: str = "0.1.0"
    API_V1_STR: str = "/api/v1"
    SERVER_HOST: str = "http://localhost:8000"

    # Database
    POSTGRES_SERVER: Optional[str] = "localhost"
    POSTGRES_USER: Optional[str] = "invoicedesk"
    POSTGRES_PASSWORD: Optional[str] = "securepassword123" # Default, should be overridden by .env
    POSTGRES_DB: Optional[str] = "invoicedesk"
    POSTGRES_PORT: int = 5432
    DATABASE_URL: Optional[str] = None # Built from POSTGRES_* unless given explicitly

    # Security
    SECRET_KEY: str = "a_very_secret_key_that_should_be_strong_and_from_env" # CHANGE THIS IN .ENV
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    BCRYPT_ROUNDS: int = 12

    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    LOG_LEVEL: str = "INFO"

    # Business defaults
    DEFAULT_CURRENCY: str = "BDT"
    INVOICE_NUMBER_PREFIX: str = "INV-"
    QUOTATION_NUMBER_PREFIX: str = "QT-"
    TRIAL_DAYS: int = 7

    model_config = SettingsConfigDict(
        # backend/invoicedesk/core/config.py -> project root
        env_file=Path(__file__).resolve().parent.parent.parent.parent / ".env",
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=True
    )

settings = Settings()

# Construct DATABASE_URL after settings are loaded, unless one was given
if not settings.DATABASE_URL:
    if settings.POSTGRES_USER and settings.POSTGRES_PASSWORD and \
       settings.POSTGRES_SERVER and settings.POSTGRES_DB and settings.POSTGRES_PORT:
        encoded_password = urllib.parse.quote_plus(settings.POSTGRES_PASSWORD)
        settings.DATABASE_URL = (
            f"postgresql+asyncpg://{settings.POSTGRES_USER}:{encoded_password}@"
            f"{settings.POSTGRES_SERVER}:{settings.POSTGRES_PORT}/{settings.POSTGRES_DB}"
        )
    else:
        logger.warning("Database URL could not be constructed. Check POSTGRES environment variables in .env.")
