# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    # VAT applied to positions submitted without an explicit rate
    DEFAULT_VAT_RATE: float = 22.0
    DEFAULT_LOCALE: str = "it"

    LOG_LEVEL: str = "INFO"
    FRONTEND_URL: Optional[str] = None

    # Where generated proposal PDFs are stored
    PDF_STORAGE_DIR: str = "storage/proposals"

    class Config:
        env_file: ClassVar[str] = str(env_path)
        # .env is shared with database.py, which reads DATABASE_URL itself
        extra: ClassVar[str] = "ignore"

settings = Settings()
