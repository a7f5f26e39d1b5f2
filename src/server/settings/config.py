from pydantic import BaseModel
from dotenv import load_dotenv
from typing import List, Optional
import os
from pathlib import Path

load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


class Settings(BaseModel):
    app_name: str = "Mercado do Vale - Catálogo"
    environment: str = os.getenv("ENVIRONMENT", "dev")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./catalog.db")
    debug: bool = os.getenv("DEBUG", "0") == "1"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Local durable storage (quote carts, favorites)
    storage_dir: str = os.getenv("STORAGE_DIR", "./knowledge/storage")

    settings_cache_minutes: int = int(os.getenv("SETTINGS_CACHE_MINUTES", "15"))
    default_page_size: int = int(os.getenv("PAGE_SIZE", "12"))

    whatsapp_number: Optional[str] = os.getenv("WHATSAPP_NUMBER") or None
    payment_fees_path: str = os.getenv(
        "PAYMENT_FEES_PATH", str(PROJECT_ROOT / "knowledge" / "catalogs" / "payment_fees.yaml")
    )
    cors_origins: List[str] = _split_csv(
        os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173")
    )

settings = Settings()
