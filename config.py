from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent
load_dotenv(BASE_DIR / ".env")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


class Settings:
    """Runtime settings for the gold price backend, read from the environment."""

    def __init__(self) -> None:
        self.service_name: str = os.getenv("SERVICE_NAME", "gold-price-backend")
        self.version: str = os.getenv("SERVICE_VERSION", "1.0.0")
        self.gold_symbol: str = os.getenv("GOLD_SYMBOL", "GC=F")
        self.refresh_interval_minutes: int = _int_env("REFRESH_INTERVAL_MINUTES", 5)
        self.host: str = os.getenv("HOST", "0.0.0.0")
        self.port: int = _int_env("PORT", 3000)
        self.log_level: str = os.getenv("LOG_LEVEL", "INFO")
        self.cors_origins: List[str] = [
            o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
        ] or ["*"]
        self.price_source: str = "Yahoo Finance API (Cached)"
        if self.refresh_interval_minutes <= 0:
            raise ValueError("REFRESH_INTERVAL_MINUTES must be positive")


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
