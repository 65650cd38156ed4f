# app/core/config.py
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

from settings import DatabaseConfig


class Settings(BaseSettings):
    DATABASE_URL: str = DatabaseConfig.POSTGRES_URL
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="allow")  # ✅ allow additional fields from .env

settings = Settings()
