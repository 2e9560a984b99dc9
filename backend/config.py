# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    REFRESH_SECRET_KEY: str = "dev-refresh-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    DATABASE_URL: str = "sqlite:///./database_shop.db"

    FRONTEND_URL: str = "http://localhost:5173"
    COOKIE_SECURE: bool = False
    UPLOAD_DIR: str = "static/uploads"
    LOG_LEVEL: str = "INFO"

    # Outbound email; an empty host disables delivery
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USER: str = ""
    SMTP_PASSWORD: str = ""
    EMAIL_FROM: str = "no-reply@shop.local"

    # Order pricing rules
    FREE_SHIPPING_THRESHOLD: float = 500
    SHIPPING_FEE: float = 50
    TAX_RATE: float = 0.18

    LOW_STOCK_THRESHOLD: int = 10

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
