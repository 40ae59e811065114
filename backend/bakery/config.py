from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./bakery.db"
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 8000
    SECRET_KEY: str = "change-this-secret"
    JWT_ALGORITHM: str = "HS256"
    FRONTEND_ORIGINS: List[str] = ["http://localhost:5173"]
    PAYMENT_MOCK_DELAY_MS: int = 200
    LOG_LEVEL: str = "INFO"
    RESET_DB: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
