from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    # Base URL of the customers/orders API
    BACKEND_URL: str = "http://localhost:8000"
    BACKEND_TIMEOUT_SECONDS: float = 10.0

    SESSION_TTL_SECONDS: int = 8 * 60 * 60
    SESSION_MAX_ENTRIES: int = 1024

    LOG_LEVEL: str = "INFO"
    SERVICE_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"

    class Config:
        env_file = ".env"
        extra = "ignore"

@lru_cache
def get_settings() -> Settings:
    return Settings()
