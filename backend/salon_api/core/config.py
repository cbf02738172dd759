from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    PROJECT_NAME: str = "Salon Booking API"
    API_V1_STR: str = "/api"
    ENVIRONMENT: str = "local"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DATABASE_URL: str = "sqlite:///./salon.db"
    SECRET_KEY: str = "changeme"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30
    JWT_ALGORITHM: str = "HS256"
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Tenants live on {subdomain}.ROOT_DOMAIN
    ROOT_DOMAIN: str = "cxrsystems.com"

    # Redis configuration
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_CACHE_URL: str = "redis://localhost:6379/1"  # "memory://" skips Redis
    CACHE_DEFAULT_TTL: int = 300
    AVAILABILITY_CACHE_TTL: int = 300
    RATE_LIMIT_STORAGE_URI: Optional[str] = None

    # Slot generation
    SLOT_INTERVAL_MINUTES: int = 30
    MAX_SLOTS_PER_DAY: int = 100
    DEFAULT_SERVICE_DURATION: int = 60

    # Celery configuration
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"
    CELERY_TASK_ALWAYS_EAGER: bool = False

    # Web push
    VAPID_PRIVATE_KEY: str = ""
    VAPID_PUBLIC_KEY: str = ""
    VAPID_CLAIMS_EMAIL: str = "mailto:admin@cxrsystems.com"

    # Referral rewards
    REFERRAL_REFERRER_POINTS: int = 200
    REFERRAL_REFERRED_POINTS: int = 100
    REFERRAL_AUTO_APPROVE: bool = True
    REFERRAL_EXPIRY_DAYS: int = 30
    REFERRAL_TIER_MULTIPLIERS: Dict[str, float] = {
        "bronze": 1.0,
        "gold": 1.5,
        "platinum": 2.0,
    }

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: List[str] | str) -> List[str]:
        """Allow both comma-separated strings and list inputs."""
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("VAPID_CLAIMS_EMAIL")
    @classmethod
    def ensure_mailto(cls, value: str) -> str:
        if value and not value.startswith("mailto:"):
            return f"mailto:{value}"
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
