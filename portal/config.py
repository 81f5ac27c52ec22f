import os
from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    ENV: str = os.getenv("ENV", "development")  # development, staging, production
    DEBUG: bool = ENV in ["development", "staging"]

    # Database settings
    POSTGRES_HOST: str = os.getenv("POSTGRES_HOST", "localhost")
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "portal")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "portalpass")
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "portal_db")
    POSTGRES_PORT: int = int(os.getenv("POSTGRES_PORT", "5432"))
    DATABASE_URL: str = os.getenv("DATABASE_URL", f"postgresql://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DB}")

    # Database connection pool settings
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "10"))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "0"))
    DB_POOL_TIMEOUT: int = int(os.getenv("DB_POOL_TIMEOUT", "10"))
    DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "3600"))

    # Auth settings
    # Must match the main system's JWT secret so staff-issued tokens verify here too
    SECRET_KEY: str = os.getenv("JWT_SECRET", "customer-portal-secret-key")
    ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_DAYS: int = int(os.getenv("JWT_EXPIRE_DAYS", "7"))

    # Login lockout
    LOGIN_MAX_ATTEMPTS: int = int(os.getenv("LOGIN_MAX_ATTEMPTS", "5"))
    LOGIN_LOCKOUT_MINUTES: int = int(os.getenv("LOGIN_LOCKOUT_MINUTES", "30"))
    PASSWORD_MIN_LENGTH: int = int(os.getenv("PASSWORD_MIN_LENGTH", "6"))

    # Per-IP request throttling (limits notation, e.g. "5 per 15 minutes")
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "100 per 15 minutes")
    RATE_LIMIT_LOGIN: str = os.getenv("RATE_LIMIT_LOGIN", "5 per 15 minutes")

    # Number of reverse proxies in front of the app whose X-Forwarded-For entries are trusted
    TRUSTED_PROXY_HOPS: int = int(os.getenv("TRUSTED_PROXY_HOPS", "1"))

    # API keys
    API_KEY_MAX_ACTIVE: int = int(os.getenv("API_KEY_MAX_ACTIVE", "5"))
    API_KEY_DEFAULT_RATE_LIMIT: int = int(os.getenv("API_KEY_DEFAULT_RATE_LIMIT", "1000"))

    # CORS - comma separated list of origins
    CORS_ORIGINS: str = os.getenv(
        "CORS_ORIGINS",
        "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173",
    )

    @property
    def CORS_ORIGIN_LIST(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # API specific settings
    API_PREFIX: str = "/api"
    APP_NAME: str = "Customer Portal"
    APP_VERSION: str = "1.0.0"

    class Config:
        case_sensitive = True
        env_file = None

settings = Settings()
