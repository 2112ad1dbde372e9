from pydantic_settings import BaseSettings
from typing import List, Union, Optional
from pydantic import field_validator


class Settings(BaseSettings):
    # Database
    DATABASE_URL: Optional[str] = None  # Takes precedence over POSTGRES_* parts
    POSTGRES_USER: str = "litaria"
    POSTGRES_PASSWORD: str = ""
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "litaria"

    @property
    def SQLALCHEMY_DATABASE_URL(self) -> str:
        """Database URL, either given directly or built from components."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Application
    SECRET_KEY: str
    ENVIRONMENT: str = "development"  # development | production | test
    DEBUG: bool = False
    APP_VERSION: str = "1.0.0"
    CORS_ORIGINS: Union[List[str], str] = ["http://localhost:3000"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    # Content
    SUPPORTED_LANGUAGES: Union[List[str], str] = ["en", "bn"]
    DEFAULT_LANGUAGE: str = "en"

    @field_validator("SUPPORTED_LANGUAGES", mode="before")
    @classmethod
    def parse_languages(cls, v):
        if isinstance(v, str):
            return [lang.strip() for lang in v.split(",") if lang.strip()]
        return v

    # Scheduled publishing
    SCHEDULED_PUBLISH_INTERVAL: int = 5  # minutes
    SCHEDULER_ENABLED: bool = True

    # Storage
    MEDIA_ROOT: str = "./media"

    # Image upload
    MAX_IMAGE_SIZE: int = 5 * 1024 * 1024  # 5MB per image
    ALLOWED_IMAGE_TYPES: List[str] = [
        "image/jpeg",
        "image/png",
        "image/webp",
    ]

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True

    # Cookie Security
    COOKIE_SECURE: bool = True  # Set to False for local development without HTTPS
    COOKIE_SAMESITE: str = "lax"  # Options: "strict", "lax", "none"
    COOKIE_DOMAIN: Optional[str] = None
    ENABLE_HSTS: bool = True
    HSTS_MAX_AGE: int = 31536000  # 1 year in seconds
    HSTS_INCLUDE_SUBDOMAINS: bool = True
    HSTS_PRELOAD: bool = False

    @property
    def is_production(self) -> bool:
        """Detect if running in production environment."""
        return self.ENVIRONMENT == "production" and not self.DEBUG

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


settings = Settings()
