# familyhub/core/config.py
import secrets
from typing import List, Literal, Optional, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Environment settings
    ENVIRONMENT: Literal["development", "testing", "production"] = "development"

    # API settings
    API_STR: str = "/api"
    SECRET_KEY: str = secrets.token_urlsafe(32)
    JWT_ALGORITHM: str = "HS256"

    # Pre-shared secret for trusted service callers (cron jobs, edge functions)
    SERVICE_ROLE_KEY: Optional[str] = None

    # CORS settings
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost",
        "http://localhost:3000",
    ]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None  # Path to log file if file logging is enabled

    # Database settings
    SQLALCHEMY_DATABASE_URI: str = "sqlite:///./familyhub.db"

    # CSRF settings
    CSRF_ENABLED: bool = True
    CSRF_TOKEN_BYTES: int = 32
    CSRF_TOKEN_TTL_SECONDS: int = 24 * 60 * 60
    CSRF_HEADER_NAME: str = "x-csrf-token"
    CSRF_COOKIE_NAME: str = "csrf-token"
    CSRF_SESSION_COOKIE_NAME: str = "csrf-session"
    CSRF_TOKEN_STORE: Literal["database", "memory"] = "database"
    CSRF_EXEMPT_PATHS: List[str] = []

    # Sync settings
    DEFAULT_EVENT_DURATION_MINUTES: int = 60
    SYNC_STEP_TIMEOUT: float = 30

    # API Call Timeouts (in seconds)
    DEFAULT_TIMEOUT: float = 30

    # Origin used by the event adapters
    API_BASE_URL: str = "http://localhost:8000"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )


# Create settings instance
settings = Settings()
