from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import field_validator
from typing import Annotated, Any, ClassVar
import json
from pathlib import Path


class Settings(BaseSettings):
    API_V1_STR: str = "/api/v1"

    # JWT configuration shared with the credential service that issues tokens
    SECRET_KEY: str = "fallback_secret_for_dev_only"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Database URL
    # Use an absolute path so running the app from different directories
    # (e.g., repo root or backend/) always resolves the same DB file.
    BASE_DIR: ClassVar[Path] = Path(__file__).resolve().parents[2]
    SQLALCHEMY_DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'studiobook.db'}"

    # Pool sizing for non-SQLite engines
    DB_POOL_SIZE: int = 6
    DB_MAX_OVERFLOW: int = 6
    DB_POOL_RECYCLE: int = 300
    DB_POOL_TIMEOUT: float = 5.0

    # Redis connection URL for the availability cache.
    # Empty, "none" or "disabled" turns caching off.
    REDIS_URL: str = "redis://localhost:6379/0"
    AVAILABILITY_CACHE_TTL: int = 300

    # CORS origins
    CORS_ORIGINS: Annotated[list[str], NoDecode] = ["http://localhost:3000"]

    # Logging / tracing
    LOG_LEVEL: str = "INFO"
    DISABLE_ACCESS_LOG: bool | None = None
    ENABLE_TRACING: bool = False
    ENABLE_CONSOLE_TRACING: bool = True

    # Overlap rule for the conflict check. False keeps inclusive bounds, so a
    # booking ending at 10:00 blocks another starting at 10:00.
    BOOKING_ALLOW_BACK_TO_BACK: bool = False

    @field_validator("CORS_ORIGINS", mode="before")
    def split_origins(cls, v: Any) -> list[str]:
        """Parse comma-separated or JSON list of origins from environment."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                pass
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("REDIS_URL", mode="before")
    def strip_redis_url(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
