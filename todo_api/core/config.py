# todo_api/core/config.py
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    # 앱
    app_version: str = Field("0.1.0", alias="APP_VERSION")
    api_prefix: str = Field("/api", alias="API_PREFIX")
    cors_allow_origins: str = Field("http://localhost:3000", alias="CORS_ALLOW_ORIGINS")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # JWT
    jwt_secret: str = Field(..., alias="JWT_SECRET")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    jwt_access_expiration: str = Field("15m", alias="JWT_ACCESS_EXPIRATION")
    jwt_refresh_expiration: str = Field("7d", alias="JWT_REFRESH_EXPIRATION")

    # 해시 / 비밀번호 재설정
    bcrypt_rounds: int = Field(10, alias="BCRYPT_ROUNDS")
    reset_token_ttl_seconds: int = Field(3600, alias="RESET_TOKEN_TTL_SECONDS")

    # 저장소
    database_url: str = Field(..., alias="DATABASE_URL")
    redis_url: str = Field("redis://localhost:6379/0", alias="REDIS_URL")
    cache_backend: str = Field("redis", alias="CACHE_BACKEND")
    cache_default_ttl_ms: int = Field(300_000, alias="CACHE_DEFAULT_TTL_MS")

    rate_limit_per_min: int = Field(100, alias="RATE_LIMIT_PER_MIN")

    @field_validator("jwt_secret")
    @classmethod
    def _secret_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("JWT_SECRET must not be empty")
        return v

    @field_validator("cache_backend")
    @classmethod
    def _known_backend(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("redis", "memory"):
            raise ValueError("CACHE_BACKEND must be one of memory|redis")
        return v

    @property
    def origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Resolve configuration once per process. Raises when JWT_SECRET/DATABASE_URL are missing."""
    return Settings()
